"""
Google Polyline encoding/decoding utilities.

The directions provider returns route geometry as an encoded polyline.
Coordinates are (lat, lng) tuples throughout, in the order they were encoded.
"""

import logging
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Seven 5-bit groups hold any delta up to precision 7 (360e7 zig-zagged < 2**35).
MAX_VALUE_BITS = 35


def _decode_value(encoded: str, index: int) -> Optional[Tuple[int, int]]:
    """
    Decode one zig-zag encoded delta starting at index.

    Returns:
        (delta, next_index), or None if the input ends mid-group, holds a
        character outside '?'..'~', or runs longer than any real delta
    """
    result = 0
    shift = 0
    length = len(encoded)

    while True:
        if index >= length:
            return None

        b = ord(encoded[index]) - 63
        if not 0 <= b <= 0x3f:
            return None
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if not b & 0x20:
            break
        if shift >= MAX_VALUE_BITS:
            return None

    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(encoded: str, precision: int = 5) -> List[Tuple[float, float]]:
    """
    Decode a Google Polyline encoded string into a list of (lat, lng) coordinates.

    Malformed input never raises. If the string is cut off in the middle of a
    value, or a value is corrupt (a character outside the encoding alphabet,
    or a group too long to be a coordinate delta), the coordinates decoded
    before that point are returned and the incomplete pair is dropped.

    Args:
        encoded: Polyline encoded string
        precision: Decimal places encoded (5 for Google, 6 for polyline6)

    Returns:
        List of (latitude, longitude) tuples
    """
    factor = 10 ** precision
    coordinates = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        decoded_lat = _decode_value(encoded, index)
        if decoded_lat is None:
            logger.debug("Polyline truncated or corrupt in latitude at index %d", index)
            break
        dlat, index = decoded_lat

        decoded_lng = _decode_value(encoded, index)
        if decoded_lng is None:
            logger.debug("Polyline truncated or corrupt in longitude at index %d", index)
            break
        dlng, index = decoded_lng

        lat += dlat
        lng += dlng
        coordinates.append((lat / factor, lng / factor))

    return coordinates


def encode_polyline(coordinates: Iterable[Tuple[float, float]], precision: int = 5) -> str:
    """
    Encode a list of (lat, lng) coordinates into a Google Polyline string.

    Args:
        coordinates: Iterable of (latitude, longitude) tuples
        precision: Decimal places to keep (5 for Google, 6 for polyline6)

    Returns:
        Polyline encoded string
    """
    factor = 10 ** precision
    encoded = []
    prev_lat = 0
    prev_lng = 0

    for lat, lng in coordinates:
        lat_int = int(round(lat * factor))
        lng_int = int(round(lng * factor))

        encoded.extend(_encode_value(lat_int - prev_lat))
        encoded.extend(_encode_value(lng_int - prev_lng))

        prev_lat = lat_int
        prev_lng = lng_int

    return ''.join(encoded)


def _encode_value(value: int) -> List[str]:
    """Encode a single coordinate delta value."""
    value = ~(value << 1) if value < 0 else (value << 1)

    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1f)) + 63))
        value >>= 5

    chunks.append(chr(value + 63))
    return chunks
