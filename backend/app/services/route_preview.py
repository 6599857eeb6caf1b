"""
Static route preview rendering.

Draws a route path and its stop markers onto a fixed-size image framed by a
Viewport, using the same Web Mercator projection as the map client.
"""

from io import BytesIO
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from app.services.mercator import clamped_lnglat_to_mercator, pixels_per_meter
from app.services.route_display import RouteDisplay
from app.services.viewport import MercatorBoundsRefiner, Padding, Viewport, fit_viewport

RGBA = Tuple[int, int, int, int]

BACKGROUND: RGBA = (242, 239, 233, 255)
ROUTE_COLOR: RGBA = (0, 122, 255, 255)  # systemBlue
FALLBACK_ROUTE_COLOR: RGBA = (255, 59, 48, 255)  # systemRed, straight-line fallback

MARKER_COLORS = {
    "start": (52, 199, 89, 255),
    "stop": (0, 122, 255, 255),
    "end": (255, 59, 48, 255),
}


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> List[Tuple[int, int]]:
    """
    Generate pixel coordinates for a line using Bresenham's algorithm.

    Args:
        x0, y0: Start coordinates
        x1, y1: End coordinates

    Returns:
        List of (x, y) pixel coordinates
    """
    points = []
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    x, y = x0, y0

    while True:
        points.append((x, y))

        if x == x1 and y == y1:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy

    return points


class RoutePreview:
    """Rasterizes a route onto an RGBA canvas centered on a viewport."""

    def __init__(self, viewport: Viewport, width: int = 600, height: int = 400, tile_size: int = 256):
        """
        Initialize a preview canvas.

        Args:
            viewport: Center and zoom to frame
            width: Image width in pixels
            height: Image height in pixels
            tile_size: Map tile size the zoom level refers to
        """
        self.viewport = viewport
        self.width = width
        self.height = height
        self.scale = pixels_per_meter(viewport.zoom, tile_size)
        self.center_x, self.center_y = clamped_lnglat_to_mercator(viewport.longitude, viewport.latitude)
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.pixels[:, :] = BACKGROUND

    def to_pixel(self, lat: float, lng: float) -> Tuple[float, float]:
        """Project a coordinate to (unrounded) canvas pixels; y grows downward."""
        mx, my = clamped_lnglat_to_mercator(lng, lat)
        px = self.width / 2.0 + (mx - self.center_x) * self.scale
        py = self.height / 2.0 - (my - self.center_y) * self.scale
        return (px, py)

    def add_path(self, latlngs: List[Tuple[float, float]], color: RGBA = ROUTE_COLOR, width: int = 3) -> None:
        """
        Draw a polyline through consecutive coordinates.

        Args:
            latlngs: List of (lat, lng) coordinates in route order
            color: Line color
            width: Line width in pixels
        """
        if len(latlngs) < 2:
            return

        projected = [self.to_pixel(lat, lng) for lat, lng in latlngs]

        for (x0, y0), (x1, y1) in zip(projected, projected[1:]):
            clipped = self._clip_segment(x0, y0, x1, y1)
            if clipped is None:
                continue
            cx0, cy0, cx1, cy1 = clipped
            for px, py in bresenham_line(round(cx0), round(cy0), round(cx1), round(cy1)):
                self._stamp(px, py, width // 2, color)

    def add_marker(self, lat: float, lng: float, stop_type: str = "stop", radius: int = 6) -> None:
        """Draw a filled circle for a stop."""
        cx, cy = self.to_pixel(lat, lng)
        yy, xx = np.ogrid[:self.height, :self.width]
        mask = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius ** 2
        self.pixels[mask] = MARKER_COLORS.get(stop_type, MARKER_COLORS["stop"])

    def _stamp(self, px: int, py: int, half: int, color: RGBA) -> None:
        """Paint a (2 * half + 1) square centered on a pixel, clipped to the canvas."""
        x_lo = max(0, px - half)
        x_hi = min(self.width, px + half + 1)
        y_lo = max(0, py - half)
        y_hi = min(self.height, py + half + 1)
        if x_lo < x_hi and y_lo < y_hi:
            self.pixels[y_lo:y_hi, x_lo:x_hi] = color

    def _clip_segment(
        self, x0: float, y0: float, x1: float, y1: float
    ) -> Optional[Tuple[float, float, float, float]]:
        """
        Clip a segment to the canvas using the Cohen-Sutherland algorithm.

        Returns:
            (x0, y0, x1, y1) clipped coordinates, or None if the segment misses the canvas
        """
        min_x, min_y = 0.0, 0.0
        max_x, max_y = float(self.width - 1), float(self.height - 1)

        INSIDE, LEFT, RIGHT, BOTTOM, TOP = 0, 1, 2, 4, 8

        def edge_code(x: float, y: float) -> int:
            code = INSIDE
            if x < min_x:
                code |= LEFT
            elif x > max_x:
                code |= RIGHT
            if y < min_y:
                code |= TOP
            elif y > max_y:
                code |= BOTTOM
            return code

        code0 = edge_code(x0, y0)
        code1 = edge_code(x1, y1)

        while True:
            if not (code0 | code1):
                return (x0, y0, x1, y1)
            if code0 & code1:
                return None

            code_out = code0 or code1

            if code_out & BOTTOM:
                x = x0 + (x1 - x0) * (max_y - y0) / (y1 - y0)
                y = max_y
            elif code_out & TOP:
                x = x0 + (x1 - x0) * (min_y - y0) / (y1 - y0)
                y = min_y
            elif code_out & RIGHT:
                y = y0 + (y1 - y0) * (max_x - x0) / (x1 - x0)
                x = max_x
            else:
                y = y0 + (y1 - y0) * (min_x - x0) / (x1 - x0)
                x = min_x

            if code_out == code0:
                x0, y0 = x, y
                code0 = edge_code(x0, y0)
            else:
                x1, y1 = x, y
                code1 = edge_code(x1, y1)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def render_to_png(self) -> bytes:
        """
        Render the canvas to PNG bytes.

        Returns:
            PNG image as bytes
        """
        buffer = BytesIO()
        self.to_image().save(buffer, format='PNG', optimize=True)
        return buffer.getvalue()


def render_route_preview(display: RouteDisplay, width: int = 600, height: int = 400, margin: int = 24) -> bytes:
    """
    Render a RouteDisplay to a PNG preview.

    The viewport is refitted for the preview size, since the display's own
    viewport was fitted for the client map.

    Args:
        display: RouteDisplay with markers and path
        width: Image width in pixels
        height: Image height in pixels
        margin: Padding kept around the route, in pixels

    Returns:
        PNG image as bytes
    """
    marker_points = [(marker.latitude, marker.longitude) for marker in display.markers]
    viewport = fit_viewport(
        list(display.path) + marker_points,
        refiner=MercatorBoundsRefiner(width, height),
        padding=Padding(top=margin, left=margin, bottom=margin, right=margin),
    )

    preview = RoutePreview(viewport, width=width, height=height)
    path_color = ROUTE_COLOR if display.path_source == "polyline" else FALLBACK_ROUTE_COLOR
    preview.add_path(display.path, color=path_color)
    for marker in display.markers:
        preview.add_marker(marker.latitude, marker.longitude, marker.type)

    return preview.render_to_png()
