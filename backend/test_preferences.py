"""Test user preferences and distance formatting."""
import pytest

from app.services.preferences import (
    DEFAULTS,
    PreferencesService,
    distance_unit_symbol,
    format_distance,
)

USER = "user-1"


@pytest.mark.parametrize("meters, unit, expected", [
    (1609.34, "miles", "1.0 mi"),
    (32000, "miles", "19.9 mi"),
    (100, "miles", "328 ft"),
    (50, "kilometers", "50 m"),
    (12500, "kilometers", "12.5 km"),
])
def test_format_distance(meters, unit, expected):
    assert format_distance(meters, unit) == expected


def test_distance_unit_symbol():
    assert distance_unit_symbol("miles") == "mi"
    assert distance_unit_symbol("kilometers") == "km"


def test_defaults_created_on_first_read(db):
    prefs = PreferencesService.get_preferences(db, USER)

    assert PreferencesService.to_dict(prefs) == {**DEFAULTS, "distance_unit_symbol": "mi"}
    assert PreferencesService.get_preferences(db, USER).id == prefs.id


def test_partial_update(db):
    prefs = PreferencesService.update_preferences(db, USER, distance_unit="kilometers")

    assert prefs.distance_unit == "kilometers"
    assert prefs.default_traffic_enabled is True

    prefs = PreferencesService.update_preferences(db, USER, auto_save_routes=False)
    assert prefs.distance_unit == "kilometers"
    assert prefs.auto_save_routes is False


def test_invalid_unit(db):
    with pytest.raises(ValueError):
        PreferencesService.update_preferences(db, USER, distance_unit="furlongs")


def test_reset_to_defaults(db):
    PreferencesService.update_preferences(
        db, USER, default_round_trip=True, default_traffic_enabled=False, distance_unit="kilometers"
    )

    prefs = PreferencesService.reset_to_defaults(db, USER)

    assert prefs.default_round_trip is False
    assert prefs.default_traffic_enabled is True
    assert prefs.distance_unit == "miles"
