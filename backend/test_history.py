"""Test route history and favorites."""
from datetime import datetime

import pytest

from conftest import make_directions_payload
from app.config import settings
from app.errors import RouteNotFound
from app.models import SavedRoute
from app.services.directions import DirectionsService
from app.services.history import (
    HistoryService,
    extract_business_name,
    extract_location_name,
    generate_route_name,
)

USER = "user-1"


def make_route(start="Home", end="First Colony Mall, Sugar Land, TX", stops=("Costco", "Target")):
    return DirectionsService.parse_directions_response(
        make_directions_payload(),
        start_location=start,
        end_location=end,
        stops=list(stops),
        consider_traffic=False,
    )


def test_location_names():
    assert extract_business_name("Costco, 3836 Richmond Ave, Houston") == "Costco"
    assert extract_business_name("Costco") == "Costco"
    assert extract_location_name("123 Main St, Austin, TX") == "Austin"
    assert extract_location_name("Costco, Houston, TX") == "Costco"
    assert extract_location_name("") == "Unknown"


def test_generate_route_name():
    assert generate_route_name("Costco, Houston", "123 Main St, Austin, TX") == "Costco → Austin"

    long_name = generate_route_name("A" * 40, "B" * 40, now=datetime(2024, 3, 5, 14, 30))
    assert long_name == "Route from Mar 05, 2024 at 02:30 PM"


def test_save_route(db):
    saved = HistoryService.save_route(db, USER, make_route())

    assert saved.id is not None
    assert saved.route_name == "Home → First Colony Mall"
    assert saved.stop_list == ["Costco", "Target"]
    assert saved.stop_display_name_list == ["Target", "Costco"]
    assert saved.start_location_display_name == "Home"
    assert len(saved.waypoint_order_list) == 4
    assert saved.is_favorite is False


def test_load_history_newest_first_and_limited(db, monkeypatch):
    monkeypatch.setattr(settings, "ROUTE_HISTORY_LIMIT", 3)
    for index in range(5):
        HistoryService.save_route(db, USER, make_route(start=f"Start {index}"))

    history = HistoryService.load_history(db, USER)
    assert [route.start_location for route in history] == ["Start 4", "Start 3", "Start 2"]
    assert len(HistoryService.load_history(db, USER, limit=10)) == 5


def test_get_route_is_per_user(db):
    saved = HistoryService.save_route(db, USER, make_route())

    with pytest.raises(RouteNotFound):
        HistoryService.get_route(db, "someone-else", saved.id)


def test_save_favorite_reuses_history_entry(db):
    route = make_route()
    saved = HistoryService.save_route(db, USER, route)

    favorite = HistoryService.save_favorite(db, USER, route, custom_name="  Saturday errands ")

    assert favorite.id == saved.id
    assert favorite.is_favorite is True
    assert favorite.custom_name == "Saturday errands"
    assert favorite.route_name == "Saturday errands"
    assert HistoryService.is_favorited(db, USER, route)


def test_save_favorite_creates_route_when_missing(db):
    route = make_route()

    favorite = HistoryService.save_favorite(db, USER, route)

    assert favorite.is_favorite is True
    assert favorite.custom_name is None
    assert favorite.route_name == "Home → First Colony Mall"
    assert db.query(SavedRoute).count() == 1


def test_remove_favorite(db):
    route = make_route()
    HistoryService.save_favorite(db, USER, route)

    assert HistoryService.remove_favorite(db, USER, route) == 1
    assert not HistoryService.is_favorited(db, USER, route)
    assert HistoryService.load_favorites(db, USER) == []


def test_set_favorite_by_id(db):
    saved = HistoryService.save_route(db, USER, make_route())

    HistoryService.set_favorite(db, USER, saved.id, True, custom_name="Weekly run")
    assert [r.route_name for r in HistoryService.load_favorites(db, USER)] == ["Weekly run"]

    HistoryService.set_favorite(db, USER, saved.id, False)
    assert HistoryService.load_favorites(db, USER) == []
    assert HistoryService.get_route(db, USER, saved.id).custom_name == "Weekly run"


def test_clear_history_keeps_favorites(db):
    kept = HistoryService.save_favorite(db, USER, make_route(start="Work"))
    HistoryService.save_route(db, USER, make_route())
    HistoryService.save_route(db, USER, make_route(start="Gym"))

    assert HistoryService.clear_history(db, USER) == 2
    assert [r.id for r in HistoryService.load_history(db, USER)] == [kept.id]

    assert HistoryService.clear_history(db, USER, keep_favorites=False) == 1
    assert HistoryService.load_history(db, USER) == []


def test_delete_route(db):
    saved = HistoryService.save_route(db, USER, make_route())

    HistoryService.delete_route(db, USER, saved.id)

    with pytest.raises(RouteNotFound):
        HistoryService.get_route(db, USER, saved.id)


def test_to_route_request_keeps_display_names(db):
    saved = HistoryService.save_route(db, USER, make_route())

    request = HistoryService.to_route_request(saved)

    assert request.start_location == "Home"
    assert request.stops == ["Costco", "Target"]
    assert [stop.name for stop in request.display_stops] == [
        "Home", "Target", "Costco", "First Colony Mall, Sugar Land, TX",
    ]
    assert request.display_stops[-1].type == "end"


def test_legacy_pipe_separated_stops(db):
    saved = HistoryService.save_route(db, USER, make_route())
    saved.stops = "Costco|||Target"
    db.commit()

    assert HistoryService.get_route(db, USER, saved.id).stop_list == ["Costco", "Target"]
