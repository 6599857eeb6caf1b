"""Shared pytest fixtures: in-memory database, API client and directions payloads."""
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import get_db, init_db, make_engine
from app.dependencies import get_directions_client
from app.main import app
from app.services.polyline import encode_polyline

# Houston -> two stops -> Sugar Land
LEG_POINTS = [
    (29.7604, -95.3698),
    (29.7499, -95.3584),
    (29.7172, -95.4018),
    (29.6197, -95.6349),
]


def make_directions_payload(status="OK", waypoint_order=(1, 0), with_traffic=True):
    """Directions API style response for LEG_POINTS."""
    legs = []
    addresses = [
        "901 Bagby St, Houston, TX 77002, USA",
        "2300 Gulf Fwy, Houston, TX 77003, USA",
        "5000 Westheimer Rd, Houston, TX 77056, USA",
        "2711 Town Center Blvd N, Sugar Land, TX 77479, USA",
    ]
    for index, (distance, duration) in enumerate([(3000, 600), (5000, 900), (24000, 1500)]):
        start_lat, start_lng = LEG_POINTS[index]
        end_lat, end_lng = LEG_POINTS[index + 1]
        leg = {
            "distance": {"value": distance, "text": ""},
            "duration": {"value": duration, "text": ""},
            "start_address": addresses[index],
            "end_address": addresses[index + 1],
            "start_location": {"lat": start_lat, "lng": start_lng},
            "end_location": {"lat": end_lat, "lng": end_lng},
        }
        if with_traffic:
            leg["duration_in_traffic"] = {"value": duration + 300, "text": ""}
        legs.append(leg)

    if status != "OK":
        return {"status": status, "routes": []}

    return {
        "status": "OK",
        "routes": [{
            "legs": legs,
            "waypoint_order": list(waypoint_order),
            "overview_polyline": {"points": encode_polyline(LEG_POINTS)},
        }],
    }


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def directions_handler():
    """Mutable holder for the mock directions handler; tests swap the payload."""
    state = {"payload": make_directions_payload(), "requests": [], "error": None}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        if state["error"] is not None:
            raise state["error"]
        return httpx.Response(200, json=state["payload"])

    state["handler"] = handler
    return state


@pytest.fixture
def client(db, directions_handler):
    def override_get_db():
        yield db

    def override_directions_client():
        return httpx.AsyncClient(transport=httpx.MockTransport(directions_handler["handler"]))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_directions_client] = override_directions_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
