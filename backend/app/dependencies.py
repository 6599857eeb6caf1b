"""FastAPI dependencies for identifying the current user."""
from typing import Optional

import httpx
from fastapi import Header, Request

GUEST_USER_ID = "guest_user"


def get_user_id(request: Request, x_user_id: Optional[str] = Header(None)) -> str:
    """
    Get the ID of the user making the request.

    Uses the session first, then the X-User-Id header sent by the mobile
    client. Unauthenticated requests share the guest identity.
    """
    user_id = request.session.get("user_id")

    if not user_id and x_user_id:
        user_id = x_user_id.strip()

    return user_id or GUEST_USER_ID


def get_directions_client() -> Optional[httpx.AsyncClient]:
    """
    HTTP client for the directions provider.

    None lets DirectionsService open its own client per request; tests
    override this to inject a mock transport.
    """
    return None
