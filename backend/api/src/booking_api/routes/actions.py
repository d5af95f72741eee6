"""Route actions callable from both HTTP endpoints and the WebSocket gateway."""

from collections.abc import Callable
from typing import Any, NamedTuple

from pydantic import BaseModel

from booking_api.models.common import TokenRequest
from booking_core.models import Session
from booking_core.services.booking import BookingService


class Action(NamedTuple):
    """Request body model and handler of one route."""

    body: type[TokenRequest]
    handler: Callable[[BookingService, Session, Any], BaseModel]
