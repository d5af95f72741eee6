"""API routes package.

Routers are organized by domain:

- booking: Booking create/quote, management, cancellation and review
- calendar: Host calendar blocks and custom prices

All routers are registered in main.py with /api prefix. ACTIONS maps
WebSocket route names to the same handlers.
"""

from booking_api.routes.actions import Action
from booking_api.routes.booking import ACTIONS as BOOKING_ACTIONS
from booking_api.routes.booking import router as booking_router
from booking_api.routes.calendar import ACTIONS as CALENDAR_ACTIONS
from booking_api.routes.calendar import router as calendar_router

ACTIONS: dict[str, Action] = {**BOOKING_ACTIONS, **CALENDAR_ACTIONS}

__all__ = [
    "ACTIONS",
    "Action",
    "booking_router",
    "calendar_router",
]
