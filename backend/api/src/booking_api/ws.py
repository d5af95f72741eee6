"""WebSocket gateway.

Clients connect to ``/api/ws?token=<session token>`` and send JSON frames
``{"route": "booking/listings/create", ...body}``. Each frame is validated
with the route's request model and answered with one reply frame:

- success: ``{"route", "success": true, "data": <response body>}``
- failure: ``{"route", "success": false, "error_code", "message",
  "statusCode", "details"}``

A user holds at most one live connection; a new one replaces the old.
"""

from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from booking_api.dependencies import (
    get_booking_service,
    get_connection_registry,
    get_session_service,
)
from booking_api.exceptions import (
    error_body,
    internal_error_response,
    validation_error_response,
)
from booking_api.routes import ACTIONS
from booking_core.models import BookingError, ErrorCode, ErrorResponse, Session
from booking_core.services.booking import BookingService
from booking_core.services.connections import ConnectionRegistry
from booking_core.services.sessions import SessionService
from booking_core.utils.logging import get_logger, set_correlation_id

logger = get_logger(__name__)

router = APIRouter(tags=["websocket"])

# Close code sent to a socket replaced by a newer connection of the same user
REPLACED_CLOSE_CODE = 4000
POLICY_VIOLATION_CLOSE_CODE = 1008


async def dispatch(
    frame: Any, session: Session, token: str, service: BookingService
) -> dict[str, Any]:
    """Run one frame through its route and build the reply frame."""
    route = frame.get("route") if isinstance(frame, dict) else None
    action = ACTIONS.get(route) if isinstance(route, str) else None
    if action is None:
        return _error_frame(
            route, ErrorResponse.from_code(ErrorCode.INVALID_REQUEST, {"route": route})
        )

    payload = {k: v for k, v in frame.items() if k != "route"}
    payload.setdefault("token", token)
    try:
        body = action.body.model_validate(payload)
    except ValidationError as e:
        return _error_frame(route, validation_error_response(list(e.errors())))

    set_correlation_id()
    try:
        result = await run_in_threadpool(action.handler, service, session, body)
    except BookingError as e:
        return _error_frame(route, e.to_response())
    except Exception:
        logger.exception("Unhandled exception on route %s", route)
        return _error_frame(route, internal_error_response())
    return {"route": route, "success": True, "data": result.model_dump(mode="json")}


def _error_frame(route: Any, response: ErrorResponse) -> dict[str, Any]:
    return {"route": route, **error_body(response)}


async def _close_replaced(websocket: WebSocket, uid: str) -> None:
    try:
        await websocket.close(code=REPLACED_CLOSE_CODE)
    except RuntimeError as e:
        logger.warning("Replaced connection for user %s was already closed: %s", uid, e)


@router.websocket("/ws")
async def websocket_gateway(
    websocket: WebSocket,
    registry: ConnectionRegistry[WebSocket] = Depends(get_connection_registry),
    sessions: SessionService = Depends(get_session_service),
    service: BookingService = Depends(get_booking_service),
) -> None:
    """Serve booking routes over a WebSocket connection."""
    await websocket.accept()
    token = websocket.query_params.get("token") or ""
    try:
        session = sessions.restore(token)
    except BookingError as e:
        await websocket.send_json(_error_frame(None, e.to_response()))
        await websocket.close(code=POLICY_VIOLATION_CLOSE_CODE)
        return

    previous = registry.add(session.uid, websocket)
    if previous is not None:
        await _close_replaced(previous, session.uid)

    try:
        while True:
            frame = await websocket.receive_json()
            await websocket.send_json(await dispatch(frame, session, token, service))
    except WebSocketDisconnect:
        logger.info("WebSocket closed for user %s", session.uid)
    finally:
        registry.remove(session.uid, websocket)
