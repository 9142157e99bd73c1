import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import get_broadcast_service, get_current_admin
from app.api.routing import error_route
from app.core.errors import RelayError, ValidationError
from app.schemas.notification import AdminBroadcastRequest, NotificationPayload
from app.schemas.user import User
from app.services.broadcast import BroadcastService

logger = logging.getLogger(__name__)

router = APIRouter(route_class=error_route(500, "Failed to send"))

DEFAULT_DATA = {"screen": "Home"}


@router.post("")
async def send_notifications(
    broadcast_request: Annotated[AdminBroadcastRequest, Body(...)],
    current_admin: Annotated[User, Depends(get_current_admin)],
    broadcast_service: Annotated[BroadcastService, Depends(get_broadcast_service)],
):
    """
    Broadcast an ad-hoc notification to every registered device
    """
    if not broadcast_request.title or not broadcast_request.body:
        raise ValidationError("Missing title or body")

    payload = NotificationPayload(
        title=broadcast_request.title,
        body=broadcast_request.body,
        data=broadcast_request.data or DEFAULT_DATA,
    )
    logger.info(f"Admin {current_admin.id} broadcasting '{payload.title}'")

    try:
        result = await broadcast_service.broadcast_to_all(payload)
    except Exception as err:
        logger.exception(f"Admin broadcast '{payload.title}' failed")
        raise RelayError("Failed to send") from err

    if result.sent_count == 0:
        return {"message": "No tokens found"}

    details = "Broadcast completed"
    if result.failed_batches:
        details = f"Broadcast completed with {result.failed_batches} failed batches"

    return {
        "success": True,
        "sent_count": result.sent_count,
        "details": details,
        "failed_count": result.error_count,
        "pruned_count": result.pruned_count,
    }
