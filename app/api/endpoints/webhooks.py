import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import get_broadcast_service, verify_webhook_secret
from app.api.routing import error_route
from app.core.config import settings
from app.core.errors import RelayError
from app.schemas.change_event import ChangeWebhookRequest
from app.services.broadcast import BroadcastService
from app.services.cache import CacheService, get_cache_service
from app.services.composer import compose

logger = logging.getLogger(__name__)

router = APIRouter(route_class=error_route(500, "Webhook Error"))

NOTIFIED_NAMESPACE = "webhook:notified"
NO_NOTIFICATION = {"message": "No notification sent"}


def delivery_key(change: ChangeWebhookRequest) -> str | None:
    """Identify one row version so a redelivered change is recognised.

    Rows without an id or a change timestamp cannot be told apart and are never
    de-duplicated.
    """
    record = change.record or {}
    row_id = record.get("id")
    changed_at = record.get("updated_at") or record.get("created_at")
    if row_id is None or changed_at is None:
        return None
    return f"{change.table}:{row_id}:{changed_at}"


@router.post("/notifications", dependencies=[Depends(verify_webhook_secret)])
async def change_notification(
    change: Annotated[ChangeWebhookRequest, Body(...)],
    broadcast_service: Annotated[BroadcastService, Depends(get_broadcast_service)],
    cache_service: Annotated[CacheService, Depends(get_cache_service)],
):
    dedupe_key = None
    try:
        payload = compose(change.to_event())
        if payload is None:
            return NO_NOTIFICATION

        key = delivery_key(change)
        if key is not None:
            first_delivery = await cache_service.remember(
                NOTIFIED_NAMESPACE, key, expire=settings.WEBHOOK_DEDUPE_SECONDS
            )
            if not first_delivery:
                logger.info(f"Skipping redelivered change notification for {key}")
                return NO_NOTIFICATION
            dedupe_key = key

        result = await broadcast_service.broadcast_to_all(payload)
    except Exception as err:
        logger.exception(f"Change webhook for table {change.table} failed")
        if dedupe_key is not None:
            await cache_service.forget(NOTIFIED_NAMESPACE, dedupe_key)
        raise RelayError("Webhook Error") from err

    return {"success": True, "count": result.sent_count, "failed_count": result.error_count}
