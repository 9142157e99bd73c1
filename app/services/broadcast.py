import logging

from app.core.errors import StoreError
from app.models.device_token import DeviceTokenModel
from app.schemas.notification import BroadcastResult, NotificationPayload
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)


class BroadcastService:
    def __init__(
        self, device_token_model: DeviceTokenModel, notification_service: NotificationService
    ):
        self.device_token_model = device_token_model
        self.notification_service = notification_service

    async def broadcast_to_all(self, payload: NotificationPayload) -> BroadcastResult:
        tokens = await self.device_token_model.list_all_tokens()
        if not tokens:
            logger.info(f"No registered devices for '{payload.title}'")
            return BroadcastResult()

        result = await self.notification_service.broadcast(payload, tokens)
        result.pruned_count = await self._prune(result.invalid_tokens)
        return result

    async def _prune(self, invalid_tokens: list[str]) -> int:
        if not invalid_tokens:
            return 0
        try:
            pruned = await self.device_token_model.delete_tokens(invalid_tokens)
        except StoreError:
            logger.exception(f"Could not prune {len(invalid_tokens)} unregistered push tokens")
            return 0
        logger.info(f"Pruned {pruned} unregistered push tokens")
        return pruned
