import logging

from httpx import AsyncClient, HTTPError

from app.core.config import settings
from app.core.errors import GatewayError
from app.schemas.device_token import DeviceToken
from app.schemas.notification import (
    DEVICE_NOT_REGISTERED,
    GATEWAY_ERROR,
    BroadcastResult,
    NotificationPayload,
    PushMessage,
    PushTicket,
)

logger = logging.getLogger(__name__)


def chunk(items: list, size: int) -> list[list]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class NotificationService:
    """Fans one payload out to many device tokens through the Expo push API.

    Batches are sent one after another. A failing batch yields error tickets for
    its own messages and never stops the batches after it.
    """

    def __init__(
        self,
        client: AsyncClient,
        push_url: str = settings.EXPO_PUSH_API_URL,
        batch_size: int = settings.EXPO_BATCH_SIZE,
        timeout: float = settings.EXPO_TIMEOUT_SECONDS,
        access_token: str | None = settings.EXPO_ACCESS_TOKEN,
    ):
        self.client = client
        self.push_url = push_url
        self.batch_size = batch_size
        self.timeout = timeout
        self.access_token = access_token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _send_to_expo(self, messages: list[PushMessage]) -> list[PushTicket]:
        try:
            response = await self.client.post(
                self.push_url,
                json=[message.model_dump() for message in messages],
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (HTTPError, ValueError) as e:
            raise GatewayError(f"Push gateway request failed: {e}") from e

        tickets = body.get("data") if isinstance(body, dict) else None
        if not isinstance(tickets, list) or len(tickets) != len(messages):
            raise GatewayError("Push gateway returned a malformed response")
        try:
            return [PushTicket.model_validate(ticket) for ticket in tickets]
        except ValueError as e:
            raise GatewayError("Push gateway returned a malformed ticket") from e

    async def broadcast(
        self, payload: NotificationPayload, tokens: list[DeviceToken]
    ) -> BroadcastResult:
        if not tokens:
            return BroadcastResult()

        messages = [
            PushMessage(to=token.token, title=payload.title, body=payload.body, data=payload.data)
            for token in tokens
        ]
        result = BroadcastResult(sent_count=len(messages))

        for index, batch in enumerate(chunk(messages, self.batch_size)):
            try:
                tickets = await self._send_to_expo(batch)
            except GatewayError as e:
                logger.error(f"Batch {index + 1} of {len(batch)} messages failed: {e.message}")
                result.failed_batches += 1
                tickets = [
                    PushTicket(status="error", message=e.message, details={"error": GATEWAY_ERROR})
                    for _ in batch
                ]

            for message, ticket in zip(batch, tickets, strict=True):
                if not ticket.is_error:
                    continue
                logger.warning(
                    f"Notification to {message.to[:20]}... failed: "
                    f"{ticket.message or 'Unknown error'}"
                )
                if ticket.error_code == DEVICE_NOT_REGISTERED:
                    result.invalid_tokens.append(message.to)
            result.results.extend(tickets)

        logger.info(
            f"Broadcast '{payload.title}' to {result.sent_count} devices, "
            f"{result.error_count} errors, {result.failed_batches} failed batches"
        )
        return result
