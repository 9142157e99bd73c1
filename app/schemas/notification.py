from typing import Any

from pydantic import BaseModel, Field

DEVICE_NOT_REGISTERED = "DeviceNotRegistered"
GATEWAY_ERROR = "GatewayError"


class NotificationPayload(BaseModel):
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)


class PushMessage(BaseModel):
    to: str
    sound: str = "default"
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)


class PushTicket(BaseModel):
    """Per-message acknowledgment returned by the push gateway."""

    status: str
    id: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def error_code(self) -> str | None:
        if not self.details:
            return None
        return self.details.get("error")


class BroadcastResult(BaseModel):
    sent_count: int = 0
    results: list[PushTicket] = Field(default_factory=list)
    failed_batches: int = 0
    invalid_tokens: list[str] = Field(default_factory=list)
    pruned_count: int = 0

    @property
    def error_count(self) -> int:
        return sum(1 for ticket in self.results if ticket.is_error)


class AdminBroadcastRequest(BaseModel):
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] | None = None
