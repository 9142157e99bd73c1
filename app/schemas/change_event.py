from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    table: str | None = None
    change_type: ChangeType | None = None
    record: dict[str, Any] | None = None
    previous_record: dict[str, Any] | None = None

    @field_validator("change_type", mode="before")
    @classmethod
    def normalize_change_type(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value


class ChangeWebhookRequest(BaseModel):
    """Body posted by the database change-notification hook."""

    table: str | None = None
    type: str | None = None
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None

    def to_event(self) -> ChangeEvent:
        return ChangeEvent(
            table=self.table,
            change_type=self.type,
            record=self.record,
            previous_record=self.old_record,
        )
