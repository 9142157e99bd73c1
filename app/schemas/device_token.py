from datetime import datetime

from bson import ObjectId
from pydantic import AliasChoices, BaseModel, Field, field_validator


class RegisterDeviceTokenRequest(BaseModel):
    token: str | None = None
    device: str | None = None


class UnregisterDeviceTokenRequest(BaseModel):
    token: str | None = None


class DeviceToken(BaseModel):
    id: str | None = Field(
        default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="id"
    )
    token: str
    device: str = "unknown"
    owner: str | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def convert_object_id_to_str(cls, value):
        if isinstance(value, ObjectId | int):
            return str(value)
        return value

    class Config:
        from_attributes = True
