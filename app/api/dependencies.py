import hmac
from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from httpx import AsyncClient
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.errors import AuthError
from app.database.mongodb import get_database
from app.models.device_token import DeviceTokenModel
from app.schemas.user import User
from app.services.broadcast import BroadcastService
from app.services.notification import NotificationService
from app.utils.user import decode_access_token, verify_user_role

bearer = HTTPBearer(auto_error=False)


def get_http_client(request: Request) -> AsyncClient:
    return request.app.state.http_client


def get_device_token_model(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)],
) -> DeviceTokenModel:
    return DeviceTokenModel(db)


def get_notification_service(
    client: Annotated[AsyncClient, Depends(get_http_client)],
) -> NotificationService:
    return NotificationService(client)


def get_broadcast_service(
    device_token_model: Annotated[DeviceTokenModel, Depends(get_device_token_model)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
) -> BroadcastService:
    return BroadcastService(device_token_model, notification_service)


async def get_current_user(
    bearer_creds: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> User:
    if bearer_creds is None or not bearer_creds.credentials:
        raise AuthError()
    return decode_access_token(bearer_creds.credentials)


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    verify_user_role(current_user)
    return current_user


async def verify_webhook_secret(
    x_webhook_secret: Annotated[str, Header()] = "",
) -> None:
    if not hmac.compare_digest(x_webhook_secret.encode(), settings.WEBHOOK_SECRET.encode()):
        raise AuthError()
