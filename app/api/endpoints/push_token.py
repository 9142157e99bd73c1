import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import get_current_user, get_device_token_model
from app.api.routing import error_route
from app.core.errors import StoreError, ValidationError
from app.models.device_token import DeviceTokenModel
from app.schemas.device_token import RegisterDeviceTokenRequest, UnregisterDeviceTokenRequest
from app.schemas.user import User

logger = logging.getLogger(__name__)

router = APIRouter(route_class=error_route(500, "Invalid request"))


@router.post("")
async def register_push_token(
    token_request: Annotated[RegisterDeviceTokenRequest, Body(...)],
    current_user: Annotated[User, Depends(get_current_user)],
    device_token_model: Annotated[DeviceTokenModel, Depends(get_device_token_model)],
):
    if not token_request.token:
        raise ValidationError("Token missing")

    try:
        await device_token_model.upsert_token(
            token_request.token, token_request.device or "unknown", current_user.id
        )
    except StoreError as err:
        raise StoreError("Invalid request") from err

    logger.info(f"Stored push token for user {current_user.id}")
    return {"success": True, "message": "Token stored"}


@router.delete("")
async def unregister_push_token(
    token_request: Annotated[UnregisterDeviceTokenRequest, Body(...)],
    current_user: Annotated[User, Depends(get_current_user)],
    device_token_model: Annotated[DeviceTokenModel, Depends(get_device_token_model)],
):
    if not token_request.token:
        raise ValidationError("Token missing")

    try:
        removed = await device_token_model.delete_token(token_request.token, current_user.id)
    except StoreError as err:
        raise StoreError("Invalid request") from err

    if not removed:
        return {"success": False, "message": "Token not found"}
    return {"success": True, "message": "Token removed"}
