import logging
from datetime import UTC, datetime

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase  # noqa: TCH002
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.errors import StoreError
from app.schemas.device_token import DeviceToken

logger = logging.getLogger(__name__)


class DeviceTokenModel:
    def __init__(self, db: AsyncIOMotorDatabase, page_size: int = settings.TOKEN_PAGE_SIZE):
        self.collection: AsyncIOMotorCollection = db["push_tokens"]
        self.page_size = page_size

    async def create_indexes(self) -> None:
        await self.collection.create_index([("token", ASCENDING)], unique=True)

    async def upsert_token(
        self, token: str, device: str = "unknown", owner: str | None = None
    ) -> DeviceToken:
        fields = {
            "device": device or "unknown",
            "owner": owner,
            "updated_at": datetime.now(UTC),
        }
        try:
            await self.collection.update_one(
                {"token": token},
                {"$set": fields},
                upsert=True,
            )
        except PyMongoError as err:
            logger.error(f"Failed to upsert push token {token[:20]}...: {err}")
            raise StoreError() from err
        return DeviceToken(token=token, **fields)

    async def list_all_tokens(self) -> list[DeviceToken]:
        try:
            cursor = self.collection.find({}).sort("_id", ASCENDING).batch_size(self.page_size)
            return [DeviceToken(**doc) async for doc in cursor]
        except PyMongoError as err:
            logger.error(f"Failed to list push tokens: {err}")
            raise StoreError() from err

    async def delete_tokens(self, tokens: list[str]) -> int:
        if not tokens:
            return 0
        try:
            result = await self.collection.delete_many({"token": {"$in": tokens}})
        except PyMongoError as err:
            logger.error(f"Failed to delete {len(tokens)} push tokens: {err}")
            raise StoreError() from err
        return result.deleted_count

    async def delete_token(self, token: str, owner: str) -> bool:
        try:
            result = await self.collection.delete_one({"token": token, "owner": owner})
        except PyMongoError as err:
            logger.error(f"Failed to delete push token {token[:20]}...: {err}")
            raise StoreError() from err
        return result.deleted_count > 0
