from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import settings


def create_client(url: str = settings.MONGODB_URL) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(url, tz_aware=True)


def get_database(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.mongo_client[settings.DATABASE_NAME]
