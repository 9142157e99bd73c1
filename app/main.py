import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend
from httpx import AsyncClient
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.endpoints import push_token, send_notifications, webhooks
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.database.mongodb import create_client
from app.models.device_token import DeviceTokenModel

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.mongo_client = create_client()
    app.state.http_client = AsyncClient(timeout=settings.EXPO_TIMEOUT_SECONDS)
    try:
        # Unique index backs upsert-by-token
        device_token_model = DeviceTokenModel(app.state.mongo_client[settings.DATABASE_NAME])
        await device_token_model.create_indexes()

        if settings.REDIS_URL:
            FastAPICache.init(RedisBackend(Redis.from_url(settings.REDIS_URL)))
        else:
            logger.warning("REDIS_URL not set, webhook de-duplication is disabled")

        yield
    finally:
        await app.state.http_client.aclose()
        app.state.mongo_client.close()


app = FastAPI(lifespan=lifespan, title=settings.PROJECT_NAME)


class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response


app.add_middleware(NoCacheMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(push_token.router, prefix="/api/push-token", tags=["push-token"])

app.include_router(
    send_notifications.router, prefix="/api/send-notifications", tags=["send-notifications"]
)

app.include_router(webhooks.router, prefix="/api/webhooks", tags=["webhooks"])
