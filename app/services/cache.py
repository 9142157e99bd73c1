import logging
from typing import Any

from fastapi_cache import FastAPICache
from fastapi_cache.backends import Backend
from fastapi_cache.backends.redis import RedisBackend
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

CACHE_ERRORS = (RedisError, OSError)


class CacheService:
    """Thin namespaced wrapper over the FastAPICache backend.

    Every call is a no-op while no backend is configured.
    """

    def _get_backend(self) -> Backend | None:
        try:
            return FastAPICache.get_backend()
        except (AssertionError, RuntimeError, ValueError):
            return None

    def _build_key(self, namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    async def get(self, namespace: str, key: str) -> Any | None:
        cache_backend = self._get_backend()
        if cache_backend is None:
            return None

        return await cache_backend.get(self._build_key(namespace, key))

    async def set(self, namespace: str, key: str, value: Any, *, expire: int | None = None) -> None:
        cache_backend = self._get_backend()
        if cache_backend is None:
            return

        await cache_backend.set(self._build_key(namespace, key), value, expire=expire)

    async def remember(self, namespace: str, key: str, *, expire: int) -> bool:
        """Mark ``key`` as seen. Returns False only when it was already marked.

        Redis marks with a single ``SET NX EX``. An unreachable cache counts as
        unseen so callers carry on without de-duplication.
        """
        cache_backend = self._get_backend()
        if cache_backend is None:
            return True

        cache_key = self._build_key(namespace, key)
        try:
            if isinstance(cache_backend, RedisBackend):
                return bool(await cache_backend.redis.set(cache_key, b"1", ex=expire, nx=True))
            if await cache_backend.get(cache_key):
                return False
            await cache_backend.set(cache_key, b"1", expire=expire)
            return True
        except CACHE_ERRORS as err:
            logger.warning(f"Cache unavailable while marking {cache_key}: {err}")
            return True

    async def forget(self, namespace: str, key: str) -> None:
        """Drop a mark set by ``remember``, logging instead of raising on cache errors."""
        try:
            await self.delete(namespace, key)
        except CACHE_ERRORS as err:
            cache_key = self._build_key(namespace, key)
            logger.warning(f"Cache unavailable while clearing {cache_key}: {err}")

    async def delete(self, namespace: str, key: str) -> None:
        cache_backend = self._get_backend()
        if cache_backend is None:
            return

        await cache_backend.clear(key=self._build_key(namespace, key))


def get_cache_service() -> CacheService:
    return CacheService()
