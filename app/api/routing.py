import logging
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

logger = logging.getLogger(__name__)


def error_route(status_code: int, message: str) -> type[APIRoute]:
    """Route class answering unreadable request bodies with ``{"error": message}``."""

    class ErrorMappedRoute(APIRoute):
        def get_route_handler(self) -> Callable:
            original_route_handler = super().get_route_handler()

            async def route_handler(request: Request) -> Response:
                try:
                    return await original_route_handler(request)
                except RequestValidationError as exc:
                    logger.warning(f"Rejected malformed body on {request.url.path}: {exc.errors()}")
                    return JSONResponse(status_code=status_code, content={"error": message})

            return route_handler

    return ErrorMappedRoute
