import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RelayError(Exception):
    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(RelayError):
    status_code = 400
    message = "Invalid request"


class AuthError(RelayError):
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(RelayError):
    status_code = 403
    message = "Forbidden"


class StoreError(RelayError):
    """The token store could not be read or written."""

    status_code = 500
    message = "Token store unavailable"


class GatewayError(RelayError):
    """A batch could not be delivered to the push gateway.

    Never reaches a client: the broadcaster turns it into error tickets.
    """

    status_code = 502
    message = "Push gateway error"


class InvalidEvent(ValueError):
    pass


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
