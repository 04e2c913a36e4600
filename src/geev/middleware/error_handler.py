"""Exception handlers: geev domain errors, validation errors and a JSON catch-all."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from geev.exceptions import EventPayloadTooLargeError, GeevError, NotAuthenticatedError

logger = structlog.get_logger()

# Most specific class wins; anything else derived from GeevError is a 400.
ERROR_STATUS: dict[type[GeevError], int] = {
    NotAuthenticatedError: 401,
    EventPayloadTooLargeError: 400,
}


def status_for(exc: GeevError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(GeevError)
    async def geev_error_handler(request: Request, exc: GeevError) -> JSONResponse:
        status_code = status_for(exc)
        logger.info(
            "request_rejected",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Anything uncaught becomes a logged 500 with a JSON body."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
