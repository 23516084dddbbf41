"""Exception handlers: every error response is {"error": <message>}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stargazers.core.errors import StargazersError, StoreError

logger = logging.getLogger(__name__)

# Location prefixes FastAPI puts in front of field names.
_LOCATION_PARTS = frozenset({"body", "path", "query", "cookie", "header"})


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validation_message(errors: list[dict]) -> str:
    """Collapse pydantic errors into one message; missing fields read 'All fields are required'."""
    if not errors or any(e.get("type") == "missing" for e in errors):
        return "All fields are required"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in _LOCATION_PARTS)
    msg = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain errors, request validation and HTTP errors."""

    @app.exception_handler(StargazersError)
    async def stargazers_error_handler(request: Request, exc: StargazersError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "Store failure on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc.__cause__,
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, validation_message(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
