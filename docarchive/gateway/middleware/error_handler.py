"""
Error Handling

Centralized error handling and response formatting. Every error body has
the same shape: {"message", "status_code", "path", "request_id"}.
"""
import os
import traceback

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from ...api.exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ...core.logging_config import get_logger

logger = get_logger(__name__)


def error_response(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    content = {
        "message": message,
        "status_code": status_code,
        "path": request.url.path,
        "request_id": getattr(request.state, "request_id", None),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def business_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_exception = handle_business_exception(exc)
    logger.warning(
        f"Business exception for {request.method} {request.url.path}: "
        f"{http_exception.status_code} {http_exception.detail}"
    )
    return error_response(request, http_exception.status_code, http_exception.detail)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.debug(f"HTTP exception for {request.method} {request.url.path}: {exc.status_code} - {exc.detail}")
    response = error_response(request, exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error for {request.method} {request.url.path}: {exc.errors()}")
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation Error",
        detail=jsonable_encoder(exc.errors()),
    )


def register_exception_handlers(app: FastAPI):
    """Map business, HTTP and validation exceptions to JSON error bodies."""
    for exc_class in BUSINESS_EXCEPTIONS:
        app.add_exception_handler(exc_class, business_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that turns unexpected exceptions into a 500 JSON response.

    The exception message and traceback are only included outside
    production.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            is_development = os.getenv("ENVIRONMENT", "development") != "production"

            logger.error(f"Unexpected error for {request.method} {request.url.path}: {e}", exc_info=True)

            if not is_development:
                return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                str(e) or type(e).__name__,
                traceback=traceback.format_exc(),
            )
