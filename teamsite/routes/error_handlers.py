"""Map exceptions onto the ``{"error": true, ...}`` envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamsite.core.errors import AuthError, TeamSiteError

logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": True, "message": message, "code": code, **extra},
    )


def _field_message(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def handle_teamsite_error(request: Request, exc: TeamSiteError) -> JSONResponse:
    if isinstance(exc, AuthError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [_field_message(error) for error in exc.errors()]
    logger.warning(f"{request.method} {request.url.path} rejected malformed input: {errors}")
    return _envelope(
        400,
        "; ".join(errors) or "Invalid request",
        "VALIDATION_ERROR",
        errors=errors,
        warnings=[],
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        return _envelope(404, "Route not found", "NOT_FOUND")
    if exc.status_code == 405:
        return _envelope(405, "Method not allowed", "METHOD_NOT_ALLOWED")
    return _envelope(exc.status_code, str(exc.detail), "HTTP_ERROR")


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _envelope(500, "Internal server error", "INTERNAL_ERROR")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TeamSiteError, handle_teamsite_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected)
