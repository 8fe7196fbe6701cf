"""
Exception handlers mapping domain errors to the API's response envelopes.

Client errors answer with ``{"msg": ...}`` or ``{"errors": [...]}``; anything
unexpected answers with a plain ``Server Error`` and is logged with its
traceback server-side only.
"""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from src.domain.errors import NotFound, Unauthorized, ValidationFailed
from src.infrastructure.logging import get_logger

logger = get_logger("api.errors")


def _validation_items(exc: RequestValidationError) -> list[dict]:
    items = []
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        field_path = loc[1:]
        # body-level errors (e.g. undecodable JSON) carry a position, not a field name
        param = None
        if field_path and isinstance(field_path[0], str):
            param = ".".join(str(part) for part in field_path)
        items.append(
            {
                "msg": err.get("msg", "Invalid value"),
                "param": param,
                "location": str(loc[0]) if loc else None,
            }
        )
    return items


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        logger.warning("unauthorized", path=request.url.path, msg=exc.msg)
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"msg": exc.msg})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        # client-error status, matching the rest of the API
        logger.warning("not_found", path=request.url.path, msg=exc.msg)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"msg": exc.msg})

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed):
        logger.warning("validation_failed", path=request.url.path, errors=exc.errors)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _validation_items(exc)
        logger.warning("request_validation_failed", path=request.url.path, errors=errors)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return PlainTextResponse("Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
