"""Translate engine errors into HTTP responses.

protean's own handlers cover its base exceptions. The engine's error
classes are registered on top so each one maps to its own status code and
carries its context attributes in the body.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from medtrack.errors import (
    Conflict,
    Forbidden,
    InsufficientStock,
    InvalidState,
    NotFound,
    PaymentFailed,
    RefundFailed,
)

STATUS_CODES = {
    NotFound: 404,
    Forbidden: 403,
    InvalidState: 400,
    InsufficientStock: 400,
    PaymentFailed: 402,
    Conflict: 409,
    RefundFailed: 502,
}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(code for error_cls, code in STATUS_CODES.items() if isinstance(exc, error_cls))
    messages = getattr(exc, "messages", None) or (exc.args[0] if exc.args else str(exc))
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "messages": messages,
            "context": exc.context,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for error_cls in STATUS_CODES:
        app.add_exception_handler(error_cls, domain_error_handler)
