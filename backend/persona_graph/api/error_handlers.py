"""Error Handlers — every failure leaves the API in the same JSON envelope.

Invariants:
    - PersonaGraphError -> its own http_status and to_response() body
    - CascadeError additionally lists completed and failed steps
    - RequestValidationError -> 400 VALIDATION_ERROR with per-field details
    - Any other exception -> 500 INTERNAL_ERROR, never leaking internals
    - 4xx are logged as warnings, 5xx as errors, with account and path

Design Decisions:
    - Three layers (domain, validation, catch-all) registered once from main.py
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from persona_graph.config import get_settings
from persona_graph.core.errors import (
    CascadeError, ErrorCategory, ErrorSeverity, PersonaGraphError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PersonaGraphError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


def _request_context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "account": request.headers.get(get_settings().account_header) or None,
    }


async def _handle_domain_error(request: Request, exc: PersonaGraphError):
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(exc.message, extra={"error_code": exc.code, **_request_context(request)})

    body = exc.to_response()
    if isinstance(exc, CascadeError):
        body["error"]["details"] = {
            "completed": exc.completed, "failed": exc.failures,
        }
    return JSONResponse(status_code=exc.http_status, content=body)


async def _handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected request body: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", **_request_context(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def _handle_unexpected_error(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", **_request_context(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    details: list | None = None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}
