"""
Mapping of domain exceptions onto HTTP responses.

Error bodies are `{"error": message, "code": code}` so REST callers see
the same messages WebSocket clients get in `error` frames.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crieur.domain.exceptions import (
    AuthenticationError,
    BrokerError,
    ChannelAlreadyExistsError,
    ChannelError,
    ChannelNotFoundError,
)

STATUS_BY_EXCEPTION = (
    (ChannelNotFoundError, status.HTTP_404_NOT_FOUND),
    (ChannelAlreadyExistsError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
)


def status_for(error: Exception) -> int:
    """HTTP status for a domain exception (400 unless listed above)."""
    for exc_type, code in STATUS_BY_EXCEPTION:
        if isinstance(error, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_response(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(error),
        content={"error": str(error), "code": getattr(error, "code", None)},
    )


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request body",
            "code": "VALIDATION_ERROR",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain exception handlers on app."""
    app.add_exception_handler(ChannelError, _domain_error_handler)
    app.add_exception_handler(BrokerError, _domain_error_handler)
    app.add_exception_handler(AuthenticationError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
