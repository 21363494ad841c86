"""
Maps domain exceptions to JSON responses for the API endpoints.
The HTML endpoints (approve, extend) render their own error pages.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventflow.core.config import get_settings
from eventflow.core.exceptions import (
    EventFlowError,
    RecordNotFound,
    StoreFailure,
    SubscriptionConflict,
    TokenError,
    TransportFailure,
    ValidationError,
)
from eventflow.core.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[EventFlowError], int]] = [
    (TokenError, 400),
    (ValidationError, 400),
    (RecordNotFound, 404),
    (SubscriptionConflict, 409),
    (TransportFailure, 502),
    (StoreFailure, 500),
]


def status_for(exc: EventFlowError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def _eventflow_error_handler(request: Request, exc: EventFlowError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("request_error", error_code=exc.error_code, error=str(exc))
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc))
    message = str(exc) if get_settings().DEBUG else "Internal server error"
    return JSONResponse(status_code=500, content={"error": "INTERNAL_ERROR", "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EventFlowError, _eventflow_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
