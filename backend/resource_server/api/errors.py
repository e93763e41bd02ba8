"""
API error mapping

Translates concert service exceptions into HTTP responses with the
{"success": false, "error": CODE, "message": ...} envelope.
"""
import logging
from typing import Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from resource_server.services.concert.exceptions import (
    ConcertServiceError,
    NotFoundError,
    ConflictError,
    InvalidStateError,
    ValidationError,
    InfrastructureError,
    OperationNotAllowedError,
    RoomNotFoundError,
    SongNotFoundError,
    DuplicateSongError,
    ConcurrentModificationError,
    RoomClosedError,
    RoomFullError,
    RoomOpenError,
    NoCurrentSongError,
    InconsistentRoomError,
    InvalidAccessoryIndexError,
    InvalidListenServerError,
)
from resource_server.services.metrics import operation_errors

logger = logging.getLogger(__name__)

# Most specific first
ERROR_MAP = [
    (RoomNotFoundError, 404, "CONCERT_NOT_FOUND"),
    (SongNotFoundError, 404, "SONG_NOT_FOUND"),
    (DuplicateSongError, 409, "DUPLICATE_SONG"),
    (ConcurrentModificationError, 409, "CONCURRENT_MODIFICATION"),
    (RoomClosedError, 409, "CONCERT_NOT_OPEN"),
    (RoomFullError, 409, "CONCERT_FULL"),
    (RoomOpenError, 409, "CONCERT_OPEN"),
    (NoCurrentSongError, 409, "NO_CURRENT_SONG"),
    (InconsistentRoomError, 409, "INCONSISTENT_STATE"),
    (InvalidAccessoryIndexError, 400, "INVALID_ACCESSORY_INDEX"),
    (InvalidListenServerError, 400, "INVALID_LISTEN_SERVER"),
    (OperationNotAllowedError, 403, "OPERATION_NOT_ALLOWED"),
    (NotFoundError, 404, "NOT_FOUND"),
    (ConflictError, 409, "CONFLICT"),
    (InvalidStateError, 409, "INVALID_STATE"),
    (ValidationError, 400, "VALIDATION_ERROR"),
    (InfrastructureError, 503, "STORE_UNAVAILABLE"),
]


def describe_error(exc: ConcertServiceError) -> Tuple[int, str]:
    for exc_type, status_code, code in ERROR_MAP:
        if isinstance(exc, exc_type):
            return status_code, code
    return 500, "CONCERT_ERROR"


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": code, "message": message}


async def concert_error_handler(request: Request, exc: ConcertServiceError):
    status_code, code = describe_error(exc)
    route = request.scope.get("route")
    operation = getattr(route, "name", "unknown")
    operation_errors.labels(operation=operation, error=code).inc()

    if status_code >= 500:
        logger.error(f"[API] {operation} failed: {exc}")
    else:
        logger.warning(f"[API] {operation} rejected ({code}): {exc}")
    return JSONResponse(status_code=status_code, content=error_body(code, str(exc)))


async def http_error_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, dict):
        content = error_body(exc.detail.get("error", "HTTP_ERROR"), exc.detail.get("message", ""))
    else:
        content = error_body("HTTP_ERROR", str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}"
    return JSONResponse(status_code=400, content=error_body("VALIDATION_ERROR", message))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ConcertServiceError, concert_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
