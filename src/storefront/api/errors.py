"""Exception handlers translating domain failures into the API's JSON envelope.

Every failure body is ``{"success": false, "message": ...}`` plus optional
``missing_fields``, ``errors`` or ``products``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.errors import PersistenceError, PlacementError

logger = structlog.get_logger(__name__)


def failure(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    content.update({k: v for k, v in extra.items() if v})
    return JSONResponse(status_code=status_code, content=content)


async def placement_error_handler(request: Request, exc: PlacementError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error("placement_persistence_error", path=request.url.path, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    messages = exc.messages if isinstance(exc.messages, dict) else {"_entity": [str(exc.messages)]}
    return failure(400, "Validation failed", errors=messages)


def error_message(exc: Exception, default: str) -> str:
    """Readable text for a framework exception, whichever way it carries its message."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, str) and messages:
        return messages
    return str(exc) or default


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return failure(404, error_message(exc, "Not found"))


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return failure(400, error_message(exc, "Invalid operation"))


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("write_conflict", path=request.url.path, error=str(exc))
    return failure(409, "The record was changed by another request, please retry")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "_request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return failure(400, "Invalid request", errors=errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlacementError, placement_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
