"""Exception handlers translating workflow errors into the API error body.

Every failure is rendered as ``{"success": false, "message": ..., "error"?: ...}``;
tracebacks are logged, never returned.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.exceptions import StorefrontError

logger = structlog.get_logger(__name__)


def _flatten(messages) -> str:
    if isinstance(messages, dict):
        return "; ".join(f"{field}: {', '.join(map(str, errors))}" for field, errors in messages.items())
    return str(messages)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message, detail=exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or str(exc)
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "error": _flatten(messages)},
    )


def _describe_request_errors(errors) -> str:
    described = []
    for error in errors:
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        described.append(f"{location}: {error['msg']}")
    return "; ".join(described)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "error": _describe_request_errors(exc.errors())},
    )


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"success": False, "message": "Not found", "error": str(exc)})


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"success": False, "message": "Invalid operation", "error": str(exc)})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
