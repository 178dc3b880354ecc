# app/api/errors.py
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.exceptions import CheckoutException
from app.utils.logging import get_logger
from app.utils.settings import SERVICE_NAME

logger = get_logger(__name__)


def _error_body(request: Request, status: int, message: str, details: dict | None = None) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status,
        "error": HTTPStatus(status).phrase,
        "message": message,
        "service": SERVICE_NAME,
        "path": request.url.path,
        "details": jsonable_encoder(details or {}),
    }


async def checkout_exception_handler(request: Request, exc: CheckoutException) -> JSONResponse:
    status = exc.status_code
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} -> {status}: {exc!r}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {status}: {exc.message}")

    return JSONResponse(
        status_code=status,
        content=_error_body(request, status, exc.message, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header"))
        errors[field or "request"] = err.get("msg")

    logger.warning(f"{request.method} {request.url.path} -> 400: validation failed {errors}")
    return JSONResponse(
        status_code=400,
        content=_error_body(request, 400, "Request validation failed", {"errors": errors}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=_error_body(request, 500, "An unexpected internal error occurred."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutException, checkout_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
