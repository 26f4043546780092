"""Exception handlers: every error leaves the API as {"error": message}."""

import psycopg2
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from innkeep.domain.errors import BookingError
from innkeep.infra.db import StoreUnavailableError
from innkeep.observability.correlation import get_correlation_id
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _booking_error(request: Request, exc: BookingError) -> JSONResponse:
    return _error(exc.status_code, str(exc))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, _describe_validation(exc))


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def _store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error(
        "data store unavailable",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), path=request.url.path
            )
        },
    )
    return _error(503, f"Database unavailable: {exc}")


async def _store_error(request: Request, exc: psycopg2.Error) -> JSONResponse:
    logger.error(
        "data store error",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                path=request.url.path,
                pgcode=exc.pgcode,
            )
        },
    )
    message = (exc.pgerror or str(exc)).strip() or type(exc).__name__
    return _error(500, message)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, _booking_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(StoreUnavailableError, _store_unavailable)
    app.add_exception_handler(psycopg2.Error, _store_error)
