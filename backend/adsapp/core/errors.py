# backend/adsapp/core/errors.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException

from adsapp.core.exceptions import ADSappError, StoreUnavailable

logger = logging.getLogger(__name__)


def _ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace_id for this request.
    Prefer an inbound correlation header, otherwise generate one.
    """
    existing = getattr(request.state, "trace_id", None)
    if existing:
        return str(existing)

    for header in ("x-request-id", "x-correlation-id"):
        value = request.headers.get(header)
        if value:
            request.state.trace_id = value
            return value

    new_id = uuid.uuid4().hex
    request.state.trace_id = new_id
    return new_id


def _payload(
    *,
    message: str,
    typ: str,
    status: int,
    trace_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "ok": False,
        "error": {
            "type": typ,
            "message": message,
            "status": status,
            "trace_id": trace_id,
        },
    }
    if details is not None:
        body["error"]["details"] = details
    return body


def _error_response(request: Request, *, status: int, typ: str, message: str, details=None) -> JSONResponse:
    trace_id = _ensure_trace_id(request)
    return JSONResponse(
        status_code=status,
        headers={"X-Request-ID": trace_id},
        content=jsonable_encoder(
            _payload(message=message, typ=typ, status=status, trace_id=trace_id, details=details)
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Registers consistent JSON error handlers.
    Also ensures X-Request-ID header is present on error responses.
    """

    @app.exception_handler(ADSappError)
    async def domain_exc_handler(request: Request, exc: ADSappError):
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %s -> %s | %s",
            exc.error_type,
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return _error_response(
            request,
            status=exc.status_code,
            typ=exc.error_type,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        status_code = int(exc.status_code)
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None
        response = _error_response(
            request, status=status_code, typ="http_error", message=message, details=details
        )
        for key, value in (exc.headers or {}).items():
            response.headers[key] = value
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info("Request validation failed %s %s | errors=%s", request.method, request.url.path, errors)
        return _error_response(
            request,
            status=400,
            typ="validation_error",
            message="Validation failed.",
            details=errors,
        )

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def store_exc_handler(request: Request, exc: Exception):
        logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
        unavailable = StoreUnavailable()
        return _error_response(
            request,
            status=unavailable.status_code,
            typ=unavailable.error_type,
            message=unavailable.message,
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        # Full traceback to server logs; generic message to client
        logger.exception("Unhandled exception %s %s -> 500", request.method, request.url.path)
        return _error_response(
            request, status=500, typ="internal_error", message="Internal server error."
        )
