"""Request-id middleware and JSON error handlers for the API."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from planner.core.config import settings
from planner.core.logging import get_logger, request_id_var

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.responses import Response

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
_MAX_REQUEST_ID_LENGTH = 128
_HEALTH_PATHS = frozenset({"/health", "/healthz", "/readyz"})


def _get_request_id(request: Request) -> str | None:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return None


def _error_payload(*, detail: object, request_id: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {"detail": detail}
    if request_id:
        payload["request_id"] = request_id
    return payload


def _json_safe(value: object) -> object:
    """Coerce validation error fragments into JSON-serializable values."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _error_response(
    request: Request,
    *,
    status_code: int,
    detail: object,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    request_id = _get_request_id(request)
    response_headers = dict(headers or {})
    if request_id:
        response_headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(_error_payload(detail=detail, request_id=request_id)),
        headers=response_headers or None,
    )


async def _request_validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    if not isinstance(exc, RequestValidationError):
        msg = "Expected RequestValidationError"
        raise TypeError(msg)
    return _error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=_json_safe(exc.errors()),
    )


async def _response_validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    if not isinstance(exc, ResponseValidationError):
        msg = "Expected ResponseValidationError"
        raise TypeError(msg)
    logger.error(
        "http.response.validation_failed",
        extra={"path": request.url.path, "errors": _json_safe(exc.errors())},
    )
    return _error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal Server Error",
    )


async def _http_exception_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    if not isinstance(exc, StarletteHTTPException):
        msg = "Expected StarletteHTTPException"
        raise TypeError(msg)
    return _error_response(
        request,
        status_code=exc.status_code,
        detail=exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "http.request.unhandled_exception",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return _error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal Server Error",
    )


def _resolve_request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if supplied and len(supplied) <= _MAX_REQUEST_ID_LENGTH:
        return supplied
    return uuid4().hex


def _log_request(request: Request, *, status_code: int, elapsed_ms: float) -> None:
    if request.url.path in _HEALTH_PATHS and not settings.request_log_include_health:
        return
    log_extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": round(elapsed_ms, 2),
    }
    slow_threshold = settings.request_log_slow_ms
    if slow_threshold and elapsed_ms >= slow_threshold:
        logger.warning(
            "http.request.slow",
            extra={**log_extra, "slow_threshold_ms": slow_threshold},
        )
        return
    logger.info("http.request.complete", extra=log_extra)


def install_error_handling(app: FastAPI) -> None:
    """Register request-id middleware, request logging, and error handlers."""

    @app.middleware("http")
    async def _request_context_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = _resolve_request_id(request)
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            _log_request(request, status_code=response.status_code, elapsed_ms=elapsed_ms)
        finally:
            request_id_var.reset(token)
        return response

    app.add_exception_handler(RequestValidationError, _request_validation_exception_handler)
    app.add_exception_handler(ResponseValidationError, _response_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
