"""Middleware for logging HTTP requests and responses."""

import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from common.utils.msgspec import SerializationError, decode_json
from common.utils.utils import elapsed_ms, get_logger

logger = get_logger()

# Bodies of these paths are never captured (credentials, provider payloads)
_UNLOGGED_BODY_SUFFIXES = ("/auth/login", "/auth/signup", "/payment/webhook", "/payment/verify")
_MAX_BODY_LOG_CHARS = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.
    Logs request details, response status, and timing information.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def _read_body_for_log(self, request: Request) -> Any:
        if request.method not in ("POST", "PUT", "PATCH") or request.url.path.endswith(_UNLOGGED_BODY_SUFFIXES):
            return None
        body_bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return decode_json(body_bytes)
        except SerializationError:
            body_str = body_bytes.decode("utf-8", errors="replace")
            return body_str[:_MAX_BODY_LOG_CHARS] + "..." if len(body_str) > _MAX_BODY_LOG_CHARS else body_str

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_path = request.url.path
        request_method = request.method
        request_body = await self._read_body_for_log(request)

        logger.debug(
            f"Request started: {request_method} {request_path}",
            type="request_started",
            client_ip=request.client.host if request.client else "unknown",
            method=request_method,
            path=request_path,
            query_params=str(request.query_params) or None,
        )

        start_time = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request_method} {request_path}",
                type="request_failed",
                method=request_method,
                path=request_path,
                error=str(e),
                process_time_ms=elapsed_ms(start_time, time.perf_counter()),
                request_body=request_body,
                exc_info=True,
            )
            raise

        response_log_data: dict[str, Any] = {
            "type": "request_completed",
            "method": request_method,
            "path": request_path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms(start_time, time.perf_counter()),
        }

        # For rejected input (400), include request body for debugging
        if response.status_code == 400:
            logger.warning(f"Validation error: {request_method} {request_path} - {response.status_code}", request_body=request_body, **response_log_data)
        elif request_method == "GET" and 200 <= response.status_code < 300:
            logger.debug(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        else:
            logger.info(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        return response
