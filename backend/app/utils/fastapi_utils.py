from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler as _http_exception_handler
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from common.core.app_error import AppException, Errors
from common.utils.utils import get_logger

logger = get_logger()


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # pyright: ignore
        errors = _safe_errors(exc)
        logger.warning("Validation error", path=request.url.path, errors=errors)
        error = Errors.Generic.INVALID_INPUT.create(message="Request validation failed", details={"errors": errors})
        return JSONResponse(status_code=400, content=error.details.to_dict(mode="json"))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> Response:  # pyright: ignore
        # 4xx errors are client errors, not server errors - log as warnings
        if exc.status_code >= 500:
            logger.error("HTTP error", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
        else:
            logger.warning("HTTP client error", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
        return await _http_exception_handler(request, exc)

    @app.exception_handler(AppException)
    async def app_error_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # pyright: ignore
        return _app_exception_response(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pyright: ignore
        if isinstance(exc, AppException):
            return _app_exception_response(request, exc)
        logger.exception("Unhandled exception", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=Errors.Generic.INTERNAL_ERROR.create(cause=exc).details.to_dict(mode="json"))


def _app_exception_response(request: Request, exc: AppException) -> JSONResponse:
    status_code = exc.http_status or 500
    if status_code >= 500:
        logger.exception("App error", path=request.url.path, error=exc.details, exc_info=exc)
    else:
        logger.warning("App client error", path=request.url.path, status_code=status_code, error=exc.details)

    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content=exc.details.to_dict(mode="json"), headers=headers)


def _safe_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # Drop submitted values; they may contain credentials
    return [{"loc": list(error.get("loc", ())), "type": error.get("type"), "msg": error.get("msg")} for error in exc.errors()]
