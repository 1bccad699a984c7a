from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from enum import Enum
from logging import Filter, LogRecord
from typing import Any, cast
from uuid import UUID

import structlog
from pydantic import BaseModel
from structlog.typing import EventDict, Processor, WrappedLogger

from common.core.request_context import RequestContext
from common.utils import encode_json, is_dict

# Never written to logs, at any nesting level
_REDACTED_KEYS = {
    "password",
    "access_token",
    "accessToken",
    "id_token",
    "refresh_token",
    "authorization",
    "signature",
    "razorpay_signature",
    "key_secret",
    "webhook_secret",
    "client_secret",
}
_REDACTED = "***"


def _should_use_json_logging() -> bool:
    """JSON logs outside local/dev/test, opt-in locally via LOG_JSON_FORMAT."""

    app_env = os.getenv("APP_ENV", "local").lower()
    if app_env not in ("development", "local", "test", "testing"):
        return True
    return os.getenv("LOG_JSON_FORMAT", "").lower() in {"true", "1", "t", "yes"}


def _get_formatter_name() -> str:
    return "json" if _should_use_json_logging() else "plain"


def _process_values(
    _logger: WrappedLogger,
    _name: str,
    event_dict: EventDict,
) -> EventDict:
    """Attach the request context, unwrap context vars and models, and redact secrets."""

    request_context = RequestContext.get_or_none()
    if request_context is not None:
        event_dict["requestContext"] = request_context

    for key, value in list(event_dict.items()):
        _process_value(event_dict, key, value)

    return event_dict


def _process_value(event_dict: dict[str, Any], key: str, value: Any) -> None:
    if value is None:
        event_dict.pop(key, None)
        return

    if key in _REDACTED_KEYS:
        event_dict[key] = _REDACTED
        return

    processed_value = value
    if isinstance(value, ContextVar):
        processed_value = value.get(None)  # type: ignore
        if processed_value is None:
            event_dict.pop(key, None)
            return
    elif isinstance(value, BaseModel):
        processed_value = value.model_dump(exclude_none=True, by_alias=True, mode="json")
    elif isinstance(value, Enum):
        processed_value = value.value
    elif isinstance(value, UUID):
        processed_value = str(value)
    elif isinstance(value, str) and key in {"exc_info", "stack", "traceback", "exception"} and "\n" in value:
        processed_value = [line.rstrip() for line in value.strip().splitlines() if line]

    if is_dict(processed_value):
        for k, v in list(processed_value.items()):
            _process_value(processed_value, k, v)

    event_dict[key] = processed_value


def json_serializer(value: EventDict, **_: Any) -> str:
    return encode_json(value).decode("utf-8")


class NoHealthMetricsFilter(Filter):
    def filter(self, record: LogRecord) -> bool:
        message = record.getMessage()
        return not ("GET /health" in message or "GET /metrics" in message)


def _ensure_event_dict(_logger: WrappedLogger, _name: str, event_dict: Any) -> EventDict:
    """Stdlib loggers pass plain strings as record.msg; wrap them so the rest of the chain sees a dict."""
    if isinstance(event_dict, dict):
        return cast(EventDict, event_dict)
    return {"event": "" if event_dict is None else str(event_dict)}


def _filter_console_fields(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    """Drop metadata that clutters console output."""
    for field in ("pathname", "module", "process", "thread", "thread_name", "process_name", "stack_info", "color_message", "message"):
        event_dict.pop(field, None)
    return event_dict


def _human_readable_renderer(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> str:
    """Render as ``HH:MM:SS [LEVEL] logger event (key=value, ...)`` with an optional traceback."""
    use_colors = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    reset, gray, red, cyan = ("\033[0m", "\033[90m", "\033[91m", "\033[96m") if use_colors else ("", "", "", "")

    level = str(event_dict.pop("level", "info")).upper()
    timestamp = str(event_dict.pop("timestamp", ""))
    logger_name = str(event_dict.pop("logger", ""))
    event = str(event_dict.pop("event", ""))
    exception = event_dict.pop("exception", None)

    short_time = timestamp[11:19] if len(timestamp) >= 19 else timestamp
    level_color = red if level in {"ERROR", "CRITICAL"} else ""
    parts = [f"{gray}{short_time}{reset}", f"{level_color}[{level:<5}]{reset}", f"{cyan}{logger_name[-20:]:<20}{reset}", event]

    extras: list[str] = []
    for key, value in event_dict.items():
        if isinstance(value, dict | list):
            try:
                value = encode_json(value).decode("utf-8")
            except Exception:
                value = str(value)
        extras.append(f"{key}={value}")

    result = " ".join(p for p in parts if p)
    if extras:
        result += f" {gray}({', '.join(extras)}){reset}"
    if exception:
        result += f"\n{level_color}{exception}{reset}"
    return result


class SafeProcessorFormatter(structlog.stdlib.ProcessorFormatter):
    """ProcessorFormatter that tolerates stdlib records whose msg is not a dict."""

    def format(self, record: LogRecord) -> str:
        if not isinstance(record.msg, dict):
            record.msg = {"event": record.getMessage()}
            record.args = ()
        return super().format(record)


class StdLoggingConfig:
    foreign_pre_chain_processors: list[Processor] = [
        _ensure_event_dict,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _process_values,
    ]

    structlog_processors = [*foreign_pre_chain_processors[1:], structlog.stdlib.ProcessorFormatter.wrap_for_formatter]

    # Compact single-line JSON for log shippers
    json_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(sort_keys=True, default=json_serializer),
    ]

    console_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.format_exc_info,
        _filter_console_fields,
        _human_readable_renderer,
    ]

    formatters = {
        "json": {
            "()": SafeProcessorFormatter,
            "processors": json_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
        "plain": {
            "()": SafeProcessorFormatter,
            "processors": console_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
    }

    filters = {
        "no_health_metrics": {
            "()": NoHealthMetricsFilter,
        },
    }

    logger_factory = structlog.stdlib.LoggerFactory()

    handlers: dict[str, Any] = {
        "standard": {
            "class": logging.StreamHandler,
            "level": "DEBUG",
            "stream": sys.stdout,
            "formatter": _get_formatter_name(),
            "filters": ["no_health_metrics"],
        },
    }


def _quiet_logger(level: str) -> dict[str, Any]:
    return {"handlers": ["standard"], "propagate": False, "level": level}


common_logger_config: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": StdLoggingConfig.formatters,
    "handlers": StdLoggingConfig.handlers,
    "filters": StdLoggingConfig.filters,
    "root": {
        "handlers": ["standard"],
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    },
    "loggers": {
        "botocore": _quiet_logger("ERROR"),
        "boto3": _quiet_logger("ERROR"),
        "urllib3": _quiet_logger("WARNING"),
        "httpx": _quiet_logger("ERROR"),
        "aiosqlite": _quiet_logger("WARNING"),
        "sqlalchemy.engine": _quiet_logger("WARNING"),
        "uvicorn": {**_quiet_logger("INFO"), "filters": ["no_health_metrics"]},
        "uvicorn.error": {**_quiet_logger("INFO"), "filters": ["no_health_metrics"]},
        "uvicorn.access": {**_quiet_logger("WARNING"), "filters": ["no_health_metrics"]},
    },
}
