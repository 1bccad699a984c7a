from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextvars import ContextVar
from functools import wraps
from typing import Any
from uuid import uuid4

from pydantic import Field

from common.ids import RequestId, UserId
from common.utils import ContextVarManager, JsonModel, use_context_var


class RequestContext(JsonModel):
    request_id: RequestId = Field(default_factory=lambda: RequestId(uuid4()))
    endpoint: str | None = None
    trigger: str | None = None

    user_id: UserId | None = None
    role: str | None = None

    def bind_user(self, user_id: UserId, role: str | None) -> None:
        self.user_id = user_id
        self.role = role

    @staticmethod
    def get() -> RequestContext:
        return _context_var.get()

    @staticmethod
    def get_or_none() -> RequestContext | None:
        return _context_var.get(None)

    @staticmethod
    def context(trigger: str | None = None) -> ContextVarManager[RequestContext]:
        return use_context_var(_context_var, RequestContext(trigger=trigger))

    @staticmethod
    def wrap_with_context(func: Callable[..., Any]) -> Callable[..., Any]:
        """Run ``func`` inside a fresh request context (for work started outside an HTTP request)."""
        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with RequestContext.context(trigger=func.__name__):
                    return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with RequestContext.context(trigger=func.__name__):
                return func(*args, **kwargs)

        return sync_wrapper


_context_var: ContextVar[RequestContext] = ContextVar("request_context")
