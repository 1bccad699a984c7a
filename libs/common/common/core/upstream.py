"""Bounded calls into blocking provider SDKs (boto3, razorpay)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from common.core.app_error import AppException, Errors
from common.utils.utils import get_logger

logger = get_logger()


async def call_upstream[T](
    service: str,
    func: Callable[..., T],
    *args: Any,
    timeout: float,
    passthrough: tuple[type[BaseException], ...] = (),
    **kwargs: Any,
) -> T:
    """Run a blocking SDK call in a worker thread with a timeout.

    Args:
        service: Provider name, used in logs and error details
        func: Blocking callable
        timeout: Seconds before the call is abandoned
        passthrough: Exception types re-raised unchanged (provider rejections the caller maps itself)

    Raises:
        AppException: ``Errors.Upstream.TIMEOUT`` on timeout, ``Errors.Upstream.FAILED`` on any other error
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout=timeout)
    except TimeoutError as e:
        logger.warning("Upstream call timed out", service=service, timeout=timeout)
        raise Errors.Upstream.TIMEOUT.create(message=f"{service} timed out", details={"service": service}, cause=e) from e
    except AppException:
        raise
    except passthrough:
        raise
    except Exception as e:
        logger.exception("Upstream call failed", service=service)
        raise Errors.Upstream.FAILED.create(message=f"{service} request failed", details={"service": service}, cause=e) from e
