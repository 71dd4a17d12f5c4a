from __future__ import annotations

import functools
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def log_node_call(
    tag: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Log duration and outcome of an awaited node call at DEBUG.

    Emits ``[NODE-CALL][<tag>] <qualname> ok|failed(<ExcType>) <ms>ms``.
    Exceptions propagate unchanged.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            t0 = time.perf_counter()
            outcome = "ok"
            try:
                return await func(*args, **kwargs)
            except BaseException as e:
                outcome = f"failed({type(e).__name__})"
                raise
            finally:
                logger.debug(
                    "[NODE-CALL][%s] %s %s %.3fms",
                    tag,
                    func.__qualname__,
                    outcome,
                    (time.perf_counter() - t0) * 1000.0,
                )

        return wrapper

    return decorator
