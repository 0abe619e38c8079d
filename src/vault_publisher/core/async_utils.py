"""Async utilities for bridging blocking HTTP calls into publishing coroutines."""

import asyncio
import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Publishing awaits each call before issuing the next one, so remote
    mutations happen strictly in iteration order.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        response = await run_sync(client.request, "GET", "/repos/{owner}/{repo}",
                                  owner="octocat", repo="garden")
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def sleep_or_cancel(
    seconds: float, cancel: asyncio.Event | None = None
) -> bool:
    """Sleep for *seconds*, waking early if *cancel* is set.

    Returns:
        True if the cancel event fired, False if the full delay elapsed.
    """
    if cancel is None:
        await asyncio.sleep(seconds)
        return False
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True
