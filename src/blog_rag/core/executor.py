"""
Worker threads for blocking collaborator calls.

Embedding, store and completion clients are synchronous. Each component
that calls them owns a ThreadPoolExecutor and awaits the calls through
`call_in_executor`, so a deadline returns control to the event loop even
while the worker thread is still stuck in the client.

`run_blocking` is the sync entry point used by `retrieve()` / `answer()`.
Unlike `asyncio.run()`, it does not join the loop's default executor on
exit, so an abandoned worker cannot hold the caller past its deadline.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


def make_executor(name: str, max_workers: int | None = None) -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"blog-rag-{name}")


async def call_in_executor(
    executor: ThreadPoolExecutor,
    fn: Callable[..., T],
    *args: Any,
    timeout: float,
) -> T:
    """
    Run `fn(*args)` on `executor` and wait at most `timeout` seconds.

    Raises asyncio.TimeoutError on expiry. The worker thread is abandoned,
    not interrupted.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(
        loop.run_in_executor(executor, functools.partial(fn, *args)),
        timeout=timeout,
    )


def run_blocking(coro: Awaitable[T]) -> T:
    """Run a coroutine to completion on a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        try:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            # close() shuts the default executor down with wait=False
            loop.close()
