"""Cooperative task helpers on top of ``asyncio``.

Prompts and other externally completed steps are exposed by the editor host
as callback-last functions. ``suspend`` and ``awaitable`` turn them into a
single ``await`` so a whole compile flow reads as straight-line code, while
``spawn`` starts such flows without blocking the caller.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RUNNING_TASKS: set[asyncio.Task[Any]] = set()


class Completion(Generic[T]):
    """Single-fire completion slot handed to a callback-style operation.

    The first call resolves the suspended task; later calls are ignored.
    ``None`` stands for an absent value (the user dismissed the prompt).
    """

    __slots__ = ("_future",)

    def __init__(self, future: asyncio.Future[T | None]) -> None:
        self._future = future

    @property
    def done(self) -> bool:
        return self._future.done()

    def __call__(self, value: T | None = None) -> None:
        if self._future.done():
            logger.debug("ignoring repeated completion with %r", value)
            return
        self._future.set_result(value)


async def suspend(op: Callable[[Completion[T]], object]) -> T | None:
    """Run ``op`` with a completion callback and wait until it fires.

    Must be awaited from inside a running task. Control returns to the event
    loop until the callback is invoked; the task then resumes with its value.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T | None] = loop.create_future()
    op(Completion(future))
    return await future


def awaitable(func: Callable[..., object]) -> Callable[..., Awaitable[Any]]:
    """Adapt ``func(*args, on_done)`` into ``await wrapped(*args)``."""

    @functools.wraps(func)
    async def wrapped(*args: Any) -> Any:
        return await suspend(lambda done: func(*args, done))

    return wrapped


def _finish_task(task: asyncio.Task[Any], on_error: Callable[[BaseException], None] | None) -> None:
    _RUNNING_TASKS.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    logger.error("task %s failed", task.get_name(), exc_info=exc)
    if on_error is not None:
        on_error(exc)


def spawn(
    coro: Coroutine[Any, Any, T],
    on_error: Callable[[BaseException], None] | None = None,
    name: str | None = None,
) -> asyncio.Task[T]:
    """Schedule ``coro`` as an independent task and return immediately.

    Failures never propagate to the caller: they are logged and handed to
    ``on_error`` when one is given.
    """
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _RUNNING_TASKS.add(task)
    task.add_done_callback(functools.partial(_finish_task, on_error=on_error))
    return task


async def yield_point() -> None:
    """Hand control back to the event loop for one scheduling round."""
    await asyncio.sleep(0)


def running_task_count() -> int:
    """Number of spawned tasks that have not finished yet."""
    return len(_RUNNING_TASKS)
