"""Bounded fan-out of async work with results streamed in completion order."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Awaitable, Callable, Generic, Iterable, TypeVar

__all__ = ["map_parallel", "DEFAULT_CONCURRENCY"]

U = TypeVar("U")
V = TypeVar("V")

DEFAULT_CONCURRENCY = 5

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Failed:
    exc: BaseException


class _Done:
    pass


@dataclass(slots=True)
class _Output(Generic[V]):
    value: V


async def map_parallel(
    inputs: Iterable[U],
    map_fn: Callable[[U], Awaitable[V]],
    concurrency_limit: int = DEFAULT_CONCURRENCY,
) -> AsyncGenerator[V, None]:
    """
    Apply ``map_fn`` to every input with at most ``concurrency_limit`` in flight.

    Outputs are yielded as soon as each call finishes, so their order is
    completion order, not input order; carry any correlating data in the
    output itself. The first failure cancels the remaining work and is
    raised to the consumer once every worker has stopped. Closing the
    generator early cancels the workers as well.

    The returned generator is single-pass.
    """
    if concurrency_limit < 1:
        raise ValueError("concurrency_limit must be at least 1")

    channel: asyncio.Queue[_Output[V] | _Failed | _Done] = asyncio.Queue()
    source = iter(inputs)

    async def worker() -> None:
        # next() never awaits, so workers can share one iterator safely
        for item in source:
            value = await map_fn(item)
            channel.put_nowait(_Output(value))

    async def run_workers() -> None:
        try:
            async with asyncio.TaskGroup() as group:
                for _ in range(concurrency_limit):
                    group.create_task(worker())
        except* Exception as failures:
            first = failures.exceptions[0]
            _logger.debug("Parallel map stopped by %r", first)
            channel.put_nowait(_Failed(first))
        else:
            channel.put_nowait(_Done())

    runner = asyncio.create_task(run_workers())
    try:
        while True:
            message = await channel.get()
            if isinstance(message, _Done):
                return
            if isinstance(message, _Failed):
                raise message.exc
            yield message.value
    finally:
        if not runner.done():
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner
