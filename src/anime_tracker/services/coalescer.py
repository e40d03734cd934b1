"""Request coalescing for concurrent identical upstream calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class RequestCoalescer(Generic[T]):
    """Runs at most one producer per key at a time.

    The first caller for a key starts the producer as a task and
    publishes it before awaiting, so callers arriving in the same tick
    already find it. Later callers await the same task and observe the
    same result or the same exception. The key is released when the
    producer settles, whatever the outcome.

    Shared tasks are shielded: a caller that is cancelled stops waiting
    but does not cancel the work the other callers depend on.

    Example:
        ```python
        coalescer: RequestCoalescer[list[Anime]] = RequestCoalescer("search")
        a, b = await asyncio.gather(
            coalescer.run("naruto", fetch),
            coalescer.run("naruto", fetch),
        )
        # fetch() ran once; a is b
        ```
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._in_flight: dict[str, asyncio.Task[T]] = {}

    async def run(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        """Run ``producer`` for ``key`` or join the run already in flight.

        Args:
            key: Coalescing key
            producer: Zero-argument coroutine function doing the real work

        Returns:
            The producer's result
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._run_and_release(key, producer))
            task.add_done_callback(self._consume_exception)
            self._in_flight[key] = task
        return await asyncio.shield(task)

    @staticmethod
    def _consume_exception(task: asyncio.Task) -> None:
        # Marks the failure as retrieved when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _run_and_release(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        try:
            return await producer()
        finally:
            self._in_flight.pop(key, None)

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    @property
    def name(self) -> str:
        return self._name
