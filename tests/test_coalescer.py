"""
Tests for request coalescing.
"""

import asyncio
import gc

import pytest

from anime_tracker.errors import UpstreamError
from anime_tracker.services import RequestCoalescer


class GatedProducer:
    """Producer that blocks until released and counts its invocations."""

    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls = 0
        self.gate = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


async def test_single_caller_gets_result():
    coalescer = RequestCoalescer("test")
    producer = GatedProducer(result="value")
    producer.gate.set()

    assert await coalescer.run("k", producer) == "value"
    assert producer.calls == 1
    assert not coalescer.is_in_flight("k")


async def test_concurrent_callers_share_one_run():
    coalescer = RequestCoalescer("test")
    producer = GatedProducer(result=["shared"])

    waiters = [asyncio.create_task(coalescer.run("k", producer)) for _ in range(5)]
    await asyncio.sleep(0)
    assert coalescer.is_in_flight("k")
    assert coalescer.in_flight_count == 1

    producer.gate.set()
    results = await asyncio.gather(*waiters)

    assert producer.calls == 1
    assert all(result is results[0] for result in results)
    assert coalescer.in_flight_count == 0


async def test_failure_is_shared_and_key_released():
    coalescer = RequestCoalescer("test")
    producer = GatedProducer(error=UpstreamError(503))

    waiters = [asyncio.create_task(coalescer.run("k", producer)) for _ in range(3)]
    await asyncio.sleep(0)
    producer.gate.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert producer.calls == 1
    assert all(isinstance(result, UpstreamError) for result in results)
    assert all(result is results[0] for result in results)
    assert not coalescer.is_in_flight("k")

    # Next call starts a new run
    producer.error = None
    producer.result = "recovered"
    assert await coalescer.run("k", producer) == "recovered"
    assert producer.calls == 2


async def test_different_keys_run_independently():
    coalescer = RequestCoalescer("test")
    first = GatedProducer(result="a")
    second = GatedProducer(result="b")

    task_a = asyncio.create_task(coalescer.run("a", first))
    task_b = asyncio.create_task(coalescer.run("b", second))
    await asyncio.sleep(0)
    assert coalescer.in_flight_count == 2

    first.gate.set()
    second.gate.set()

    assert await task_a == "a"
    assert await task_b == "b"


async def test_cancelled_waiter_does_not_cancel_shared_run():
    coalescer = RequestCoalescer("test")
    producer = GatedProducer(result="done")

    impatient = asyncio.create_task(coalescer.run("k", producer))
    patient = asyncio.create_task(coalescer.run("k", producer))
    await asyncio.sleep(0)

    impatient.cancel()
    with pytest.raises(asyncio.CancelledError):
        await impatient

    producer.gate.set()
    assert await patient == "done"
    assert producer.calls == 1


async def test_failure_with_no_waiters_left_is_not_reported_as_unretrieved():
    loop = asyncio.get_running_loop()
    reported = []
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(lambda _, context: reported.append(context))
    try:
        coalescer = RequestCoalescer("test")
        producer = GatedProducer(error=UpstreamError(503))

        waiter = asyncio.create_task(coalescer.run("k", producer))
        await asyncio.sleep(0)
        shared = coalescer._in_flight["k"]

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        producer.gate.set()
        while not shared.done():
            await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert not coalescer.is_in_flight("k")
        del shared, waiter
        gc.collect()

        assert reported == []
    finally:
        loop.set_exception_handler(previous_handler)
