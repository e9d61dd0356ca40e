"""Unit tests for the bounded fan-out helpers in crossfade.utils.concurrency."""

from __future__ import annotations

import asyncio
import random
from functools import partial

import pytest
from pydantic import ValidationError

from crossfade.utils.concurrency import (
    BatchOptions,
    UnitOutcome,
    count_failures,
    run_bounded,
    throttled_gather,
)
from crossfade.utils.errors import BatchCancelledError


# ======================================================================
# BatchOptions
# ======================================================================


class TestBatchOptions:
    def test_defaults(self) -> None:
        options = BatchOptions()
        assert options.max_concurrency == 6
        assert options.unit_timeout == 10.0

    def test_concurrency_bounds_enforced(self) -> None:
        with pytest.raises(ValidationError):
            BatchOptions(max_concurrency=0)
        with pytest.raises(ValidationError):
            BatchOptions(max_concurrency=33)

    def test_timeout_can_be_disabled(self) -> None:
        assert BatchOptions(unit_timeout=None).unit_timeout is None


# ======================================================================
# run_bounded
# ======================================================================


class TestRunBounded:
    @pytest.mark.asyncio
    async def test_empty_input_returns_empty_list(self) -> None:
        async def worker(item: int) -> int:
            return item

        assert await run_bounded([], worker) == []

    @pytest.mark.asyncio
    async def test_output_order_matches_input_under_random_latency(self) -> None:
        rng = random.Random(7)
        delays = [rng.uniform(0, 0.02) for _ in range(25)]

        async def worker(index: int) -> int:
            await asyncio.sleep(delays[index])
            return index * 10

        outcomes = await run_bounded(
            list(range(25)), worker, options=BatchOptions(max_concurrency=5)
        )

        assert [o.value for o in outcomes] == [i * 10 for i in range(25)]
        assert all(o.ok for o in outcomes)

    @pytest.mark.asyncio
    async def test_concurrency_never_exceeds_cap(self) -> None:
        in_flight = 0
        peak = 0

        async def worker(_: int) -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1

        await run_bounded(list(range(20)), worker, options=BatchOptions(max_concurrency=3))

        assert peak <= 3

    @pytest.mark.asyncio
    async def test_failing_unit_does_not_sink_siblings(self) -> None:
        async def worker(item: str) -> str:
            if item == "bad":
                raise RuntimeError("boom")
            return item.upper()

        outcomes = await run_bounded(["a", "bad", "c"], worker)

        assert outcomes[0].value == "A"
        assert outcomes[2].value == "C"
        assert not outcomes[1].ok
        assert isinstance(outcomes[1].error, RuntimeError)
        assert count_failures(outcomes) == 1

    @pytest.mark.asyncio
    async def test_slow_unit_times_out(self) -> None:
        async def worker(delay: float) -> float:
            await asyncio.sleep(delay)
            return delay

        outcomes = await run_bounded(
            [0.0, 1.0], worker, options=BatchOptions(unit_timeout=0.05)
        )

        assert outcomes[0].ok
        assert outcomes[1].timed_out
        assert outcomes[1].value is None

    @pytest.mark.asyncio
    async def test_pre_set_cancel_event_raises_without_running(self) -> None:
        calls: list[int] = []

        async def worker(item: int) -> int:
            calls.append(item)
            return item

        event = asyncio.Event()
        event.set()

        with pytest.raises(BatchCancelledError):
            await run_bounded([1, 2, 3], worker, cancel_event=event)
        assert calls == []

    @pytest.mark.asyncio
    async def test_cancel_mid_batch_raises_and_stops_units(self) -> None:
        finished: list[int] = []
        event = asyncio.Event()

        async def worker(item: int) -> int:
            if item == 0:
                event.set()
                return item
            await asyncio.sleep(5)
            finished.append(item)
            return item

        with pytest.raises(BatchCancelledError):
            await run_bounded(
                [0, 1, 2],
                worker,
                options=BatchOptions(unit_timeout=None),
                cancel_event=event,
            )
        assert finished == []

    @pytest.mark.asyncio
    async def test_unset_cancel_event_does_not_interfere(self) -> None:
        async def worker(item: int) -> int:
            return item + 1

        outcomes = await run_bounded([1, 2], worker, cancel_event=asyncio.Event())

        assert [o.value for o in outcomes] == [2, 3]


# ======================================================================
# throttled_gather
# ======================================================================


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_results_in_input_order(self) -> None:
        async def delayed(value: int, delay: float) -> int:
            await asyncio.sleep(delay)
            return value

        results = await throttled_gather(
            [partial(delayed, 1, 0.02), partial(delayed, 2, 0.0), partial(delayed, 3, 0.01)],
            semaphore=asyncio.Semaphore(2),
        )

        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_exceptions_returned_in_place(self) -> None:
        async def fail() -> int:
            raise ValueError("nope")

        async def succeed() -> int:
            return 5

        results = await throttled_gather([succeed, fail])

        assert results[0] == 5
        assert isinstance(results[1], ValueError)

    @pytest.mark.asyncio
    async def test_queued_work_is_not_created_when_cancelled(self) -> None:
        started: list[int] = []

        async def slow(value: int) -> int:
            started.append(value)
            await asyncio.sleep(5)
            return value

        gathering = asyncio.create_task(
            throttled_gather(
                [partial(slow, i) for i in range(4)], semaphore=asyncio.Semaphore(1)
            )
        )
        await asyncio.sleep(0.02)
        gathering.cancel()
        with pytest.raises(asyncio.CancelledError):
            await gathering

        assert started == [0]


class TestUnitOutcome:
    def test_ok_requires_no_error_and_no_timeout(self) -> None:
        assert UnitOutcome(value=1).ok
        assert not UnitOutcome(error=RuntimeError()).ok
        assert not UnitOutcome(timed_out=True).ok
