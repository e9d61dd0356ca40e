"""Shared concurrency primitives for batch fan-out against slow providers.

Two patterns are exposed:

1. **throttled_gather** -- Like ``asyncio.gather`` over coroutine factories,
   each called only after it acquires a semaphore slot.  Used when you have
   a list of arbitrary calls to run with bounded concurrency and only care
   about the results in input order (e.g. preview lookups).

2. **run_bounded** -- The worker-pool pattern used by the track resolver
   and the concert ranker: one unit of work per input item, at most
   ``max_concurrency`` in flight, each unit under its own timeout, each
   outcome written into a pre-sized slot list at the item's input index.
   Units never raise; failures and timeouts are recorded in their
   :class:`UnitOutcome`.  Only the caller's cancellation signal aborts the
   batch, and then the caller gets :class:`BatchCancelledError` rather than
   a half-filled list.

Nothing here is module-global: every call builds its own semaphore from
the per-invocation :class:`BatchOptions`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar, cast

import structlog
from pydantic import BaseModel, ConfigDict, Field

from crossfade.utils.errors import BatchCancelledError
from crossfade.utils.logging import get_logger

_T = TypeVar("_T")
_R = TypeVar("_R")

DEFAULT_MAX_CONCURRENCY = 6
DEFAULT_UNIT_TIMEOUT = 10.0

_logger: structlog.BoundLogger = get_logger(__name__)


class BatchOptions(BaseModel):
    """Caller-supplied limits for one batch invocation.

    Attributes
    ----------
    max_concurrency:
        Maximum simultaneous in-flight provider calls.
    unit_timeout:
        Seconds a single unit may run once it holds a slot.  ``None``
        disables the per-unit timeout.
    """

    model_config = ConfigDict(frozen=True)

    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, le=32)
    unit_timeout: float | None = Field(default=DEFAULT_UNIT_TIMEOUT, gt=0)


@dataclass(frozen=True)
class UnitOutcome(Generic[_R]):
    """Result of one unit of a :func:`run_bounded` batch."""

    value: _R | None = None
    error: Exception | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.timed_out


def count_failures(outcomes: Sequence[UnitOutcome[_R]]) -> int:
    """Number of units that raised or timed out."""
    return sum(1 for outcome in outcomes if not outcome.ok)


async def throttled_gather(
    factories: Sequence[Callable[[], Awaitable[_T]]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    factories:
        Zero-argument callables, each returning the awaitable to run.  A
        factory is only called once its slot is acquired, so nothing is
        created for work that is cancelled while still queued.
    semaphore:
        Optional semaphore for concurrency control.  A fresh one allowing
        ``DEFAULT_MAX_CONCURRENCY`` slots is created when omitted.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input factories.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(DEFAULT_MAX_CONCURRENCY)

    async def _wrapped(factory: Callable[[], Awaitable[_T]]) -> _T:
        async with semaphore:
            return await factory()

    tasks = [_wrapped(f) for f in factories]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def run_bounded(
    items: Sequence[_T],
    worker: Callable[[_T], Awaitable[_R]],
    *,
    options: BatchOptions | None = None,
    cancel_event: asyncio.Event | None = None,
    logger: structlog.BoundLogger | None = None,
) -> list[UnitOutcome[_R]]:
    """Fan ``worker`` out over ``items`` and fan the outcomes back in by index.

    Parameters
    ----------
    items:
        Inputs, one unit of work each.
    worker:
        Async callable invoked once per item.
    options:
        Concurrency cap and per-unit timeout; defaults to :class:`BatchOptions`.
    cancel_event:
        Optional external cancellation signal.  When it is set, in-flight
        units are cancelled and :class:`BatchCancelledError` is raised.
    logger:
        Optional structured logger for per-unit warnings.

    Returns
    -------
    list[UnitOutcome]
        Exactly ``len(items)`` outcomes, ``outcomes[i]`` belonging to
        ``items[i]`` regardless of completion order.

    Raises
    ------
    BatchCancelledError
        If ``cancel_event`` fires before every unit has finished.
    """
    options = options or BatchOptions()
    log = logger or _logger

    if cancel_event is not None and cancel_event.is_set():
        raise BatchCancelledError("Batch cancelled before it started")

    slots: list[UnitOutcome[_R] | None] = [None] * len(items)
    if not items:
        return []

    semaphore = asyncio.Semaphore(options.max_concurrency)

    async def _unit(index: int, item: _T) -> None:
        async with semaphore:
            try:
                if options.unit_timeout is None:
                    value = await worker(item)
                else:
                    value = await asyncio.wait_for(worker(item), timeout=options.unit_timeout)
            except asyncio.TimeoutError:
                log.warning("batch_unit_timed_out", index=index, timeout=options.unit_timeout)
                slots[index] = UnitOutcome(timed_out=True)
            except Exception as exc:  # noqa: BLE001
                log.warning(
                    "batch_unit_failed",
                    index=index,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                slots[index] = UnitOutcome(error=exc)
            else:
                slots[index] = UnitOutcome(value=value)

    tasks = [asyncio.create_task(_unit(i, item)) for i, item in enumerate(items)]
    # return_exceptions=True so a cancelled child shows up as a value
    # instead of an unretrieved exception on the gathering future.
    fan_in = asyncio.gather(*tasks, return_exceptions=True)
    cancel_waiter = (
        asyncio.ensure_future(cancel_event.wait()) if cancel_event is not None else None
    )

    try:
        if cancel_waiter is None:
            await fan_in
        else:
            done, _ = await asyncio.wait(
                {fan_in, cancel_waiter}, return_when=asyncio.FIRST_COMPLETED
            )
            if fan_in not in done:
                await _abandon(tasks, fan_in)
                log.info("batch_cancelled", units=len(items))
                raise BatchCancelledError()
    except asyncio.CancelledError:
        await _abandon(tasks, fan_in)
        raise
    finally:
        if cancel_waiter is not None and not cancel_waiter.done():
            cancel_waiter.cancel()

    outcomes = cast("list[UnitOutcome[_R]]", slots)
    log.debug(
        "batch_complete",
        units=len(outcomes),
        failed=count_failures(outcomes),
    )
    return outcomes


async def _abandon(tasks: list[asyncio.Task[None]], fan_in: asyncio.Future) -> None:
    """Cancel every unit still running and wait until they have unwound."""
    fan_in.cancel()
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
