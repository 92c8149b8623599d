"""Drain policies that keep the number of in-flight operations within budget."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

import structlog

from ..config import DrainPolicy
from ..errors import InvalidArgumentError

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]


def validate_budget(budget: object) -> int:
    if isinstance(budget, bool) or not isinstance(budget, int):
        raise InvalidArgumentError(
            f"Concurrency budget must be an integer, got {type(budget).__name__}"
        )
    if budget < 1:
        raise InvalidArgumentError(f"Concurrency budget must be >= 1, got {budget}")
    return budget


def validate_policy(policy: object) -> DrainPolicy:
    try:
        return DrainPolicy(policy)
    except ValueError as exc:
        choices = ", ".join(item.value for item in DrainPolicy)
        raise InvalidArgumentError(f"Unknown drain policy {policy!r}, expected one of: {choices}") from exc


async def run_windowed(
    operations: Sequence[Operation[T]],
    budget: int,
    logger: structlog.BoundLogger | None = None,
) -> list[T | BaseException]:
    """Issue ``budget`` operations, wait for all of them, then issue the next window.

    Results (or the exception each operation raised) come back in input order.
    Once a window contains a failure no further window is issued; positions
    that were never started are left out of the returned list.
    """

    budget = validate_budget(budget)
    results: list[T | BaseException] = []
    for start in range(0, len(operations), budget):
        window = operations[start : start + budget]
        outcomes = await asyncio.gather(*(op() for op in window), return_exceptions=True)
        results.extend(outcomes)
        if logger is not None:
            logger.debug("window_drained", start=start, size=len(window))
        if any(isinstance(outcome, Exception) for outcome in outcomes):
            break
    return results


async def run_rolling(
    operations: Sequence[Operation[T]],
    budget: int,
    logger: structlog.BoundLogger | None = None,
) -> list[T | BaseException]:
    """Start a new operation whenever a slot frees up.

    After the first failure, operations still waiting for a slot are skipped;
    their position holds ``asyncio.CancelledError``.
    """

    budget = validate_budget(budget)
    semaphore = asyncio.Semaphore(budget)
    failed = asyncio.Event()

    async def _guarded(index: int, op: Operation[T]) -> T:
        async with semaphore:
            if failed.is_set():
                raise asyncio.CancelledError(f"skipped operation {index} after earlier failure")
            try:
                return await op()
            except Exception:
                failed.set()
                if logger is not None:
                    logger.debug("rolling_stop", index=index)
                raise

    tasks = [asyncio.ensure_future(_guarded(i, op)) for i, op in enumerate(operations)]
    try:
        return await asyncio.gather(*tasks, return_exceptions=True)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise


async def run_bounded(
    operations: Sequence[Operation[T]],
    budget: int,
    policy: DrainPolicy = DrainPolicy.WINDOW,
    logger: structlog.BoundLogger | None = None,
) -> list[T | BaseException]:
    if validate_policy(policy) is DrainPolicy.ROLLING:
        return await run_rolling(operations, budget, logger)
    return await run_windowed(operations, budget, logger)


__all__ = [
    "Operation",
    "run_bounded",
    "run_rolling",
    "run_windowed",
    "validate_budget",
    "validate_policy",
]
