"""
Racing relay candidates.

Several relays are pinged at once. The first usable answer starts a short
grace period during which slower candidates may still qualify; whatever has
arrived when it ends (or when every candidate has answered) is the outcome.
"""

from __future__ import annotations

import asyncio
import random as _random
from functools import partial
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from relaycore.errors import DuplicateKeyError, ValidationError
from relaycore.types.fees import FeeAdjustment, GasFees, PingResponse
from relaycore.types.results import RaceOutcome
from relaycore.utils.logging import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")


async def race(
    candidates: Sequence[Awaitable[T]],
    keys: Sequence[str],
    grace_ms: float,
    random: Callable[[], float] = _random.random,
) -> RaceOutcome[T]:
    """
    Race candidate responses with a grace window after the first success.

    Successes are kept in arrival order and failures keyed by candidate.
    Candidates still pending when the race ends keep running; their results
    are ignored.

    Args:
        candidates: Awaitables, one per candidate
        keys: Unique key per candidate, used for ``errors``
        grace_ms: Grace window after the first success, in milliseconds
        random: Source of uniform floats in [0, 1) for picking the winner

    Raises:
        ValidationError: If ``candidates`` and ``keys`` differ in length
        DuplicateKeyError: If a key repeats
    """
    if len(candidates) != len(keys):
        raise ValidationError(
            f"Got {len(candidates)} candidates but {len(keys)} keys",
            field="keys",
        )
    seen = set()
    for key in keys:
        if key in seen:
            raise DuplicateKeyError(key)
        seen.add(key)

    outcome: RaceOutcome[T] = RaceOutcome()
    if not candidates:
        return outcome

    loop = asyncio.get_running_loop()
    finished: asyncio.Future = loop.create_future()
    remaining = len(candidates)
    grace_timer: Optional[asyncio.TimerHandle] = None

    def finish() -> None:
        if not finished.done():
            finished.set_result(None)

    def settle(key: str, task: asyncio.Future) -> None:
        nonlocal remaining, grace_timer
        remaining -= 1
        if finished.done():
            if not task.cancelled() and task.exception() is not None:
                _logger.debug("Ignoring late candidate failure", extra={"candidate": key})
            return
        if task.cancelled():
            outcome.errors[key] = asyncio.CancelledError()
        elif task.exception() is not None:
            outcome.errors[key] = task.exception()
        else:
            outcome.results.append(task.result())
            if grace_timer is None:
                grace_timer = loop.call_later(grace_ms / 1000, finish)
        if remaining == 0:
            finish()

    for key, candidate in zip(keys, candidates):
        asyncio.ensure_future(candidate).add_done_callback(partial(settle, key))

    try:
        await finished
    finally:
        if grace_timer is not None:
            grace_timer.cancel()

    if outcome.results:
        index = min(int(random() * len(outcome.results)), len(outcome.results) - 1)
        outcome.winner = outcome.results[index]
    _logger.debug(
        "Race finished",
        extra={"successes": len(outcome.results), "failures": len(outcome.errors)},
    )
    return outcome


def _increase_percent(original: int, updated: int) -> int:
    if updated <= original:
        return 0
    return (updated - original) * 100 // max(original, 1)


def adjust_fees_for_candidate(fees: GasFees, ping: PingResponse) -> FeeAdjustment:
    """
    Raise ``fees`` to the candidate's advertised minimums. Fees are never lowered.

    If the raised priority fee exceeds the max fee, the max fee is raised to
    match so the pair stays valid.
    """
    max_priority_fee = max(fees.max_priority_fee_per_gas, ping.min_max_priority_fee_per_gas)
    max_fee = max(fees.max_fee_per_gas, ping.min_max_fee_per_gas, max_priority_fee)
    delta = max(
        _increase_percent(fees.max_fee_per_gas, max_fee),
        _increase_percent(fees.max_priority_fee_per_gas, max_priority_fee),
    )
    return FeeAdjustment(
        updated_gas_fees=GasFees(max_fee_per_gas=max_fee, max_priority_fee_per_gas=max_priority_fee),
        max_delta_percent=delta,
    )
