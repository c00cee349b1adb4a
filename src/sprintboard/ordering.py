"""Order key allocation for issues sharing a container.

Keys are floats. Inserting at the end or before an existing issue normally
touches only the moved issue: the new key is ``max + step`` or the midpoint
between two neighbours. When floating point precision leaves no distinct value
between two neighbours (or the neighbours tie), the whole container is
renumbered to evenly spaced integer-valued keys first. The repair is returned
alongside the key rather than applied, so callers commit both in one write.

Every function expects ``keys`` in list order (ascending).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import DEFAULT_ORDER_STEP

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    key: float
    # position in the input sequence -> replacement key
    repairs: dict[int, float] = field(default_factory=dict)

    @property
    def renumbered(self) -> bool:
        return bool(self.repairs)


class KeySpaceExhausted(RuntimeError):
    pass


def renumber(count: int, *, step: float = DEFAULT_ORDER_STEP, baseline: float = 0.0) -> list[float]:
    return [baseline + i * step for i in range(count)]


def midpoint(lo: float, hi: float) -> float | None:
    """Return a value strictly between ``lo`` and ``hi`` or None if none exists."""
    mid = lo / 2 + hi / 2
    if lo < mid < hi:
        return mid
    return None


def _after(top: float, step: float) -> float | None:
    candidate = top + step
    if math.isfinite(candidate) and candidate > top:
        return candidate
    return None


def _before(bottom: float, step: float) -> float | None:
    candidate = bottom - step
    if math.isfinite(candidate) and candidate < bottom:
        return candidate
    return None


def _repair(keys: Sequence[float], step: float, baseline: float) -> tuple[list[float], dict[int, float]]:
    fresh = renumber(len(keys), step=step, baseline=baseline)
    logger.debug("renumbering %d order keys (step=%s)", len(keys), step)
    return fresh, dict(enumerate(fresh))


def _strictly_increasing(keys: Sequence[float]) -> bool:
    return all(a < b for a, b in zip(keys, keys[1:]))


def order_for_end(
    keys: Sequence[float], *, step: float = DEFAULT_ORDER_STEP, baseline: float = 0.0
) -> Allocation:
    if not keys:
        return Allocation(baseline)
    if _strictly_increasing(keys):
        candidate = _after(keys[-1], step)
        if candidate is not None:
            return Allocation(candidate)
    fresh, repairs = _repair(keys, step, baseline)
    candidate = _after(fresh[-1], step)
    if candidate is None:
        raise KeySpaceExhausted(f"cannot allocate a key after {fresh[-1]}")
    return Allocation(candidate, repairs)


def order_before(
    keys: Sequence[float],
    anchor_index: int,
    *,
    step: float = DEFAULT_ORDER_STEP,
    baseline: float = 0.0,
) -> Allocation:
    if not 0 <= anchor_index < len(keys):
        raise IndexError(f"anchor index {anchor_index} outside container of {len(keys)}")

    def _between(seq: Sequence[float]) -> float | None:
        if anchor_index == 0:
            return _before(seq[0], step)
        return midpoint(seq[anchor_index - 1], seq[anchor_index])

    if _strictly_increasing(keys):
        candidate = _between(keys)
        if candidate is not None:
            return Allocation(candidate)
    fresh, repairs = _repair(keys, step, baseline)
    candidate = _between(fresh)
    if candidate is None:
        raise KeySpaceExhausted(f"cannot allocate a key before position {anchor_index}")
    return Allocation(candidate, repairs)


__all__ = [
    "Allocation",
    "KeySpaceExhausted",
    "midpoint",
    "order_before",
    "order_for_end",
    "renumber",
]
