from __future__ import annotations
from fractions import Fraction
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")

def rightmost_at_or_before(items: Sequence[T], value: Fraction, key: Callable[[T], Fraction]) -> int:
    """
    Index des letzten Elements mit key(item) <= value (Liste aufsteigend sortiert).
    -1, wenn alle Elemente hinter 'value' liegen.
    """
    lo, hi = 0, len(items)
    while lo < hi:
        mid = (lo + hi) // 2
        if key(items[mid]) <= value:
            lo = mid + 1
        else:
            hi = mid
    return lo - 1

def segment_seconds(beat_from: Fraction, beat_to: Fraction, bps: float) -> float:
    return float(beat_to - beat_from) / bps
