from __future__ import annotations

from operator import attrgetter
from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")

by_year = attrgetter("year")


def nearest_index(samples: Sequence[T], value: float, key: Callable[[T], float] = by_year) -> Optional[int]:
    """Index of the sample whose key is closest to `value`.

    Linear scan; a later sample replaces the running best only when strictly
    closer, so equidistant candidates resolve to the first one. Works on
    unsorted input. Returns None for an empty sequence.
    """
    best_i, best_d = None, None
    for i, s in enumerate(samples):
        d = abs(key(s) - value)
        if d != d:  # NaN key
            continue
        if best_d is None or d < best_d:
            best_i, best_d = i, d
    return best_i


def nearest_sample(samples: Sequence[T], value: float, key: Callable[[T], float] = by_year) -> Optional[T]:
    i = nearest_index(samples, value, key)
    return None if i is None else samples[i]
