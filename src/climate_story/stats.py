from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
from sklearn.linear_model import LinearRegression


@dataclass(frozen=True)
class Trend:
    slope: float
    intercept: float

    def __call__(self, x: float) -> float:
        return self.intercept + self.slope * x


def linear_trend(xs: Iterable[float], ys: Iterable[float]) -> Trend:
    x = np.asarray(list(xs), dtype=float)
    y = np.asarray(list(ys), dtype=float)
    ok = ~(np.isnan(x) | np.isnan(y))
    x, y = x[ok], y[ok]
    if x.size < 2 or np.ptp(x) == 0:
        return Trend(0.0, float(y[-1]) if y.size else 0.0)
    m = LinearRegression().fit(x.reshape(-1, 1), y)
    return Trend(float(m.coef_[0]), float(m.intercept_))
