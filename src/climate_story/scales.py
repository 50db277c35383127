from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
from plotly.colors import sample_colorscale

# red at 0, blue at 1, same orientation as d3.interpolateRdBu
COLORSCALE = "RdBu"


def quantile_bounds(values: Iterable[float], lo: float = 0.02, hi: float = 0.98) -> tuple[float, float]:
    arr = np.asarray(list(values), dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return (0.0, 0.0)
    # numpy "linear" is the R-7 estimator used by d3.quantile
    q_lo, q_hi = np.quantile(arr, [lo, hi])
    return (float(q_lo), float(q_hi))


class DivergingScale:
    """Piecewise-linear domain (d0, mid, d2) onto t in [0, 0.5, 1], then a plotly colorscale.

    Passing the domain as (hi, 0, lo) puts warm values on the red end.
    """

    def __init__(self, domain: Sequence[float], clamp: bool = True, unknown: str = "#222",
                 colorscale: str = COLORSCALE):
        self.domain = tuple(float(d) for d in domain)
        self.clamp = clamp
        self.unknown = unknown
        self.colorscale = colorscale

    def t(self, v: float) -> float:
        d0, mid, d2 = self.domain
        v = float(v)
        if v == mid:
            t = 0.5
        elif (v - mid) * (d0 - mid) > 0:
            t = 0.5 - 0.5 * (v - mid) / (d0 - mid)
        elif d2 != mid:
            t = 0.5 + 0.5 * (v - mid) / (d2 - mid)
        else:
            t = 0.5
        if self.clamp:
            t = min(1.0, max(0.0, t))
        return t

    def __call__(self, v) -> str:
        if v is None:
            return self.unknown
        try:
            fv = float(v)
        except (TypeError, ValueError):
            return self.unknown
        if math.isnan(fv):
            return self.unknown
        return sample_colorscale(self.colorscale, [self.t(fv)])[0]

    def colorbar(self) -> dict:
        """Colorbar ticks for a trace whose z already holds `t` values."""
        d0, mid, d2 = self.domain
        return dict(tickvals=[0.0, 0.5, 1.0], ticktext=[f"{d0:+.1f}", f"{mid:g}", f"{d2:+.1f}"], title="°C")

    @classmethod
    def from_values(cls, values: Iterable[float], quantiles: tuple[float, float] = (0.02, 0.98),
                    unknown: str = "#222") -> "DivergingScale":
        lo, hi = quantile_bounds(values, *quantiles)
        return cls((hi, 0.0, lo), clamp=True, unknown=unknown)
