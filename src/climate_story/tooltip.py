from __future__ import annotations

import html
import math
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Union

from .config import TOOLTIP_OFFSET, TOOLTIP_OPACITY, TOOLTIP_SIZE
from .data import Sample
from .nearest import by_year, nearest_sample

IDLE = "idle"
ACTIVE = "active"


@dataclass
class Tooltip:
    html: str = ""
    left: float = 0.0
    top: float = 0.0
    opacity: float = 0.0
    position: str = "fixed"
    anchor: str = "left"

    @property
    def visible(self) -> bool:
        return self.opacity > 0


def fmt_value(v) -> str:
    if v is None:
        return "N/A"
    try:
        fv = float(v)
    except (TypeError, ValueError):
        return html.escape(str(v))
    if math.isnan(fv):
        return "N/A"
    return f"{fv:.2f}"


def compose_label(sample: Sample, keys: Sequence[str], names: Mapping[str, str] | None = None,
                  head: str = "Year") -> str:
    """`Year: 2005<br>name: value` for each active key with a value on the sample."""
    names = names or {}
    lines = [f"{head}: {sample.year}"]
    for k in keys:
        v = sample.get(k)
        if v is None or (isinstance(v, float) and math.isnan(v)):
            continue
        lines.append(f"{html.escape(names.get(k, k))}: {fmt_value(sample[k])}")
    return "<br>".join(lines)


class CrosshairSync:
    """Couples a pointer position over a chart to a guide line and a fixed tooltip.

    States are idle (pointer outside the interaction surface) and active.
    Positions arrive in data units along the x axis; the guide snaps to the
    nearest sample's key. `samples` may be a sequence or a zero-arg callable,
    so handlers that fire before data has loaded see an empty list and do
    nothing.
    """

    def __init__(self, samples: Union[Sequence[Sample], Callable[[], Sequence[Sample]]],
                 label: Callable[[Sample, list], str], active: Callable[[], Sequence[str]] = tuple,
                 offset: tuple = TOOLTIP_OFFSET, opacity: float = TOOLTIP_OPACITY,
                 viewport: Optional[tuple] = None, size: tuple = TOOLTIP_SIZE, key=by_year,
                 on_sample: Optional[Callable[[Sample], None]] = None):
        self._samples = samples if callable(samples) else (lambda: samples)
        self.label = label
        self.active = active
        self.offset = offset
        self.opacity = opacity
        self.viewport = viewport
        self.size = size
        self.key = key
        self.on_sample = on_sample
        self.tooltip = Tooltip()
        self.guide_x: Optional[float] = None
        self.guide_opacity = 0.0
        self.state = IDLE
        self.current: Optional[Sample] = None
        self.last_pointer: Optional[tuple] = None

    def pointer_move(self, value: float, client_x: float = 0.0, client_y: float = 0.0) -> Optional[Sample]:
        samples = self._samples()
        if not samples:
            return None
        s = nearest_sample(samples, value, self.key)
        if s is None:
            return None
        self.guide_x = self.key(s)
        self.guide_opacity = 1.0
        self.tooltip.html = self.label(s, list(self.active()))
        self.last_pointer = (client_x, client_y)
        self._place(client_x, client_y)
        self.tooltip.opacity = self.opacity
        self.state = ACTIVE
        self.current = s
        if self.on_sample is not None:
            self.on_sample(s)
        return s

    def pointer_leave(self) -> None:
        self.tooltip.opacity = 0
        self.guide_opacity = 0.0
        self.state = IDLE
        self.current = None

    def refresh(self) -> None:
        """Recompose the label for the pinned sample after the active keys changed."""
        if self.state == ACTIVE and self.current is not None:
            self.tooltip.html = self.label(self.current, list(self.active()))

    def page_scroll(self) -> None:
        # fixed positioning: the pointer's viewport coords are unchanged by scrolling
        if self.state == ACTIVE and self.last_pointer is not None:
            self._place(*self.last_pointer)

    def resize(self, viewport: tuple) -> None:
        self.viewport = viewport
        self.page_scroll()

    def _place(self, cx: float, cy: float) -> None:
        ox, oy = self.offset
        left, top = cx + ox, cy + oy
        anchor = "left"
        if self.viewport is not None:
            vw, vh = self.viewport
            tw, th = self.size
            if left + tw > vw:
                left = max(0.0, cx - ox - tw)
                anchor = "right"
            if top + th > vh:
                top = max(0.0, cy - oy - th)
        self.tooltip.left = left
        self.tooltip.top = top
        self.tooltip.anchor = anchor
