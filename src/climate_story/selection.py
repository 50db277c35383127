from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional, Sequence

from plotly.basedatatypes import BaseTraceType

from .config import CATEGORY_PALETTE
from .controls import CheckboxGroup, SearchInput


class OrdinalColors:
    """String key -> palette color, assigned in order of first request."""

    def __init__(self, palette: Iterable[str] = CATEGORY_PALETTE, fixed: Mapping[str, str] | None = None):
        self.palette = list(palette)
        self._assigned: dict[str, str] = dict(fixed or {})
        self._next = 0

    def __call__(self, key: str) -> str:
        if key not in self._assigned:
            self._assigned[key] = self.palette[self._next % len(self.palette)]
            self._next += 1
        return self._assigned[key]


DrawSeries = Callable[[str, str], Sequence[BaseTraceType]]


def trace_color(trace: BaseTraceType) -> str:
    for part in ("line", "marker"):
        color = getattr(getattr(trace, part, None), "color", None)
        if isinstance(color, str):
            return color
    return ""


class SeriesVisibilityController:
    """Selection State for one panel plus its full-redraw list of plotly traces.

    The selection keeps insertion order; `redraw` throws every trace away and
    asks `draw_series` for exactly the selected keys in that order. Each trace
    is tagged with its key as `legendgroup`, so one legend entry toggles all
    traces of a series.
    """

    def __init__(self, draw_series: DrawSeries, colors: Callable[[str], str], initial: Iterable[str] = (),
                 checkboxes: Optional[CheckboxGroup] = None, search: Optional[SearchInput] = None,
                 labels: Mapping[str, str] | None = None):
        self.draw_series = draw_series
        self.colors = colors
        self.labels = dict(labels or {})
        self.selected: dict[str, None] = dict.fromkeys(initial)
        self.opacity: dict[str, float] = {}
        self.traces: list[BaseTraceType] = []
        self.redraws = 0
        self.checkboxes = checkboxes
        self.search = search
        if checkboxes is not None:
            checkboxes.sync(self.selected)
            checkboxes.on("change", self._on_checkbox)
        if search is not None:
            search.on("input", self.filter_by_search)

    def detach(self) -> None:
        if self.checkboxes is not None:
            self.checkboxes.off("change", self._on_checkbox)
        if self.search is not None:
            self.search.off("input", self.filter_by_search)

    @property
    def keys(self) -> list[str]:
        return list(self.selected)

    def _on_checkbox(self, key: str, checked: bool) -> None:
        if checked != (key in self.selected):
            self.toggle(key)

    def toggle(self, key: str) -> None:
        if key in self.selected:
            del self.selected[key]
        else:
            self.selected[key] = None
        self._sync_boxes()
        self.redraw()

    def set_all(self, keys: Iterable[str]) -> None:
        self.selected = dict.fromkeys(keys)
        self._sync_boxes()
        self.redraw()

    def filter_by_search(self, text: str) -> None:
        if self.checkboxes is None:
            return
        needle = (text or "").strip().lower()
        for box in self.checkboxes.boxes:
            box.display = "" if needle in box.label.lower() else "none"

    def set_opacity(self, key: str, value: float) -> None:
        self.opacity[key] = float(value)
        for tr in self.traces:
            if tr.legendgroup == key:
                tr.opacity = value

    def redraw(self) -> None:
        self.redraws += 1
        self.traces = []
        for key in self.selected:
            color = self.colors(key)
            op = self.opacity.get(key, 1.0)
            for i, tr in enumerate(self.draw_series(key, color)):
                tr.update(legendgroup=key, name=self.labels.get(key, key), showlegend=(i == 0), opacity=op)
                self.traces.append(tr)

    def rendered(self) -> list[tuple[str, str, float]]:
        """(key, color, opacity) per drawn series, in draw order."""
        out = []
        seen = set()
        for tr in self.traces:
            if tr.legendgroup in seen:
                continue
            seen.add(tr.legendgroup)
            out.append((tr.legendgroup, trace_color(tr), tr.opacity))
        return out

    def _sync_boxes(self) -> None:
        if self.checkboxes is not None:
            self.checkboxes.sync(self.selected)
