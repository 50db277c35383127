from __future__ import annotations

from typing import Callable, Optional

import plotly.graph_objects as go

from ..config import CHART_SIZE, GUIDE_COLOR, MARGIN
from ..controls import ControlRegistry
from ..data import DataLoadError
from ..selection import SeriesVisibilityController
from ..tooltip import ACTIVE, CrosshairSync


def padded_domain(values, lo_pad: float = 0.95, hi_pad: float = 1.05) -> tuple:
    vals = [v for v in values if v == v]
    if not vals:
        return (0.0, 1.0)
    return (min(vals) * lo_pad, max(vals) * hi_pad)


def base_figure(title: str = "", x_title: str = "", y_title: str = "", height: int = CHART_SIZE[1],
                hovermode: str = "x unified") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        height=height,
        margin=MARGIN,
        title=title,
        xaxis_title=x_title,
        yaxis_title=y_title,
        hovermode=hovermode,
        plot_bgcolor="white",
        legend=dict(orientation="v", x=1.02, y=1),
    )
    fig.update_xaxes(showgrid=False, showspikes=True, spikemode="across", spikedash="dash",
                     spikecolor=GUIDE_COLOR, spikethickness=1)
    fig.update_yaxes(gridcolor="#eee")
    return fig


class Panel:
    """One self-contained chart bound to a container id.

    `load()` reads the inputs and builds the panel state; a load failure is
    logged and leaves the panel unrendered. Controls are looked up in
    `registry` and silently skipped when absent. `figure()` builds a fresh
    plotly figure from the current state on every call.
    """

    size = CHART_SIZE

    def __init__(self, container_id: str, registry: Optional[ControlRegistry] = None):
        self.container_id = container_id
        self.registry = registry if registry is not None else ControlRegistry()
        self.crosshair: Optional[CrosshairSync] = None
        self.controller: Optional[SeriesVisibilityController] = None
        self.x_range: tuple = (0.0, 1.0)
        self._bindings: list[tuple] = []
        self.ready = False

    def load(self) -> bool:
        self.teardown()
        try:
            self._load()
        except DataLoadError as e:
            print(f"[ERROR] {self.container_id}: {e}")
            return False
        self._build()
        self.ready = True
        return True

    def bind(self, id: str, event: str, handler: Callable) -> bool:
        c = self.registry.bind(id, event, handler)
        if c is None:
            return False
        self._bindings.append((c, event, handler))
        return True

    def teardown(self) -> None:
        for c, event, handler in self._bindings:
            c.off(event, handler)
        self._bindings.clear()
        if self.controller is not None:
            self.controller.detach()
            self.controller = None
        self.crosshair = None
        self.ready = False

    def _load(self) -> None:
        raise NotImplementedError

    def _build(self) -> None:
        raise NotImplementedError

    def _figure(self) -> go.Figure:
        raise NotImplementedError

    def client_x(self, value: float) -> float:
        """Horizontal pixel offset of a data value inside the chart."""
        lo, hi = self.x_range
        span = (hi - lo) or 1.0
        left, right = MARGIN["l"], self.size[0] - MARGIN["r"]
        return left + (value - lo) / span * (right - left)

    def pointer_move(self, value: float, client_x: Optional[float] = None, client_y: Optional[float] = None):
        if self.crosshair is None:
            return None
        if client_x is None:
            client_x = self.client_x(value)
        if client_y is None:
            client_y = MARGIN["t"]
        return self.crosshair.pointer_move(value, client_x, client_y)

    def pointer_leave(self) -> None:
        if self.crosshair is not None:
            self.crosshair.pointer_leave()

    def page_scroll(self) -> None:
        if self.crosshair is not None:
            self.crosshair.page_scroll()

    def on_select(self, points: list) -> None:
        """Chart click: the first picked point pins the cross-hair, an empty pick releases it."""
        if not points:
            self.pointer_leave()
            return
        x = points[0].get("x")
        if x is not None:
            self.pointer_move(float(x))

    def figure(self) -> Optional[go.Figure]:
        if not self.ready:
            return None
        fig = self._figure()
        if self.crosshair is not None:
            self.crosshair.refresh()
            self._pin(fig)
        return fig

    def _pin(self, fig: go.Figure) -> None:
        ch = self.crosshair
        if ch.state != ACTIVE or ch.guide_x is None:
            return
        tip = ch.tooltip
        fig.add_vline(x=ch.guide_x, line_dash="dash", line_color=GUIDE_COLOR, line_width=1,
                      opacity=ch.guide_opacity)
        ox = ch.offset[0]
        fig.add_annotation(
            x=ch.guide_x, y=1, yref="paper", text=tip.html, showarrow=False, align="left",
            xanchor=tip.anchor, yanchor="top", xshift=ox if tip.anchor == "left" else -ox,
            bgcolor="white", bordercolor="#ccc", borderwidth=1, opacity=tip.opacity,
            font=dict(size=12),
        )
