from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .config import PLAY_PERIOD_MS
from .controls import Button
from .data import Sample
from .nearest import nearest_index

HISTORICAL = "historical"
PROJECTED = "projected"


@dataclass
class _Interval:
    callback: Callable[[], None]
    period: float
    due: float


class IntervalScheduler:
    """Cooperative fixed-period timers driven by `pump(now_ms)`.

    Each pump fires every due interval at most once and schedules the next
    tick one period after `now`; missed ticks are not caught up.
    """

    def __init__(self, now: float = 0.0):
        self.now = float(now)
        self._ids = itertools.count(1)
        self._intervals: dict[int, _Interval] = {}

    def set_interval(self, callback: Callable[[], None], period_ms: float) -> int:
        handle = next(self._ids)
        self._intervals[handle] = _Interval(callback, float(period_ms), self.now + period_ms)
        return handle

    def clear_interval(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._intervals.pop(handle, None)

    @property
    def active(self) -> int:
        return len(self._intervals)

    def pump(self, now_ms: float) -> int:
        self.now = max(self.now, float(now_ms))
        fired = 0
        for handle in list(self._intervals):
            iv = self._intervals.get(handle)
            # cancelled by an earlier callback in this pump
            if iv is None or iv.due > self.now:
                continue
            iv.due = self.now + iv.period
            iv.callback()
            fired += 1
        return fired

    def advance(self, ms: float) -> int:
        return self.pump(self.now + ms)


@dataclass
class PlaybackFrame:
    index: int
    sample: Sample
    historical: list = field(default_factory=list)
    projected: list = field(default_factory=list)
    projected_opacity: float = 0.0


class PlaybackAnimator:
    """Year index playback over a sorted sample array: stopped(i) / playing(i)."""

    def __init__(self, samples: Sequence[Sample], scheduler: IntervalScheduler,
                 on_frame: Optional[Callable[[PlaybackFrame], None]] = None,
                 period_ms: float = PLAY_PERIOD_MS, button: Optional[Button] = None,
                 play_label: str = "Play", pause_label: str = "Pause"):
        if not samples:
            raise ValueError("playback needs at least one sample")
        self.samples = list(samples)
        self.scheduler = scheduler
        self.on_frame = on_frame
        self.period_ms = period_ms
        self.button = button
        self.play_label = play_label
        self.pause_label = pause_label
        self.index = 0
        self.playing = False
        self.handle: Optional[int] = None
        self.draw()

    @property
    def last(self) -> int:
        return len(self.samples) - 1

    def toggle(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def play(self) -> None:
        if self.playing or self.index >= self.last:
            return
        self.handle = self.scheduler.set_interval(self._tick, self.period_ms)
        self.playing = True
        self._label(self.pause_label)

    def pause(self) -> None:
        self._stop()

    def reset(self) -> None:
        self._stop()
        self.index = 0
        self.draw()

    def seek(self, value: float) -> int:
        self._stop()
        self.index = nearest_index(self.samples, value)
        self.draw()
        return self.index

    def seek_index(self, index: int) -> int:
        self._stop()
        self.index = max(0, min(self.last, int(index)))
        self.draw()
        return self.index

    def _tick(self) -> None:
        if self.index < self.last:
            self.index += 1
            self.draw()
        if self.index >= self.last:
            self._stop()

    def _stop(self) -> None:
        self.scheduler.clear_interval(self.handle)
        self.handle = None
        self.playing = False
        self._label(self.play_label)

    def _label(self, text: str) -> None:
        if self.button is not None:
            self.button.label = text

    def frame(self) -> PlaybackFrame:
        upto = self.samples[: self.index + 1]
        hist = [s for s in upto if s.category != PROJECTED]
        proj = [s for s in upto if s.category == PROJECTED]
        return PlaybackFrame(
            index=self.index,
            sample=self.samples[self.index],
            historical=hist,
            projected=proj,
            projected_opacity=1.0 if proj else 0.0,
        )

    def draw(self) -> PlaybackFrame:
        fr = self.frame()
        if self.on_frame is not None:
            self.on_frame(fr)
        return fr
