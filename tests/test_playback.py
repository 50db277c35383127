import pytest

from climate_story.controls import Button
from climate_story.data import Sample
from climate_story.nearest import nearest_index
from climate_story.playback import PROJECTED, IntervalScheduler, PlaybackAnimator


def samples(n=6, first_projected=4):
    return [Sample(2000 + i, {"value": float(i)}, PROJECTED if i >= first_projected else "historical")
            for i in range(n)]


@pytest.fixture
def sched():
    return IntervalScheduler()


@pytest.fixture
def frames():
    return []


@pytest.fixture
def anim(sched, frames):
    return PlaybackAnimator(samples(), sched, on_frame=frames.append, button=Button("play-btn", "Play"))


def test_scheduler_fires_once_per_pump_without_catch_up(sched):
    calls = []
    h = sched.set_interval(lambda: calls.append(sched.now), 100)
    sched.pump(50)
    assert calls == []
    sched.pump(1000)
    assert calls == [1000]
    sched.pump(1050)
    assert len(calls) == 1
    sched.clear_interval(h)
    sched.pump(5000)
    assert len(calls) == 1


@pytest.mark.parametrize("k", [0, 1, 3, 5, 9])
def test_index_after_k_ticks(anim, sched, k):
    anim.play()
    for _ in range(k):
        sched.advance(140)
    anim.pause()
    assert anim.index == min(k, anim.last)
    assert sched.active == 0


def test_play_twice_keeps_a_single_timer(anim, sched):
    anim.play()
    anim.play()
    assert sched.active == 1
    sched.advance(140)
    assert anim.index == 1


def test_handle_only_while_playing(anim):
    assert anim.handle is None
    anim.play()
    assert anim.playing and anim.handle is not None
    anim.pause()
    assert not anim.playing and anim.handle is None


def test_autostop_at_end_resets_label(anim, sched):
    anim.toggle()
    assert anim.button.label == "Pause"
    for _ in range(10):
        sched.advance(140)
    assert anim.index == anim.last
    assert not anim.playing
    assert anim.button.label == "Play"
    assert sched.active == 0


def test_play_at_last_index_is_a_noop(anim, sched):
    anim.seek_index(anim.last)
    anim.play()
    assert not anim.playing
    assert sched.active == 0


def test_reset_goes_back_to_first_frame(anim, sched, frames):
    anim.play()
    for _ in range(5):
        sched.advance(140)
    anim.reset()
    fr = frames[-1]
    assert anim.index == 0
    assert fr.projected_opacity == 0
    assert [s.year for s in fr.historical] == [2000]
    assert not anim.playing


def test_seek_uses_nearest_year(sched):
    a = PlaybackAnimator([Sample(y, {"value": 1.0}) for y in (2000, 2005, 2010)], sched)
    assert a.seek(2007) == 1
    assert a.seek(2010) == 2


def test_projected_run_appears_once_reached(anim):
    anim.seek_index(3)
    assert anim.frame().projected_opacity == 0
    assert anim.frame().projected == []
    anim.seek_index(4)
    fr = anim.frame()
    assert fr.projected_opacity == 1
    assert [s.year for s in fr.projected] == [2004]
    assert [s.year for s in fr.historical] == [2000, 2001, 2002, 2003]


def test_seek_stops_playback(anim, sched):
    anim.play()
    anim.seek(2002)
    assert not anim.playing
    assert sched.active == 0


def test_empty_samples_rejected(sched):
    with pytest.raises(ValueError):
        PlaybackAnimator([], sched)


@pytest.mark.parametrize("q", [1990, 2001.5, 2002.5, 2004, 2999])
def test_seek_matches_nearest_index(anim, q):
    assert anim.seek(q) == nearest_index(anim.samples, q)
