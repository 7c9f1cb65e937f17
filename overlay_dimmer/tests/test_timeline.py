from __future__ import annotations

import pytest

from overlay_dimmer.timeline import Timeline, monotonic_ms


def test_progress_is_linear_in_elapsed_time() -> None:
    timeline = Timeline(start_alpha=0.0, start_time=200.0, duration_ms=400)
    assert timeline.progress(200.0) == 0.0
    assert timeline.progress(400.0) == pytest.approx(0.5)
    assert timeline.progress(600.0) == pytest.approx(1.0)


def test_zero_duration_is_already_complete() -> None:
    assert Timeline().progress(0.0) == 1.0


def test_alpha_at_clamps_in_both_directions() -> None:
    rising = Timeline(start_alpha=0.2, start_time=0.0, duration_ms=100)
    assert rising.alpha_at(50.0, 0.6) == pytest.approx(0.4)
    assert rising.alpha_at(500.0, 0.6) == 0.6

    falling = Timeline(start_alpha=0.9, start_time=0.0, duration_ms=100)
    assert falling.alpha_at(50.0, 0.1) == pytest.approx(0.5)
    assert falling.alpha_at(500.0, 0.1) == 0.1


def test_ends_earlier_compares_against_scheduled_end() -> None:
    timeline = Timeline(start_alpha=0.0, start_time=0.0, duration_ms=1000)
    assert timeline.end_time == 1000
    assert timeline.ends_earlier(100.0, 500) is True
    assert timeline.ends_earlier(100.0, 900) is False
    assert timeline.ends_earlier(100.0, 2000) is False


def test_restart_replaces_all_fields() -> None:
    timeline = Timeline()
    timeline.restart(0.3, 42.0, 250)
    assert (timeline.start_alpha, timeline.start_time, timeline.duration_ms) == (0.3, 42.0, 250)


def test_monotonic_ms_does_not_go_backwards() -> None:
    first = monotonic_ms()
    assert monotonic_ms() >= first
