import pytest

from snowdrift.core.time import TimeManager


def drain(clock):
    steps = 0
    while clock.consume_fixed_step():
        steps += 1
    return steps


def test_manual_clock_yields_one_step_per_frame():
    clock = TimeManager(fixed_timestep=0.02, manual=True)

    for _ in range(5):
        assert clock.tick() == 0.02
        assert drain(clock) == 1

    assert clock.frame_count == 5
    assert clock.fixed_frame_count == 5
    assert clock.fixed_time == pytest.approx(0.1)


def test_no_step_before_a_tick():
    assert not TimeManager().consume_fixed_step()


def test_time_scale_slows_the_simulation():
    clock = TimeManager(fixed_timestep=0.02, manual=True)
    clock.time_scale = 0.5

    steps = 0
    for _ in range(4):
        clock.tick()
        steps += drain(clock)

    assert steps == 2


def test_long_frames_are_capped(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("snowdrift.core.time.time.perf_counter", lambda: now[0])
    clock = TimeManager(fixed_timestep=0.0625)

    now[0] += 10.0
    assert clock.tick() == TimeManager.MAX_FRAME_TIME
    assert drain(clock) == 4
