import pytest

pytest.importorskip("noise")

from examples.snow_demo import SnowDemo


@pytest.fixture
def demo(tmp_path):
    app = SnowDemo(str(tmp_path / "config.json"), headless=True)
    app.initialize()
    return app


def test_demo_builds_patch_under_tracker(demo):
    demo.step(demo.time.fixed_delta)

    anchor = demo.patch_transform.get_world_position()
    tracker = demo.tracker.get_world_position()
    half = demo.patch.snow_bounds * 0.5
    assert demo.patch.bound
    assert tracker[[0, 2]] == pytest.approx(anchor[[0, 2]] + half)


def test_capture_camera_centered_once_per_frame(demo):
    demo.step(demo.time.fixed_delta)

    calls = []
    center = demo.patch.capture.center

    def counting_center(anchor, snow_bounds):
        calls.append(snow_bounds)
        return center(anchor, snow_bounds)

    demo.patch.capture.center = counting_center

    for _ in range(5):
        demo.step(demo.time.fixed_delta)
        demo.update(demo.time.fixed_delta)

    assert len(calls) == 5
