import math

import numpy as np
import pytest

cv2 = pytest.importorskip("cv2")

from starry_string import drawing  # noqa: E402
from starry_string.models import FrameOutput, Point, PluckEvent, Ripple  # noqa: E402
from starry_string.ripples import RippleField  # noqa: E402


def blank(h=200, w=300):
    return np.zeros((h, w, 3), dtype=np.uint8)


def test_backdrop_darkens_camera_frame():
    frame = np.full((10, 20, 3), 100, dtype=np.uint8)
    canvas = drawing.draw_backdrop(frame, darken=0.3)

    assert canvas.shape == frame.shape
    assert np.all(canvas == 70)
    assert np.all(frame == 100)  # input left alone


def test_backdrop_image_is_fitted_to_frame():
    frame = blank(10, 20)
    backdrop = np.full((40, 40, 3), 200, dtype=np.uint8)
    canvas = drawing.draw_backdrop(frame, backdrop, darken=0.0)
    assert canvas.shape == frame.shape
    assert np.all(canvas == 200)


def test_load_backdrop_missing_file(tmp_path, capsys):
    assert drawing.load_backdrop(None) is None
    assert drawing.load_backdrop(str(tmp_path / "nope.png")) is None
    assert "[Drawing]" in capsys.readouterr().out


def test_bezier_hits_its_endpoints():
    pts = drawing.bezier_points((0, 0), (1, 5), (4, -5), (10, 0), samples=11)
    assert pts.shape == (11, 2)
    assert pts[0].tolist() == pytest.approx([0, 0])
    assert pts[-1].tolist() == pytest.approx([10, 0])


def test_swirl_arms_are_rotated_copies():
    ripple = Ripple(x=100, y=100, max_age=60)
    arms = drawing.swirl_arms(ripple)

    assert len(arms) == 3
    for arm in arms:
        assert arm.dtype == np.int32
        start = arm[0]
        assert math.hypot(start[0] - 100, start[1] - 100) == pytest.approx(10, abs=1)

    starts = {tuple(arm[0]) for arm in arms}
    assert len(starts) == 3


def test_swirl_turns_and_grows_with_age():
    young = drawing.swirl_arms(Ripple(x=0, y=0, max_age=60, age=0))
    old = drawing.swirl_arms(Ripple(x=0, y=0, max_age=60, age=20))

    def reach(arm):
        return math.hypot(*arm[-1])

    assert reach(old[0]) > reach(young[0])
    assert tuple(old[0][0]) != tuple(young[0][0])


def test_draw_swirl_paints_until_life_runs_out():
    ripple = Ripple(x=150, y=100, max_age=60)

    image = blank()
    drawing.draw_swirl(image, ripple, life=1.0)
    assert image.any()

    image = blank()
    drawing.draw_swirl(image, ripple, life=0.0)
    assert not image.any()


def test_draw_scene_with_string_and_flash():
    image = blank()
    output = FrameOutput(
        anchor_a=Point(20, 100),
        anchor_b=Point(280, 100),
        events=[PluckEvent(point=Point(150, 100), normalized_position=0.5)],
    )
    drawing.draw_scene(image, output, RippleField())

    assert image[100, 60].any()
    assert np.all(image[100, 150] == 255)  # white flash over the string


def test_draw_scene_without_string_draws_only_ripples_and_tips():
    image = blank()
    drawing.draw_scene(image, FrameOutput(anchor_a=Point(20, 100)), RippleField())
    assert not image.any()

    field = RippleField()
    field.spawn(150, 100)
    drawing.draw_scene(image, FrameOutput(), field, tips=[Point(10, 10)])
    assert image.any()
    assert image[10, 10].any()


def test_text_overlays_draw_something():
    for draw in (drawing.draw_loading, drawing.draw_title_screen):
        image = np.full((480, 640, 3), 50, dtype=np.uint8)
        draw(image)
        assert not np.all(image == 50)

    image = blank()
    drawing.draw_fps(image, 29.7)
    drawing.draw_status(image, "Audio off")
    assert image.any()
