import numpy as np
import pytest

from attractorvis.projection import ScreenPointBuffer, ViewState, project, rotate


def _positions(*points):
    return np.array(points, dtype=np.float32)


def test_identity_rotation_is_plain_scale():
    view = ViewState(200, 100)
    out = ScreenPointBuffer(1)
    assert project(_positions((1.5, -2.0, 3.0)), view, 12.0, out) == 1
    sx, sy = out.points[0]
    assert sx == pytest.approx(1.5 * 12 + 100)
    assert sy == pytest.approx(-2.0 * 12 + 50)


def test_user_scale_multiplies_base_scale():
    view = ViewState(200, 200, user_scale=2.0)
    out = ScreenPointBuffer(1)
    project(_positions((1.0, 1.0, 0.0)), view, 10.0, out)
    assert tuple(out.points[0]) == pytest.approx((120.0, 120.0))


def test_point_left_of_viewport_is_clipped():
    view = ViewState(100, 100)
    out = ScreenPointBuffer(3)
    # screen x = -51 * 1 + 50 = -1
    valid = project(_positions((-51.0, 0.0, 0.0), (0.0, 0.0, 0.0), (50.0, 50.0, 0.0)), view, 1.0, out)
    assert valid == 2
    assert (out.points[:, 0] >= 0).all()
    assert tuple(out.points[1]) == pytest.approx((100.0, 100.0))


def test_non_finite_points_are_never_drawn():
    view = ViewState(100, 100)
    out = ScreenPointBuffer(2)
    assert project(_positions((np.nan, 0.0, 0.0), (np.inf, 0.0, 0.0)), view, 1.0, out) == 0


def test_zero_viewport_yields_nothing():
    out = ScreenPointBuffer(5)
    out.valid_count = 5
    assert project(np.zeros((5, 3), dtype=np.float32), ViewState(0, 0), 1.0, out) == 0
    assert len(out) == 0
    assert out.points.shape == (0, 2)


def test_empty_buffer():
    out = ScreenPointBuffer(0)
    assert project(np.zeros((0, 3), dtype=np.float32), ViewState(10, 10), 1.0, out) == 0


def test_quarter_turn_about_y_moves_z_onto_x():
    x2, y1, z2 = rotate(_positions((0.0, 0.0, 1.0)), 0.0, np.pi / 2)
    assert x2[0] == pytest.approx(1.0)
    assert y1[0] == pytest.approx(0.0)
    assert z2[0] == pytest.approx(0.0, abs=1e-7)


def test_quarter_turn_about_x_moves_z_onto_y():
    x2, y1, _ = rotate(_positions((0.0, 0.0, 1.0)), np.pi / 2, 0.0)
    assert y1[0] == pytest.approx(-1.0)
    assert x2[0] == pytest.approx(0.0, abs=1e-7)


def test_buffer_is_reused_between_frames():
    out = ScreenPointBuffer(2)
    data = out.data
    view = ViewState(10, 10)
    project(_positions((0.0, 0.0, 0.0), (1.0, 1.0, 0.0)), view, 1.0, out)
    project(_positions((100.0, 0.0, 0.0), (1.0, 1.0, 0.0)), view, 1.0, out)
    assert out.data is data
    assert out.valid_count == 1
    assert tuple(out.points[0]) == pytest.approx((6.0, 6.0))


def test_user_scale_is_clamped():
    view = ViewState(10, 10, user_scale=9.0)
    assert view.user_scale == 5.0
    view.zoom(0.01)
    assert view.user_scale == 0.5
    view.zoom(3.0)
    assert view.user_scale == pytest.approx(1.5)
    view.reset_zoom()
    assert view.user_scale == 1.0
