import pytest

from attractorvis.color import hsv_to_rgba, to_bgr


@pytest.mark.parametrize(
    "hue, expected",
    [
        (0, (1.0, 0.0, 0.0)),
        (120, (0.0, 1.0, 0.0)),
        (240, (0.0, 0.0, 1.0)),
        (60, (1.0, 1.0, 0.0)),
        (360, (1.0, 0.0, 0.0)),
    ],
)
def test_primary_hues(hue, expected):
    r, g, b, a = hsv_to_rgba(hue, 1.0, 1.0)
    assert (r, g, b) == pytest.approx(expected)
    assert a == 1.0


def test_zero_saturation_is_grey():
    r, g, b, _ = hsv_to_rgba(200, 0.0, 0.5)
    assert r == g == b == pytest.approx(0.5)


def test_alpha_passes_through():
    assert hsv_to_rgba(10, 0.8, 1.0, 0.7)[3] == 0.7


def test_to_bgr_swaps_channels():
    assert to_bgr((1.0, 0.5, 0.0, 0.3)) == (0, 128, 255)
