from dataclasses import dataclass

import numpy as np

from attractorvis.constants import MAX_USER_SCALE, MIN_USER_SCALE


@dataclass
class ViewState:
    """Rotation (radians), user zoom and viewport size in device pixels."""

    width: int
    height: int
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    user_scale: float = 1.0

    def __post_init__(self):
        self.user_scale = clamp_user_scale(self.user_scale)

    @property
    def center(self):
        return self.width / 2, self.height / 2

    def zoom(self, factor):
        self.user_scale = clamp_user_scale(self.user_scale * factor)

    def reset_zoom(self):
        self.user_scale = 1.0


def clamp_user_scale(scale):
    return min(max(scale, MIN_USER_SCALE), MAX_USER_SCALE)


class ScreenPointBuffer:
    """
    Reusable (x, y) screen coordinates of the particles that passed the
    viewport test this frame. Only the first `valid_count` pairs are live.
    """

    def __init__(self, count):
        self.data = np.zeros(count * 2, dtype=np.float32)
        self.valid_count = 0

    @property
    def points(self):
        """(valid_count, 2) view of the live points."""
        return self.data[: self.valid_count * 2].reshape(self.valid_count, 2)

    def __len__(self):
        return self.valid_count


def rotate(positions, rotation_x, rotation_y):
    """
    Rotate (N, 3) positions about X then Y. Returns (x2, y1, z2) columns;
    z2 is the depth, unused by the orthographic renderer.
    """
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]
    cos_x, sin_x = np.cos(rotation_x), np.sin(rotation_x)
    cos_y, sin_y = np.cos(rotation_y), np.sin(rotation_y)

    y1 = y * cos_x - z * sin_x
    z1 = y * sin_x + z * cos_x
    x2 = x * cos_y + z1 * sin_y
    z2 = -x * sin_y + z1 * cos_y
    return x2, y1, z2


def project(positions, view, base_scale, out):
    """
    Orthographic projection of (N, 3) positions into `out`.

    Points outside [0, width] x [0, height] (NaN included) are dropped.
    Returns the number of points written.
    """
    n = min(positions.shape[0], out.data.shape[0] // 2)
    if n == 0 or view.width <= 0 or view.height <= 0:
        out.valid_count = 0
        return 0

    scale = base_scale * view.user_scale
    center_x, center_y = view.center
    x2, y1, _ = rotate(positions[:n], view.rotation_x, view.rotation_y)

    with np.errstate(invalid="ignore", over="ignore"):
        screen_x = x2 * scale + center_x
        screen_y = y1 * scale + center_y
        visible = (screen_x >= 0) & (screen_x <= view.width) & (screen_y >= 0) & (screen_y <= view.height)

    valid = int(np.count_nonzero(visible))
    pairs = out.data[: valid * 2].reshape(valid, 2)
    pairs[:, 0] = screen_x[visible]
    pairs[:, 1] = screen_y[visible]
    out.valid_count = valid
    return valid
