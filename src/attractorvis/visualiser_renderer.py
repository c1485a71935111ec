import logging
from dataclasses import dataclass, field
from enum import Enum, auto

import cv2
import numpy as np

from attractorvis.attractors import AttractorType, projection_scale
from attractorvis.color import hsv_to_rgba, to_bgr
from attractorvis.constants import (
    AIZAWA_SIZE_FACTOR,
    BG_COLOR,
    DOT_ALPHA,
    GLOW_ALPHA,
    GLOW_WIDTH_FACTOR,
    MAX_PARTICLE_COUNT,
    MIN_PARTICLE_COUNT,
    RIPPLE_BACK_WAVE,
    RIPPLE_FRONT_WAVE,
    RIPPLE_SAMPLE_STEP,
    STAMP_BASE_SIZE,
    STAMP_MAX_SIZE,
    STAMP_MIN_SIZE,
)
from attractorvis.projection import project

logger = logging.getLogger(__name__)

SUBPIXEL_SHIFT = 4  # fractional bits for cv2 drawing calls
SUBPIXEL = 1 << SUBPIXEL_SHIFT


class RenderMode(Enum):
    STANDARD = auto()  # opaque-ish dots
    PICTURE = auto()  # bitmap stamped at every point
    GLOW = auto()  # additive dots
    PROCEDURAL = auto()  # wave fill, no particles


@dataclass
class RenderBatch:
    """Everything needed to rasterise one frame."""

    mode: RenderMode
    color: tuple
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float32))
    diameter: float = 0.0
    alpha: float = 1.0
    additive: bool = False
    image: np.ndarray = None
    stamp_size: float = 0.0
    waves: list = field(default_factory=list)  # (polygon, alpha) pairs


def ripple_progress(particle_count):
    """Map the particle count slider onto a 0-1 fill level."""
    return (particle_count - MIN_PARTICLE_COUNT) / (MAX_PARTICLE_COUNT - MIN_PARTICLE_COUNT)


def select_mode(kind, image=None):
    if kind is AttractorType.RIPPLE:
        return RenderMode.PROCEDURAL
    if kind is AttractorType.NEBULA:
        return RenderMode.GLOW
    if kind is AttractorType.FIBONACCI_SPHERE and image is not None:
        return RenderMode.PICTURE
    return RenderMode.STANDARD


def stamp_size(user_scale):
    return min(max(STAMP_BASE_SIZE * user_scale, STAMP_MIN_SIZE), STAMP_MAX_SIZE)


def wave_polygon(width, height, level, amplitude, frequency, phase):
    """Closed sine ribbon from the water level down to the bottom edge."""
    xs = np.arange(0, width + 1, RIPPLE_SAMPLE_STEP, dtype=np.float64)
    ys = level + np.sin(xs * frequency + phase) * amplitude
    crest = np.column_stack([xs, ys])
    return np.vstack([[[0.0, height], [0.0, level]], crest, [[width, height]]])


def ripple_waves(progress, width, height, t, density=1.0):
    """Back and front wave polygons with their opacities."""
    level = height * (1 - min(max(progress, 0.0), 1.0))
    waves = []
    for amplitude, frequency, phase_speed, phase_offset, alpha in (RIPPLE_BACK_WAVE, RIPPLE_FRONT_WAVE):
        phase = t * phase_speed + phase_offset
        polygon = wave_polygon(width, height, level, amplitude * density, frequency, phase)
        waves.append((polygon, alpha))
    return waves


def build_batch(kind, particles, screen, view, settings, particle_size, t, image=None, density=1.0):
    """
    Choose the draw strategy for `kind` and fill in its batch. Particle modes
    project `particles` into `screen` first; the procedural mode ignores both.
    """
    color = hsv_to_rgba(settings.hue, settings.saturation, 1.0, DOT_ALPHA)
    mode = select_mode(kind, image)

    if mode is RenderMode.PROCEDURAL:
        if view.width <= 0 or view.height <= 0:
            return RenderBatch(mode=mode, color=color)
        waves = ripple_waves(ripple_progress(settings.particle_count), view.width, view.height, t, density)
        return RenderBatch(mode=mode, color=color, waves=waves)

    project(particles.positions, view, projection_scale(kind), screen)
    point_size = particle_size * AIZAWA_SIZE_FACTOR if kind is AttractorType.AIZAWA else particle_size

    if mode is RenderMode.GLOW:
        return RenderBatch(
            mode=mode,
            color=color,
            points=screen.points,
            diameter=point_size * GLOW_WIDTH_FACTOR,
            alpha=GLOW_ALPHA,
            additive=True,
        )
    if mode is RenderMode.PICTURE:
        return RenderBatch(
            mode=mode,
            color=color,
            points=screen.points,
            image=image,
            stamp_size=stamp_size(view.user_scale),
        )
    return RenderBatch(mode=mode, color=color, points=screen.points, diameter=point_size * 2, alpha=DOT_ALPHA)


# --- Rasterisation ---


def draw_dots(frame, batch):
    """Uniform round dots, composited source-over at the batch alpha."""
    if len(batch.points) == 0:
        return frame
    layer = np.zeros_like(frame)
    color = to_bgr(batch.color)
    radius = max(1, int(round(batch.diameter / 2 * SUBPIXEL)))
    for x, y in np.rint(batch.points * SUBPIXEL).astype(np.int64):
        cv2.circle(layer, (int(x), int(y)), radius, color, -1, cv2.LINE_AA, SUBPIXEL_SHIFT)

    mask = layer.any(axis=2)
    blended = frame[mask] * (1 - batch.alpha) + layer[mask] * batch.alpha
    frame[mask] = np.clip(blended, 0, 255).astype(np.uint8)
    return frame


def draw_glow(frame, batch):
    """Additive dots: overlapping particles brighten each other."""
    if len(batch.points) == 0:
        return frame
    h, w = frame.shape[:2]
    hits = np.zeros((h, w), dtype=np.float32)
    xs = np.clip(np.rint(batch.points[:, 0]).astype(np.intp), 0, w - 1)
    ys = np.clip(np.rint(batch.points[:, 1]).astype(np.intp), 0, h - 1)
    np.add.at(hits, (ys, xs), 1.0)

    size = max(1, int(round(batch.diameter)))
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size)).astype(np.float32)
    coverage = cv2.filter2D(hits, -1, kernel, borderType=cv2.BORDER_CONSTANT)

    color = np.array(to_bgr(batch.color), dtype=np.float32) * batch.alpha
    layer = np.clip(coverage[..., None] * color, 0, 255).astype(np.uint8)
    return cv2.add(frame, layer)


def _paste(frame, stamp, cx, cy):
    """Copy `stamp` centred at (cx, cy), clipped to the frame."""
    h, w = frame.shape[:2]
    sh, sw = stamp.shape[:2]
    x0, y0 = int(round(cx - sw / 2)), int(round(cy - sh / 2))
    fx0, fy0 = max(x0, 0), max(y0, 0)
    fx1, fy1 = min(x0 + sw, w), min(y0 + sh, h)
    if fx0 >= fx1 or fy0 >= fy1:
        return
    patch = stamp[fy0 - y0 : fy1 - y0, fx0 - x0 : fx1 - x0]
    target = frame[fy0:fy1, fx0:fx1]
    if patch.shape[2] == 4:
        alpha = patch[..., 3:4].astype(np.float32) / 255
        target[:] = (patch[..., :3] * alpha + target * (1 - alpha)).astype(np.uint8)
    else:
        target[:] = patch


def draw_stamps(frame, batch):
    """Picture mode: the bitmap scaled to `stamp_size` at every point."""
    if len(batch.points) == 0 or batch.image is None:
        return frame
    size = max(1, int(round(batch.stamp_size)))
    stamp = cv2.resize(batch.image, (size, size), interpolation=cv2.INTER_AREA)
    for x, y in batch.points:
        _paste(frame, stamp, x, y)
    return frame


def draw_waves(frame, batch):
    if frame.size == 0:
        return frame
    color = to_bgr(batch.color)
    for polygon, alpha in batch.waves:
        overlay = frame.copy()
        points = np.rint(polygon * SUBPIXEL).astype(np.int32)
        cv2.fillPoly(overlay, [points], color, cv2.LINE_AA, SUBPIXEL_SHIFT)
        frame = cv2.addWeighted(overlay, alpha, frame, 1 - alpha, 0)
    return frame


DRAWERS = {
    RenderMode.STANDARD: draw_dots,
    RenderMode.PICTURE: draw_stamps,
    RenderMode.GLOW: draw_glow,
    RenderMode.PROCEDURAL: draw_waves,
}


def rasterise(batch, frame):
    """Draw `batch` onto a BGR uint8 frame and return the result."""
    return DRAWERS[batch.mode](frame, batch)


class AttractorRenderer:
    """
    Drives a session one frame at a time: tick, project, draw.
    Suitable as a MoviePy `make_frame` callback.
    """

    def __init__(self, session, view, fps, spin=(0.0, 0.0)):
        self.session = session
        self.view = view
        self.fps = fps
        self.spin_x, self.spin_y = spin  # rad/s, stands in for drag input
        self.last_time = None
        self.bg_color = BG_COLOR

    def make_frame(self, t):
        """
        The callback function for MoviePy.
        Generates a single BGR video frame at time t.
        """
        # MoviePy asks for t=0 once up front to size the clip; a repeated t
        # redraws the current state without advancing it
        if t != self.last_time:
            elapsed = t - self.last_time if self.last_time is not None else 1 / self.fps
            self.last_time = t

            # 1. Input (rotation) happens strictly between frames
            self.view.rotation_x += self.spin_x * elapsed
            self.view.rotation_y += self.spin_y * elapsed

            # 2. Simulate
            self.session.tick()

        # 3. Draw
        frame = np.full((self.view.height, self.view.width, 3), self.bg_color, dtype=np.uint8)
        batch = self.session.render(self.view)
        return rasterise(batch, frame)
