#!/usr/bin/env python3
"""
Strange Attractor Renderer CLI
==============================

Renders interactive-style 3D strange attractor particle fields to video.
Thousands of particles are integrated every frame, rotated, projected
orthographically and drawn with OpenCV; MoviePy writes the result.

Attractors:
- Lorenz, Aizawa, Halvorsen and Sprott B chaotic flows.
- A slowly spinning Fibonacci sphere (optionally stamped with a picture).
- A glowing barred nebula disk with additive blending.
- A procedural water ripple whose level follows the particle count.

Usage:
    python -m attractorvis lorenz --output lorenz.mp4
    python -m attractorvis fibonacci_sphere --image face.png --spin-y 0.3
    python -m attractorvis --preview --output gallery.png
    python -m attractorvis -h (for help)

Dependencies:
    pip install numpy moviepy opencv-python
"""

import argparse
import logging
import os
import sys

import cv2
import numpy as np
from moviepy import VideoClip

from attractorvis.attractors import AttractorType
from attractorvis.constants import (
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    PARTICLE_SIZE,
    PREVIEW_PARTICLE_COUNT,
    STAMP_BITMAP_SIZE,
)
from attractorvis.projection import ViewState
from attractorvis.session import SimulationSession
from attractorvis.settings import SettingsStore
from attractorvis.visualiser_renderer import AttractorRenderer, rasterise

logger = logging.getLogger("attractorvis")

PREVIEW_WARMUP_TICKS = 120
PREVIEW_TILE = 320


def load_picture(path):
    """Decode an image file and scale it down to a picture-mode bitmap."""
    image = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if image is None:
        sys.exit(f"[!] Could not read image: {path}")
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.dtype != np.uint8:
        image = cv2.convertScaleAbs(image, alpha=255.0 / max(float(image.max()), 1.0))
    return cv2.resize(image, (STAMP_BITMAP_SIZE, STAMP_BITMAP_SIZE), interpolation=cv2.INTER_AREA)


def render_preview_sheet(store, seed=None, tile=PREVIEW_TILE, particle_size=PARTICLE_SIZE):
    """One warmed-up thumbnail per attractor, tiled left to right, with titles."""
    tiles = []
    rng = np.random.default_rng(seed)
    for kind in AttractorType:
        session = SimulationSession(
            kind,
            settings=store.get(kind.name),
            particle_count=PREVIEW_PARTICLE_COUNT,
            particle_size=particle_size,
            rng=rng,
        )
        for _ in range(PREVIEW_WARMUP_TICKS):
            session.tick()
        view = ViewState(tile, tile, rotation_x=0.3, rotation_y=0.4, user_scale=0.5)
        frame = np.zeros((tile, tile, 3), dtype=np.uint8)
        frame = rasterise(session.render(view), frame)
        cv2.putText(frame, kind.title, (8, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (220, 220, 220), 1, cv2.LINE_AA)
        tiles.append(frame)
        logger.info(f"[+] Preview: {kind.title}")
    return cv2.hconcat(tiles)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Render a strange attractor particle field to video.")
    parser.add_argument("attractor", nargs="?", default="lorenz", help="Attractor name (see --list)")
    parser.add_argument("--output", "-o", default=None, help="Output video (or image with --preview)")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, default=10.0, help="Duration in seconds")
    parser.add_argument("--count", type=int, help="Particle count (RIPPLE: water level)")
    parser.add_argument("--hue", type=float, help="Particle hue in degrees")
    parser.add_argument("--saturation", type=float, help="Particle saturation (0-1)")
    parser.add_argument("--speed", type=float, help="Simulation speed multiplier (0.1-3.0)")
    parser.add_argument("--particle-size", type=float, default=PARTICLE_SIZE, help="Dot size")
    parser.add_argument("--scale", type=float, default=1.0, help="User zoom (0.5-5.0)")
    parser.add_argument("--rotate-x", type=float, default=0.0, help="Initial X rotation (radians)")
    parser.add_argument("--rotate-y", type=float, default=0.0, help="Initial Y rotation (radians)")
    parser.add_argument("--spin-x", type=float, default=0.0, help="X rotation speed (rad/s)")
    parser.add_argument("--spin-y", type=float, default=0.0, help="Y rotation speed (rad/s)")
    parser.add_argument("--image", help="Picture mode bitmap (fibonacci_sphere only)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--preview", action="store_true", help="Render a thumbnail of every attractor")
    parser.add_argument("--list", action="store_true", help="List attractors and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    if args.list:
        for kind in AttractorType:
            print(f"{kind.name.lower():<18} {kind.title}")
        return

    store = SettingsStore(seed=args.seed)
    try:
        if args.preview:
            output = args.output or "preview.png"
            sheet = render_preview_sheet(store, seed=args.seed, particle_size=args.particle_size)
            if not cv2.imwrite(output, sheet):
                sys.exit(f"[!] Could not write preview: {output}")
            logger.info(f"[+] Done! Saved to {output}")
            return

        # 1. Validation
        try:
            kind = AttractorType.from_name(args.attractor)
        except ValueError as e:
            sys.exit(f"[!] {e}")
        output = args.output or f"{kind.name.lower()}.mp4"
        out_dir = os.path.dirname(os.path.abspath(output))
        if not os.path.isdir(out_dir):
            sys.exit(f"[!] Output directory not found: {out_dir}")
        if args.image and kind is not AttractorType.FIBONACCI_SPHERE:
            logger.info("[i] Picture mode only applies to fibonacci_sphere; ignoring --image.")

        # 2. Session
        session = SimulationSession(
            kind,
            settings=store.get(kind.name),
            particle_size=args.particle_size,
            seed=args.seed,
        )
        session.apply_overrides(args.hue, args.saturation, args.speed, args.count)
        if args.image and kind is AttractorType.FIBONACCI_SPHERE:
            session.set_image(load_picture(args.image))
        logger.info(f"[i] {session.count_label}, speed {session.settings.speed:.1f}x")

        view = ViewState(
            args.width,
            args.height,
            rotation_x=args.rotate_x,
            rotation_y=args.rotate_y,
            user_scale=args.scale,
        )
        renderer = AttractorRenderer(session, view, args.fps, spin=(args.spin_x, args.spin_y))

        logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps")
        logger.info(f"[+] Duration: {args.duration:.2f} seconds")

        # 3. MoviePy clip (frames are drawn BGR, MoviePy wants RGB)
        def make_frame_wrapper(t):
            frame = renderer.make_frame(t)
            return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        video_clip = VideoClip(make_frame_wrapper, duration=args.duration)

        # 4. Export
        logger.info("[+] Rendering video... (This may take a while)")
        video_clip.write_videofile(
            output,
            fps=args.fps,
            codec="libx264",
            audio=False,
            threads=4,
            preset="medium",
            logger="bar",
        )

        logger.info(f"\n[+] Done! Saved to {output}")
    finally:
        store.close()


if __name__ == "__main__":
    main()
