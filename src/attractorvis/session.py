import logging
from dataclasses import replace

import numpy as np

from attractorvis.attractors import AttractorType, uses_particles
from attractorvis.constants import MAX_PARTICLE_SIZE, MIN_PARTICLE_SIZE, PARTICLE_SIZE
from attractorvis.integrator import SimulationClock, step
from attractorvis.particle import ParticleBuffer
from attractorvis.projection import ScreenPointBuffer
from attractorvis.settings import AnimationSettings
from attractorvis.visualiser_renderer import build_batch, ripple_progress

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    One running attractor: its particle and screen buffers, simulated clock,
    current settings and picture-mode bitmap.

    Configure, overrides and image changes must happen between ticks. Saves
    are handed to `on_save(name, hue, saturation, speed, particle_count)`,
    which is expected to return without waiting on storage.
    """

    def __init__(
        self,
        kind,
        settings=None,
        particle_count=None,
        particle_size=PARTICLE_SIZE,
        rng=None,
        seed=None,
        on_save=None,
        density=1.0,
    ):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.settings = settings if settings is not None else AnimationSettings.default(self.rng)
        self.particle_size = particle_size
        self.density = density
        self.clock = SimulationClock()
        self.on_save = on_save
        self.image = None
        self.picture_mode = False
        self.respawned = 0

        self.kind = None
        self.particles = None
        self.screen = None
        count = self.settings.particle_count if particle_count is None else particle_count
        self.configure(kind, count)

    @property
    def count(self):
        return self.settings.particle_count

    @property
    def progress(self):
        """RIPPLE fill level derived from the particle count."""
        return ripple_progress(self.count)

    @property
    def count_label(self):
        if self.kind is AttractorType.RIPPLE:
            return f"Water Level: {int(self.progress * 100)}%"
        return f"Count: {self.count}"

    def configure(self, kind, particle_count):
        """Drop the current buffers and seed new ones for (kind, particle_count)."""
        if particle_count < 0:
            raise ValueError(f"Particle count must be >= 0, got {particle_count}")
        self.kind = kind
        self.settings = replace(self.settings, particle_count=particle_count)
        if uses_particles(kind):
            self.particles = ParticleBuffer.spawned(kind, particle_count, self.rng)
        else:
            self.particles = ParticleBuffer(kind, particle_count)
        self.screen = ScreenPointBuffer(particle_count)
        logger.info(f"[+] Configured {kind.title} with {particle_count} particles")

    def apply_overrides(self, hue=None, saturation=None, speed=None, particle_count=None):
        """Merge externally supplied settings; a new count reconfigures the buffers."""
        previous = self.settings
        self.settings = previous.merged(hue, saturation, speed, particle_count)
        logger.debug(f"[i] Settings for {self.kind.title}: {self.settings}")
        if self.settings.particle_count != previous.particle_count:
            self.configure(self.kind, self.settings.particle_count)

    def set_particle_size(self, size):
        self.particle_size = min(max(float(size), MIN_PARTICLE_SIZE), MAX_PARTICLE_SIZE)

    def set_image(self, image):
        """
        Accept a decoded BGR or BGRA uint8 bitmap for picture mode. Passing
        None clears it.
        """
        if image is not None:
            image = np.asarray(image)
            if image.dtype != np.uint8 or image.ndim != 3 or image.shape[2] not in (3, 4):
                raise ValueError(f"Expected an HxWx3 or HxWx4 uint8 image, got {image.dtype} {image.shape}")
            logger.info(f"[+] Picture mode bitmap {image.shape[1]}x{image.shape[0]}")
        self.image = image
        self.picture_mode = image is not None

    def tick(self, dt=None):
        """Advance simulated time and integrate the whole buffer once."""
        if dt is None:
            dt = self.clock.advance(self.kind, self.settings.speed)
        else:
            self.clock.t += dt
        self.respawned = step(self.particles, self.clock.t, dt, self.rng)
        return dt

    def render(self, view):
        """Project and pick the draw strategy for the current state."""
        return build_batch(
            self.kind,
            self.particles,
            self.screen,
            view,
            self.settings,
            self.particle_size,
            self.clock.t,
            image=self.image if self.picture_mode else None,
            density=self.density,
        )

    def request_save(self):
        """Hand the current settings to the save callback, if any."""
        if self.on_save is None:
            return None
        s = self.settings
        logger.info(f"[+] Requesting save for {self.kind.name}")
        return self.on_save(self.kind.name, s.hue, s.saturation, s.speed, s.particle_count)
