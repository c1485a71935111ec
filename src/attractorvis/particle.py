import logging

import numpy as np

from attractorvis.attractors import AttractorType, orbital_velocity, spawn_many, stride

logger = logging.getLogger(__name__)


class ParticleBuffer:
    """
    Flat float32 state for every particle of one (type, count) configuration.

    Layout is row-major, `stride` floats per particle: x, y, z followed by a
    reserved slot, or by vx, vy, vz for the NEBULA disk. The buffer is never
    resized; a new configuration gets a new buffer.
    """

    def __init__(self, kind, count):
        if count < 0:
            raise ValueError(f"Particle count must be >= 0, got {count}")
        self.kind = kind
        self.count = count
        self.stride = stride(kind)
        self.data = np.zeros(count * self.stride, dtype=np.float32)

    @classmethod
    def spawned(cls, kind, count, rng):
        """Allocate a buffer and seed every particle from the spawn rule."""
        buffer = cls(kind, count)
        buffer.respawn(np.arange(count), rng)
        logger.debug(f"[+] Spawned {count} particles for {kind.title}")
        return buffer

    @property
    def rows(self):
        """(count, stride) view onto `data`."""
        return self.data.reshape(self.count, self.stride)

    @property
    def positions(self):
        return self.rows[:, :3]

    @property
    def velocities(self):
        if self.kind is not AttractorType.NEBULA:
            return None
        return self.rows[:, 3:6]

    def respawn(self, indices, rng):
        """Reset the given particles to fresh samples of the spawn rule."""
        indices = np.asarray(indices, dtype=np.intp)
        if indices.size == 0:
            return
        xs, ys, zs = spawn_many(self.kind, indices, self.count, rng)
        rows = self.rows
        rows[indices, 0] = xs
        rows[indices, 1] = ys
        rows[indices, 2] = zs
        if self.kind is AttractorType.NEBULA:
            vx, vz = orbital_velocity(xs, zs)
            rows[indices, 3] = vx
            rows[indices, 4] = 0.0
            rows[indices, 5] = vz

    def __len__(self):
        return self.count
