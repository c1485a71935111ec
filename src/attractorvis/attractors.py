"""
Per-attractor tables: vector fields, spawn rules, projection scales and
integration step sizes.

Every function here is pure apart from drawing from the random generator
it is handed. Field functions work element-wise, so they accept plain
floats as well as whole numpy columns of a particle buffer.
"""

from enum import Enum

import numpy as np

from attractorvis.constants import (
    BASE_DT,
    HALVORSEN_DT,
    NEBULA_DISK_HEIGHT,
    NEBULA_DISK_INNER,
    NEBULA_DISK_WIDTH,
    NEBULA_ORBIT_SPEED,
    NEBULA_STRIDE,
    SPHERE_RADIUS,
    SPHERE_SPIN,
    STRIDE,
)

GOLDEN_ANGLE = np.pi * (3.0 - np.sqrt(5.0))


class AttractorType(Enum):
    LORENZ = "Lorenz Attractor"
    AIZAWA = "Aizawa Attractor"
    HALVORSEN = "Halvorsen Attractor"
    SPROTT_B = "Sprott B Attractor"
    FIBONACCI_SPHERE = "Fibonacci Sphere"
    NEBULA = "Nebula Cloud"
    RIPPLE = "Water Ripple"

    @property
    def title(self):
        return self.value

    @classmethod
    def from_name(cls, name):
        """Look up a type by enum name, case-insensitive ("lorenz", "SPROTT_B")."""
        key = name.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            names = ", ".join(t.name.lower() for t in cls)
            raise ValueError(f"Unknown attractor '{name}' (expected one of: {names})") from None


PROJECTION_SCALES = {
    AttractorType.LORENZ: 12.0,
    AttractorType.AIZAWA: 180.0,
    AttractorType.HALVORSEN: 15.0,
    AttractorType.SPROTT_B: 60.0,
    AttractorType.FIBONACCI_SPHERE: 2.5,
    AttractorType.NEBULA: 4.0,
    AttractorType.RIPPLE: 8.0,
}

# (low, high) per axis for the types spawned uniformly in a box
SPAWN_BOXES = {
    AttractorType.LORENZ: ((-10.0, 10.0), (-10.0, 10.0), (10.0, 30.0)),
    AttractorType.AIZAWA: ((-1.0, 1.0), (-1.0, 1.0), (-1.0, 1.0)),
    AttractorType.HALVORSEN: ((-2.0, 2.0), (-2.0, 2.0), (-2.0, 2.0)),
    AttractorType.SPROTT_B: ((-1.0, 1.0), (-1.0, 1.0), (-1.0, 1.0)),
    AttractorType.RIPPLE: ((-50.0, 50.0), (0.0, 0.0), (-50.0, 50.0)),
}


def projection_scale(kind):
    return PROJECTION_SCALES[kind]


def base_step(kind):
    return HALVORSEN_DT if kind is AttractorType.HALVORSEN else BASE_DT


def stride(kind):
    return NEBULA_STRIDE if kind is AttractorType.NEBULA else STRIDE


def uses_particles(kind):
    return kind is not AttractorType.RIPPLE


# --- Vector fields ---


def lorenz(x, y, z, sigma=10.0, rho=28.0, beta=8.0 / 3.0):
    return sigma * (y - x), x * (rho - z) - y, x * y - beta * z


def aizawa(x, y, z, a=0.95, b=0.7, c=0.6, d=3.5, e=0.25, f=0.1):
    dx = (z - b) * x - d * y
    dy = d * x + (z - b) * y
    dz = c + a * z - (z * z * z) / 3 - (x * x + y * y) * (1 + e * z) + f * z * x * x * x
    return dx, dy, dz


def halvorsen(x, y, z, a=1.4):
    dx = -a * x - 4 * y - 4 * z - y * y
    dy = -a * y - 4 * z - 4 * x - z * z
    dz = -a * z - 4 * x - 4 * y - x * x
    return dx, dy, dz


def sprott_b(x, y, z, a=0.4, b=1.2):
    return a * y * z, x - y, b - x * y


def sphere_spin(x, y, z, speed=SPHERE_SPIN):
    # Not an attractor: rigid rotation about the Y axis
    return -z * speed, y * 0.0, x * speed


FIELDS = {
    AttractorType.LORENZ: lorenz,
    AttractorType.AIZAWA: aizawa,
    AttractorType.HALVORSEN: halvorsen,
    AttractorType.SPROTT_B: sprott_b,
    AttractorType.FIBONACCI_SPHERE: sphere_spin,
}


def vector_field(kind, x, y, z, t=0.0):
    """
    Derivative (dx, dy, dz) of the attractor at (x, y, z).

    NEBULA and RIPPLE have no plain field (NEBULA is integrated by its own
    orbital path, RIPPLE is drawn procedurally) and yield a zero vector.
    """
    field = FIELDS.get(kind)
    if field is None:
        zero = np.zeros_like(np.asarray(x, dtype=np.float64))
        return zero, zero.copy(), zero.copy()
    return field(x, y, z)


# --- Spawn rules ---


def fibonacci_sphere(indices, total, radius=SPHERE_RADIUS):
    """Golden-angle spiral points on a sphere, one per index."""
    indices = np.asarray(indices, dtype=np.float64)
    if total > 1:
        y = 1 - (indices / (total - 1)) * 2
    else:
        y = np.ones_like(indices)
    r = np.sqrt(np.clip(1 - y * y, 0.0, None))
    theta = GOLDEN_ANGLE * indices
    return np.cos(theta) * r * radius, y * radius, np.sin(theta) * r * radius


def orbital_velocity(x, z):
    """Tangential (vx, vz) of magnitude ORBIT_SPEED / sqrt(r) for a disk position."""
    r = np.hypot(x, z)
    angle = np.arctan2(z, x)
    v = NEBULA_ORBIT_SPEED / np.sqrt(r)
    return -np.sin(angle) * v, np.cos(angle) * v


def spawn_many(kind, indices, total, rng):
    """Fresh (xs, ys, zs) arrays for the given particle indices."""
    indices = np.asarray(indices)
    n = indices.shape[0]

    if kind is AttractorType.FIBONACCI_SPHERE:
        return fibonacci_sphere(indices, total)

    if kind is AttractorType.NEBULA:
        angle = rng.uniform(0.0, 2 * np.pi, n)
        dist = NEBULA_DISK_INNER + rng.random(n) * NEBULA_DISK_WIDTH
        y = (rng.random(n) - 0.5) * NEBULA_DISK_HEIGHT
        return np.cos(angle) * dist, y, np.sin(angle) * dist

    (x0, x1), (y0, y1), (z0, z1) = SPAWN_BOXES[kind]
    return rng.uniform(x0, x1, n), rng.uniform(y0, y1, n), rng.uniform(z0, z1, n)


def spawn(kind, index, total, rng):
    """Single particle version of spawn_many, returns an (x, y, z) tuple of floats."""
    xs, ys, zs = spawn_many(kind, [index], total, rng)
    return float(xs[0]), float(ys[0]), float(zs[0])
