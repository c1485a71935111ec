import logging
from dataclasses import dataclass

import numpy as np

from attractorvis.attractors import AttractorType, base_step, vector_field
from attractorvis.constants import (
    ESCAPE_LIMIT,
    NEBULA_BAR_LENGTH,
    NEBULA_BAR_MASS,
    NEBULA_BAR_SOFTENING,
    NEBULA_BAR_SPEED,
    NEBULA_DAMPING,
    NEBULA_DISK_HEIGHT,
    NEBULA_GRAVITY,
    NEBULA_GRAVITY_SOFTENING,
    NEBULA_MAX_R2,
    NEBULA_MIN_R2,
    NEBULA_ORBIT_SPEED,
    NEBULA_PLANE_PULL,
    NEBULA_RIM_INNER,
    NEBULA_RIM_WIDTH,
    NEBULA_TURBULENCE_SCALE,
    NEBULA_TURBULENCE_SPEED,
    NEBULA_VERTICAL_DAMPING,
)

logger = logging.getLogger(__name__)


@dataclass
class SimulationClock:
    """Simulated time, advanced by base_step(type) * speed per tick."""

    t: float = 0.0

    def advance(self, kind, speed):
        dt = base_step(kind) * speed
        self.t += dt
        return dt


def step(buffer, t, dt, rng):
    """
    Advance every particle in `buffer` by one step of size `dt` at time `t`.

    The whole buffer is updated before this returns and every particle sees
    the same `t` and `dt`. Returns the number of particles that were respawned.
    """
    if buffer.count == 0 or buffer.kind is AttractorType.RIPPLE:
        return 0
    if buffer.kind is AttractorType.NEBULA:
        respawned = step_nebula(buffer, t, dt, rng)
    else:
        respawned = step_field(buffer, t, dt, rng)
    if respawned:
        logger.debug(f"[i] Respawned {respawned} particles at t={t:.3f}")
    return respawned


def diverged(x, y, z, limit=ESCAPE_LIMIT):
    """Mask of particles with a NaN or a coordinate beyond +-limit."""
    with np.errstate(invalid="ignore"):
        bad = np.isnan(x) | np.isnan(y) | np.isnan(z)
        bad |= (np.abs(x) > limit) | (np.abs(y) > limit) | (np.abs(z) > limit)
    return bad


def step_field(buffer, t, dt, rng):
    """Forward Euler on the registry field, then the divergence guard."""
    rows = buffer.rows
    x, y, z = rows[:, 0], rows[:, 1], rows[:, 2]

    # Stiff systems overflow float32 on the way out; the guard catches it
    with np.errstate(over="ignore", invalid="ignore"):
        dx, dy, dz = vector_field(buffer.kind, x, y, z, t)
        nx = x + dx * dt
        ny = y + dy * dt
        nz = z + dz * dt

    rows[:, 0] = nx
    rows[:, 1] = ny
    rows[:, 2] = nz

    bad = np.flatnonzero(diverged(nx, ny, nz))
    buffer.respawn(bad, rng)
    return bad.size


def turbulence(indices, t):
    """
    Stateless swirl offset (dx, dz) for each particle index at time `t`.

    Even and odd particles spin in opposite directions.
    """
    indices = np.asarray(indices)
    speed = NEBULA_TURBULENCE_SPEED
    turb_x = 0.06 * np.sin(t * speed) + 0.03 * np.cos(t * speed * 2.3 + indices * 0.1)
    turb_y = 0.06 * np.cos(t * speed * 1.5) + 0.03 * np.sin(t * speed * 1.9 + indices * 0.1)
    spin = t * 0.5 * np.where(indices % 2 == 0, 1.0, -1.0)

    rx = turb_x * np.cos(spin) - turb_y * np.sin(spin)
    rz = turb_x * np.sin(spin) + turb_y * np.cos(spin)
    return rx * NEBULA_TURBULENCE_SCALE, rz * NEBULA_TURBULENCE_SCALE


def bar_masses(t):
    """Positions (bx, bz) of the two ends of the rotating bar."""
    angle = t * NEBULA_BAR_SPEED
    bx = np.cos(angle) * NEBULA_BAR_LENGTH
    bz = np.sin(angle) * NEBULA_BAR_LENGTH
    return (bx, bz), (-bx, -bz)


def _softened_pull(dx, dz, mass, softening):
    d2 = dx * dx + dz * dz + softening
    return mass / (d2 * np.sqrt(d2))


def step_nebula(buffer, t, dt, rng):
    """
    Orbital update of the NEBULA disk: central gravity, a rotating bar,
    damping, turbulence and a pull back to the disk plane. Particles that
    fall into the core or escape are moved to the outer rim.
    """
    rows = buffer.rows
    x, y, z = rows[:, 0], rows[:, 1], rows[:, 2]
    vx, vy, vz = rows[:, 3].copy(), rows[:, 4].copy(), rows[:, 5].copy()

    # 1. Central mass
    force = _softened_pull(x, z, NEBULA_GRAVITY, NEBULA_GRAVITY_SOFTENING)
    vx -= x * force * dt
    vz -= z * force * dt

    # 2. Bar
    (bx1, bz1), (bx2, bz2) = bar_masses(t)
    f1 = _softened_pull(x - bx1, z - bz1, NEBULA_BAR_MASS, NEBULA_BAR_SOFTENING)
    f2 = _softened_pull(x - bx2, z - bz2, NEBULA_BAR_MASS, NEBULA_BAR_SOFTENING)
    vx += ((bx1 - x) * f1 + (bx2 - x) * f2) * dt
    vz += ((bz1 - z) * f1 + (bz2 - z) * f2) * dt

    # 3. Orbit decay
    vx *= NEBULA_DAMPING
    vz *= NEBULA_DAMPING

    # 4. Position
    nx = x + vx * dt
    nz = z + vz * dt

    # 5. Turbulence
    tx, tz = turbulence(np.arange(buffer.count), t)
    nx += tx
    nz += tz

    # 6. Disk thickness
    vy -= y * NEBULA_PLANE_PULL * dt
    vy *= NEBULA_VERTICAL_DAMPING
    ny = y + vy * dt

    # 7. Recycle core-fallers and escapees at the rim
    r2 = nx * nx + nz * nz
    out = np.flatnonzero((r2 < NEBULA_MIN_R2) | (r2 > NEBULA_MAX_R2))
    if out.size:
        angle = rng.uniform(0.0, 2 * np.pi, out.size)
        dist = NEBULA_RIM_INNER + rng.random(out.size) * NEBULA_RIM_WIDTH
        v = NEBULA_ORBIT_SPEED / np.sqrt(dist)
        nx[out] = np.cos(angle) * dist
        nz[out] = np.sin(angle) * dist
        ny[out] = (rng.random(out.size) - 0.5) * NEBULA_DISK_HEIGHT
        vx[out] = -np.sin(angle) * v
        vy[out] = 0.0
        vz[out] = np.cos(angle) * v

    rows[:, 0] = nx
    rows[:, 1] = ny
    rows[:, 2] = nz
    rows[:, 3] = vx
    rows[:, 4] = vy
    rows[:, 5] = vz
    return out.size
