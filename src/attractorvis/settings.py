import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, replace
from threading import Lock

import numpy as np

from attractorvis.constants import (
    DEFAULT_PARTICLE_COUNT,
    DEFAULT_SATURATION,
    DEFAULT_SPEED,
    MAX_PARTICLE_COUNT,
    MAX_SPEED,
    MIN_PARTICLE_COUNT,
    MIN_SPEED,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnimationSettings:
    """Per-attractor colour, speed and particle count."""

    hue: float
    saturation: float = DEFAULT_SATURATION
    speed: float = DEFAULT_SPEED
    particle_count: int = DEFAULT_PARTICLE_COUNT

    @classmethod
    def default(cls, rng):
        return cls(hue=float(rng.random() * 360.0))

    def merged(self, hue=None, saturation=None, speed=None, particle_count=None):
        """Copy with the given fields overridden (clamped); None leaves a field alone."""
        changes = {}
        if hue is not None:
            changes["hue"] = float(hue) % 360.0
        if saturation is not None:
            changes["saturation"] = min(max(float(saturation), 0.0), 1.0)
        if speed is not None:
            changes["speed"] = min(max(float(speed), MIN_SPEED), MAX_SPEED)
        if particle_count is not None:
            changes["particle_count"] = min(max(int(particle_count), MIN_PARTICLE_COUNT), MAX_PARTICLE_COUNT)
        return replace(self, **changes)

    def to_dict(self):
        return asdict(self)


class SettingsStore:
    """
    In-memory settings keyed by attractor name.

    Saves run on a single background worker so callers on the frame loop
    never wait on them. Missing entries get a random hue and the default
    saturation, speed and count on first access.
    """

    def __init__(self, seed=None, on_save=None):
        self._rng = np.random.default_rng(seed)
        self._settings = {}
        self._lock = Lock()
        self._on_save = on_save
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="settings-save")
        self._pending = []

    def get(self, name):
        with self._lock:
            if name not in self._settings:
                self._settings[name] = AnimationSettings.default(self._rng)
                logger.debug(f"[i] Assigned default settings for {name}: {self._settings[name]}")
            return self._settings[name]

    def all(self):
        with self._lock:
            return dict(self._settings)

    def save_settings(self, name, hue, saturation, speed, particle_count):
        """Queue a full save. Returns the future of the write."""
        setting = AnimationSettings(hue, saturation, speed, particle_count)
        return self._submit(name, lambda current: setting)

    def save_color(self, name, hue, saturation):
        """Queue a colour-only save that keeps the stored speed and count."""
        return self._submit(name, lambda current: replace(current, hue=hue, saturation=saturation))

    def _submit(self, name, update):
        future = self._executor.submit(self._write, name, update)
        self._pending.append(future)
        self._pending = [f for f in self._pending if not f.done()]
        return future

    def _write(self, name, update):
        try:
            with self._lock:
                current = self._settings.get(name) or AnimationSettings.default(self._rng)
                setting = update(current)
                self._settings[name] = setting
            logger.info(f"[+] Saved settings for {name}: {setting}")
            if self._on_save is not None:
                self._on_save(name, setting)
            return setting
        except Exception:
            logger.exception(f"[!] Failed to save settings for {name}")
            return None

    def flush(self):
        """Block until every queued save has been written."""
        for future in list(self._pending):
            future.result()
        self._pending = []

    def close(self):
        self.flush()
        self._executor.shutdown(wait=True)
