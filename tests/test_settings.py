import logging

import numpy as np
import pytest

from attractorvis.settings import AnimationSettings, SettingsStore


@pytest.fixture
def store():
    store = SettingsStore(seed=5)
    yield store
    store.close()


def test_default_settings():
    setting = AnimationSettings.default(np.random.default_rng(0))
    assert 0 <= setting.hue < 360
    assert (setting.saturation, setting.speed, setting.particle_count) == (0.8, 1.0, 8000)


def test_merged_only_touches_given_fields():
    base = AnimationSettings(10.0, 0.3, 2.0, 4000)
    assert base.merged(hue=200) == AnimationSettings(200.0, 0.3, 2.0, 4000)
    assert base.merged() == base


def test_merged_clamps():
    merged = AnimationSettings(10.0).merged(hue=-30, saturation=-1, speed=0.0, particle_count=99999)
    assert merged == AnimationSettings(330.0, 0.0, 0.1, 30000)


def test_store_assigns_defaults_once(store):
    first = store.get("LORENZ")
    assert store.get("LORENZ") is first
    assert first.saturation == 0.8


def test_save_settings(store):
    store.save_settings("AIZAWA", 12.0, 0.4, 2.5, 12000)
    store.flush()
    assert store.get("AIZAWA") == AnimationSettings(12.0, 0.4, 2.5, 12000)


def test_save_color_keeps_speed_and_count(store):
    store.save_settings("NEBULA", 12.0, 0.4, 2.5, 12000)
    store.save_color("NEBULA", 99.0, 0.9)
    store.flush()
    assert store.get("NEBULA") == AnimationSettings(99.0, 0.9, 2.5, 12000)


def test_save_color_for_unknown_attractor_uses_defaults(store):
    store.save_color("HALVORSEN", 45.0, 0.6).result()
    setting = store.get("HALVORSEN")
    assert (setting.hue, setting.saturation, setting.speed, setting.particle_count) == (45.0, 0.6, 1.0, 8000)


def test_save_returns_immediately_and_notifies():
    seen = []
    store = SettingsStore(on_save=lambda name, setting: seen.append((name, setting)))
    future = store.save_settings("RIPPLE", 1.0, 1.0, 1.0, 1000)
    store.close()
    assert future.done()
    assert seen == [("RIPPLE", AnimationSettings(1.0, 1.0, 1.0, 1000))]


def test_save_failure_is_logged_not_raised(caplog):
    def broken(name, setting):
        raise OSError("disk full")

    store = SettingsStore(on_save=broken)
    with caplog.at_level(logging.ERROR, logger="attractorvis.settings"):
        assert store.save_settings("LORENZ", 1.0, 1.0, 1.0, 1000).result() is None
    store.close()
    assert "Failed to save settings for LORENZ" in caplog.text
