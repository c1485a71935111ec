import numpy as np
import pytest

from attractorvis.attractors import AttractorType
from attractorvis.projection import ViewState
from attractorvis.session import SimulationSession
from attractorvis.settings import AnimationSettings, SettingsStore
from attractorvis.visualiser_renderer import RenderMode, rasterise


def _session(kind=AttractorType.LORENZ, count=1000, **kwargs):
    settings = AnimationSettings(hue=30.0, saturation=0.5, speed=1.5, particle_count=count)
    return SimulationSession(kind, settings=settings, seed=1, **kwargs)


@pytest.mark.parametrize("kind", list(AttractorType))
def test_configure_allocates_stride_sized_buffers(kind):
    session = _session(kind, count=1000)
    stride = 6 if kind is AttractorType.NEBULA else 4
    assert session.particles.data.shape == (1000 * stride,)
    assert session.screen.data.shape == (2000,)


def test_configure_replaces_buffers():
    session = _session()
    old = session.particles
    session.configure(AttractorType.NEBULA, 1500)
    assert session.particles is not old
    assert session.particles.data.shape == (1500 * 6,)
    assert session.count == 1500


def test_configure_rejects_negative_count():
    with pytest.raises(ValueError):
        _session().configure(AttractorType.LORENZ, -1)


def test_hue_override_leaves_other_settings():
    session = _session()
    buffer = session.particles
    session.apply_overrides(hue=200)
    assert session.settings.hue == 200
    assert session.settings.saturation == 0.5
    assert session.settings.speed == 1.5
    assert session.settings.particle_count == 1000
    assert session.particles is buffer


def test_count_override_reconfigures():
    session = _session()
    session.apply_overrides(particle_count=5000)
    assert session.particles.data.shape == (5000 * 4,)
    assert session.screen.data.shape == (10000,)


def test_overrides_are_clamped():
    session = _session()
    session.apply_overrides(hue=400, saturation=2.0, speed=10.0, particle_count=10)
    assert session.settings.hue == pytest.approx(40.0)
    assert session.settings.saturation == 1.0
    assert session.settings.speed == 3.0
    assert session.settings.particle_count == 1000


def test_tick_advances_clock_by_speed():
    session = _session(AttractorType.HALVORSEN)
    dt = session.tick()
    assert dt == pytest.approx(0.005 * 1.5)
    assert session.clock.t == pytest.approx(dt)
    session.tick(0.1)
    assert session.clock.t == pytest.approx(dt + 0.1)


def test_clock_survives_reconfigure():
    session = _session()
    session.tick()
    t = session.clock.t
    session.configure(AttractorType.AIZAWA, 1000)
    assert session.clock.t == t


def test_render_lorenz_frame():
    session = _session()
    for _ in range(20):
        session.tick()
    view = ViewState(320, 240)
    batch = session.render(view)
    assert batch.mode is RenderMode.STANDARD
    assert len(batch.points) == session.screen.valid_count > 0
    frame = rasterise(batch, np.zeros((240, 320, 3), dtype=np.uint8))
    assert frame.any()


def test_ripple_session_draws_waves():
    session = _session(AttractorType.RIPPLE, count=15500)
    session.tick()
    assert session.progress == pytest.approx(0.5)
    assert session.count_label == "Water Level: 50%"
    batch = session.render(ViewState(100, 100))
    assert batch.mode is RenderMode.PROCEDURAL


def test_count_label():
    assert _session(count=8000).count_label == "Count: 8000"


def test_picture_mode():
    session = _session(AttractorType.FIBONACCI_SPHERE)
    session.set_image(np.zeros((64, 64, 4), dtype=np.uint8))
    assert session.picture_mode
    assert session.render(ViewState(200, 200)).mode is RenderMode.PICTURE
    session.set_image(None)
    assert session.render(ViewState(200, 200)).mode is RenderMode.STANDARD


@pytest.mark.parametrize("image", [np.zeros((8, 8), np.uint8), np.zeros((8, 8, 3), np.float32)])
def test_set_image_rejects_bad_bitmaps(image):
    with pytest.raises(ValueError):
        _session(AttractorType.FIBONACCI_SPHERE).set_image(image)


def test_particle_size_clamped():
    session = _session()
    session.set_particle_size(10)
    assert session.particle_size == 5.0
    session.set_particle_size(0.1)
    assert session.particle_size == 0.5


def test_request_save_goes_to_store():
    store = SettingsStore(seed=0)
    try:
        session = _session(on_save=store.save_settings)
        session.apply_overrides(hue=200)
        saved = session.request_save().result()
        assert saved == AnimationSettings(200.0, 0.5, 1.5, 1000)
        assert store.get("LORENZ") == saved
    finally:
        store.close()


def test_request_save_without_callback():
    assert _session().request_save() is None


def test_seeded_sessions_are_reproducible():
    a, b = _session(), _session()
    for _ in range(5):
        a.tick()
        b.tick()
    np.testing.assert_array_equal(a.particles.data, b.particles.data)


def test_default_settings_when_none_given():
    session = SimulationSession(AttractorType.SPROTT_B, seed=3)
    assert 0 <= session.settings.hue < 360
    assert session.settings.saturation == 0.8
    assert session.settings.speed == 1.0
    assert session.count == 8000


@pytest.mark.parametrize("kind", list(AttractorType))
def test_zero_size_viewport_draws_nothing(kind):
    session = _session(kind, count=15500)
    session.tick()
    batch = session.render(ViewState(0, 0))
    frame = rasterise(batch, np.zeros((0, 0, 3), dtype=np.uint8))
    assert frame.shape == (0, 0, 3)
