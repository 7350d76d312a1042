import math

import numpy as np
import pytest

from core import CameraPose, FrameClock, GalaxyApplication, OrbitCamera, quaternion_angle
from galaxy import GalaxyConfig


@pytest.fixture(scope="module")
def app():
    cfg = GalaxyConfig.from_overrides(num_stars=300, galaxy_radius=500.0, seed=21,
                                      with_planets=False)
    application = GalaxyApplication(cfg)
    application.generate()
    return application


def test_orbit_camera_pose_is_unit_and_tracks_rotation():
    camera = OrbitCamera()
    first = camera.pose()
    assert math.isclose(sum(c * c for c in first.quaternion), 1.0, rel_tol=1e-9)
    assert np.linalg.norm(first.position) == pytest.approx(camera.radius)

    camera.rotate(30.0, 0.0)
    second = camera.pose()
    assert quaternion_angle(first.quaternion, second.quaternion) == pytest.approx(
        math.radians(30.0), rel=1e-6)


def test_orbit_camera_zoom_eases_toward_target():
    camera = OrbitCamera()
    start = camera.radius
    camera.zoom_smooth(-500.0)
    camera.update(0.016)
    assert camera.target_radius < camera.radius < start


def test_generate_builds_index_over_all_stars(app):
    assert len(app.galaxy) == 300
    assert len(app.index) == 300
    assert len(app.nebulae) == 144


def test_nearest_star_matches_linear_scan(app):
    positions = np.array([s.position for s in app.galaxy.stars])
    rng = np.random.default_rng(0)
    for target in rng.uniform(-700, 700, size=(20, 3)):
        star = app.nearest_star(target)
        best = np.min(np.sum((positions - target) ** 2, axis=1))
        found = np.sum((np.array(star.position) - target) ** 2)
        assert found == pytest.approx(best, rel=1e-4, abs=1e-2)


def test_nearest_star_before_generation():
    assert GalaxyApplication().nearest_star((0.0, 0.0, 0.0)) is None


def test_update_reports_lod_and_mode(app):
    star = app.galaxy.stars[0]
    pose = CameraPose(position=star.position)
    result = app.update(0.016, pose)
    assert result.lod.level == 3
    assert result.dynamics.optimized_mode is False


def test_manual_lod_and_optimized_mode_pass_through(app):
    assert app.set_manual_lod(True, 1).level == 1
    app.request_optimized_mode(True)
    result = app.update(0.016, CameraPose(position=(1e5, 0.0, 0.0)))
    assert result.lod.level == 1
    assert result.dynamics.optimized_mode
    assert result.dynamics.optimized_mode_changed
    app.set_manual_lod(False)
    app.request_optimized_mode(False)


def test_run_drives_frames_with_orbit_camera():
    cfg = GalaxyConfig.from_overrides(num_stars=120, galaxy_radius=400.0, seed=3,
                                      with_planets=False)
    application = GalaxyApplication(cfg)
    updates = application.run(25, dt=1.0 / 30.0, orbit_speed=20.0, zoom_speed=-200.0)
    assert len(updates) == 25
    assert updates[0].lod.changed
    assert updates[0].dynamics.optimized_mode_changed
    assert any(u.dynamics.is_rotating for u in updates)
    assert sum(u.lod.changed for u in updates) >= 1


def test_run_debounces_rotation_on_frame_time():
    cfg = GalaxyConfig.from_overrides(num_stars=80, galaxy_radius=400.0, seed=4,
                                      with_planets=False)
    application = GalaxyApplication(cfg)
    camera = OrbitCamera()
    spinning = application.run(10, dt=0.05, camera=camera, orbit_speed=30.0)
    assert spinning[-1].dynamics.is_rotating

    # 0.25 s of frames without motion, however fast they execute
    idle = application.run(5, dt=0.05, camera=camera, orbit_speed=0.0)
    assert idle[0].dynamics.is_rotating
    assert not idle[-1].dynamics.is_rotating
    assert isinstance(application.dynamics.clock, FrameClock)
    assert application.dynamics.clock() == pytest.approx(
        application.dynamics.state.last_rotation_time + 0.25)


def test_run_keeps_an_injected_frame_clock():
    clock = FrameClock(100.0)
    cfg = GalaxyConfig.from_overrides(num_stars=50, galaxy_radius=300.0, seed=6,
                                      with_planets=False)
    application = GalaxyApplication(cfg, clock=clock)
    application.run(4, dt=0.5)
    assert application.dynamics.clock is clock
    assert clock() == pytest.approx(102.0)


def test_regenerate_rebinds_lod_index(app):
    cfg = GalaxyConfig.from_overrides(num_stars=50, galaxy_radius=500.0, seed=9,
                                      with_planets=False)
    application = GalaxyApplication(cfg)
    application.generate()
    first_index = application.index
    application.generate(GalaxyConfig.from_overrides(num_stars=80, galaxy_radius=800.0, seed=10,
                                                     with_planets=False))
    assert application.index is not first_index
    assert application.lod.index is application.index
    assert application.lod.galaxy_radius == 800.0
    assert len(application.index) == 80
