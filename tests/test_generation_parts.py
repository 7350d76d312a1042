import math
import os

import numpy as np
import pytest

from galaxy import GalaxyConfig, generate_nebulae
from galaxy.accumulator import StarAccumulator
from galaxy.colors import hsl_to_rgb, lerp_color, parse_hex_color, rgb_to_hue
from galaxy.planets import generate_planets
from galaxy.records import StarRecord, StructureType
from galaxy.sampler import RandomPlacementSampler
from galaxy.structures import Candidate, pick_texture, taper


def make_star(i, position):
    return StarRecord(
        id=f"star-{i}", name="Test", position=position, color=(1.0, 1.0, 1.0),
        size=1.0, texture_index=0, structure=StructureType.HALO,
    )


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def test_quotas_sum_to_star_count():
    for n in (0, 1, 19, 20, 999, 20_000):
        quotas = GalaxyConfig(num_stars=n).quotas()
        assert sum(quotas.values()) == n
        assert quotas["outer_disk"] == math.floor(n * 0.025)
        assert quotas["halo"] == math.floor(n * 0.10)


@pytest.mark.parametrize("overrides", [
    {"num_stars": -1},
    {"galaxy_radius": 0.0},
    {"halo_fraction": -0.1},
    {"main_fraction": 0.9, "halo_fraction": 0.2},
    {"num_arms": 0},
    {"num_globular_clusters": -1},
    {"bar_length_factor": 1.5},
    {"min_star_distance": -1.0},
    {"max_placement_attempts": 0},
    {"color_in_hex": "#12345"},
    {"color_out_hex": "not-a-colour"},
    {"halo_min_radius_factor": 2.0, "halo_max_radius_factor": 1.0},
])
def test_invalid_configs_raise(overrides):
    with pytest.raises(ValueError):
        GalaxyConfig.from_overrides(**overrides)


def test_unknown_override_raises():
    with pytest.raises(ValueError, match="star_count"):
        GalaxyConfig.from_overrides(star_count=10)


def test_derived_lengths():
    cfg = GalaxyConfig(galaxy_radius=1000.0, min_star_distance=5.0)
    assert cfg.min_star_distance_squared == 25.0
    assert cfg.bulge_radius == pytest.approx(280.0)
    assert cfg.bar_length == pytest.approx(250.0)
    assert cfg.bar_width == pytest.approx(50.0)


def test_defaults_come_from_config_directory_constants():
    from config import galaxy as constants

    assert os.path.basename(os.path.dirname(constants.__file__)) == "config"
    cfg = GalaxyConfig()
    assert cfg.galaxy_radius == constants.GALAXY["galaxy_radius"]
    assert cfg.num_stars == constants.GALAXY["num_stars"]


# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------

def test_parse_hex_color():
    assert parse_hex_color("#ff0000") == (1.0, 0.0, 0.0)
    assert parse_hex_color("00ff00") == (0.0, 1.0, 0.0)
    assert parse_hex_color("#5070cc") == (0x50 / 255.0, 0x70 / 255.0, 0xcc / 255.0)


def test_lerp_color_clamps_factor():
    start, end = (0.0, 0.0, 0.0), (1.0, 0.5, 0.25)
    assert lerp_color(start, end, -1.0) == start
    assert lerp_color(start, end, 2.0) == end
    assert lerp_color(start, end, 0.5) == (0.5, 0.25, 0.125)


def test_hsl_round_trip_hue():
    assert rgb_to_hue(hsl_to_rgb(0.1, 0.7, 0.65)) == pytest.approx(0.1)


# ---------------------------------------------------------------------------
# Accumulator and sampler
# ---------------------------------------------------------------------------

def test_accumulator_grows_and_keeps_order():
    acc = StarAccumulator(expected=2)
    for i in range(40):
        assert acc.next_id() == f"star-{i}"
        acc.append(make_star(i, (float(i), 0.0, 0.0)))
    assert acc.count() == 40
    assert acc.placed_positions().shape == (40, 3)
    np.testing.assert_array_equal(acc.positions()[:, 0], np.arange(40, dtype=np.float32))
    assert [s.id for s in acc.stars][-1] == "star-39"


def test_sampler_accepts_first_clear_candidate():
    acc = StarAccumulator()
    acc.append(make_star(0, (0.0, 0.0, 0.0)))
    proposals = iter([(1.0, 0.0, 0.0), (2.0, 0.0, 0.0), (10.0, 0.0, 0.0)])

    def propose():
        return Candidate(next(proposals), StructureType.HALO, 0.0)

    sampler = RandomPlacementSampler(min_distance_squared=25.0, max_attempts=10)
    placement = sampler.place(propose, acc)
    assert placement.candidate.position == (10.0, 0.0, 0.0)
    assert placement.attempts == 3
    assert not placement.forced
    assert sampler.forced_count == 0


def test_sampler_forces_last_candidate_after_max_attempts():
    acc = StarAccumulator()
    acc.append(make_star(0, (0.0, 0.0, 0.0)))
    calls = []

    def propose():
        calls.append(1)
        return Candidate((float(len(calls)) * 0.1, 0.0, 0.0), StructureType.HALO, 0.0)

    sampler = RandomPlacementSampler(min_distance_squared=100.0, max_attempts=4)
    placement = sampler.place(propose, acc)
    assert placement.forced
    assert len(calls) == 4
    assert placement.candidate.position == pytest.approx((0.4, 0.0, 0.0))
    assert sampler.forced_count == 1


def test_sampler_treats_zero_attempts_as_one():
    sampler = RandomPlacementSampler(min_distance_squared=1.0, max_attempts=0)
    assert sampler.max_attempts == 1


def test_first_star_is_never_forced():
    sampler = RandomPlacementSampler(min_distance_squared=1e12, max_attempts=1)
    placement = sampler.place(lambda: Candidate((0.0, 0.0, 0.0), StructureType.BAR, 0.0),
                              StarAccumulator())
    assert not placement.forced


# ---------------------------------------------------------------------------
# Shared helpers, planets and nebulae
# ---------------------------------------------------------------------------

def test_taper_range():
    assert taper(0.0) == 1.0
    assert taper(1.0) == pytest.approx(0.15)
    assert taper(5.0) == pytest.approx(0.15)


def test_texture_pick_probabilities():
    rng = np.random.default_rng(0)
    picks = np.array([pick_texture(rng) for _ in range(20_000)])
    rare = np.mean(picks >= 7)
    assert 0.02 < rare < 0.06
    assert picks.max() < 12
    assert max(pick_texture(rng, allow_rare=False) for _ in range(500)) < 7


def test_planet_system_shape():
    rng = np.random.default_rng(3)
    for _ in range(50):
        planets = generate_planets("star-7", rng)
        assert 3 <= len(planets) <= 8
        for k, planet in enumerate(planets):
            assert planet.id == f"star-7-p{k}"
            assert 0.5 <= planet.size <= 2.5
            assert (k + 1) * 5.0 <= planet.orbit_radius <= (k + 1) * 10.0
            assert 0.001 <= planet.orbit_speed <= 0.006
            assert len(planet.color) == 6


def test_nebulae_placement():
    nebulae = generate_nebulae(1000.0, np.random.default_rng(4))
    assert len(nebulae) == 144
    assert {n.texture_index for n in nebulae} == set(range(9))
    for nebula in nebulae:
        x, _, z = nebula.position
        assert math.hypot(x, z) <= 900.0 + 1e-9
        assert 0.15 <= nebula.opacity <= 0.35


def test_nebulae_param_override():
    nebulae = generate_nebulae(500.0, np.random.default_rng(1), params={"count": 5})
    assert [n.id for n in nebulae] == [f"nebula-{i}" for i in range(5)]
