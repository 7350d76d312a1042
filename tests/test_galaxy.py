import numpy as np
import pytest

from galaxy import GalaxyConfig, StructureType, generate_galaxy
from galaxy.colors import parse_hex_color, rgb_to_hue
from galaxy.records import MAIN_GALAXY_STRUCTURES
from galaxy.sampler import RandomPlacementSampler
from galaxy.structures import (
    GenerationContext, _jitter_and_clamp, _propose_bulge, max_vertical_extent,
)


@pytest.fixture(scope="module")
def small_galaxy():
    cfg = GalaxyConfig.from_overrides(num_stars=600, galaxy_radius=400.0, seed=11)
    return generate_galaxy(cfg)


def test_star_count_and_sequential_ids(small_galaxy):
    assert len(small_galaxy) == 600
    assert [star.id for star in small_galaxy.stars] == [f"star-{i}" for i in range(600)]
    assert small_galaxy.positions.shape == (600, 3)
    assert small_galaxy.colors.shape == (600, 3)
    assert small_galaxy.sizes.shape == (600,)
    assert small_galaxy.positions.dtype == np.float32


@pytest.mark.parametrize("num_stars", [0, 1, 7, 33, 101])
def test_exact_count_for_awkward_totals(num_stars):
    cfg = GalaxyConfig.from_overrides(num_stars=num_stars, galaxy_radius=300.0, seed=num_stars,
                                      with_planets=False)
    galaxy = generate_galaxy(cfg)
    assert len(galaxy) == num_stars
    assert len({star.id for star in galaxy.stars}) == num_stars


def test_structure_counts_follow_quotas(small_galaxy):
    counts = small_galaxy.structure_counts()
    quotas = small_galaxy.config.quotas()
    main = sum(counts.get(s, 0) for s in MAIN_GALAXY_STRUCTURES)
    assert main == quotas["main"]
    assert counts[StructureType.OUTER_DISK] == quotas["outer_disk"]
    assert counts[StructureType.GLOBULAR_CLUSTER] == quotas["globular_cluster"]
    assert counts[StructureType.HALO] == quotas["halo"]


def test_minimal_galaxy():
    cfg = GalaxyConfig.from_overrides(
        num_stars=10, main_fraction=1.0, outer_disk_fraction=0.0,
        halo_fraction=0.0, globular_cluster_fraction=0.0, seed=5,
    )
    galaxy = generate_galaxy(cfg)
    assert [star.id for star in galaxy.stars] == [f"star-{i}" for i in range(10)]
    assert all(star.structure in MAIN_GALAXY_STRUCTURES for star in galaxy.stars)
    assert all(star.planets for star in galaxy.stars)


def test_cluster_only_galaxy():
    cfg = GalaxyConfig.from_overrides(
        num_stars=20, main_fraction=0.0, outer_disk_fraction=0.0, halo_fraction=0.0,
        globular_cluster_fraction=1.0, num_globular_clusters=2, seed=8,
    )
    galaxy = generate_galaxy(cfg)
    assert len(galaxy) == 20
    assert all(star.structure is StructureType.GLOBULAR_CLUSTER for star in galaxy.stars)
    assert all(star.planets == () for star in galaxy.stars)
    for star in galaxy.stars:
        assert 0.08 - 1e-6 <= rgb_to_hue(star.color) <= 0.13 + 1e-6

    # Two clusters of ten, each tight around its own centre
    first = np.array([s.position for s in galaxy.stars[:10]])
    second = np.array([s.position for s in galaxy.stars[10:]])
    for cluster in (first, second):
        spread = np.linalg.norm(cluster - cluster.mean(axis=0), axis=1)
        assert spread.max() <= 2 * cfg.globular_cluster_radius_max


def test_main_galaxy_stays_within_radius(small_galaxy):
    radius = small_galaxy.config.galaxy_radius
    for star in small_galaxy.stars:
        if star.structure.is_main_galaxy:
            assert star.radius_xz <= radius * (1 + 1e-9)


def test_outer_populations_extend_past_radius(small_galaxy):
    radius = small_galaxy.config.galaxy_radius
    outer = [s for s in small_galaxy.stars if s.structure is StructureType.OUTER_DISK]
    assert outer
    assert all(s.radius_xz >= radius * 0.999 for s in outer)


def test_colors_stay_between_endpoints(small_galaxy):
    cfg = small_galaxy.config
    c_in = np.array(parse_hex_color(cfg.color_in_hex))
    c_out = np.array(parse_hex_color(cfg.color_out_hex))
    low, high = np.minimum(c_in, c_out), np.maximum(c_in, c_out)
    for star in small_galaxy.stars:
        if star.structure is StructureType.GLOBULAR_CLUSTER:
            continue
        color = np.array(star.color)
        assert np.all(color >= low - 1e-9) and np.all(color <= high + 1e-9)


def test_minimum_distance_holds_except_forced(small_galaxy):
    cfg = small_galaxy.config
    positions = np.array([s.position for s in small_galaxy.stars])
    violations = 0
    for i in range(1, len(positions)):
        d2 = np.sum((positions[:i] - positions[i]) ** 2, axis=1)
        if d2.min() < cfg.min_star_distance_squared * (1 - 1e-9):
            violations += 1
    # 600 stars with 5 clusters leaves no filler, so only forced placements may violate
    assert violations <= small_galaxy.forced_placements


def test_forced_placements_when_spacing_is_impossible():
    cfg = GalaxyConfig.from_overrides(
        num_stars=50, galaxy_radius=100.0, min_star_distance=1000.0,
        max_placement_attempts=3, with_planets=False, seed=2,
    )
    galaxy = generate_galaxy(cfg)
    assert len(galaxy) == 50
    assert galaxy.forced_placements >= 45


def test_same_seed_same_galaxy():
    cfg = GalaxyConfig.from_overrides(num_stars=150, galaxy_radius=300.0, seed=42)
    a = generate_galaxy(cfg)
    b = generate_galaxy(cfg)
    assert a.stars == b.stars
    np.testing.assert_array_equal(a.positions, b.positions)


def test_injected_generator_overrides_seed():
    cfg = GalaxyConfig.from_overrides(num_stars=40, galaxy_radius=300.0, seed=1,
                                      with_planets=False)
    a = generate_galaxy(cfg, np.random.default_rng(123))
    b = generate_galaxy(cfg, np.random.default_rng(123))
    c = generate_galaxy(cfg)
    assert a.stars == b.stars
    assert a.stars != c.stars


def test_planets_only_on_main_galaxy_stars(small_galaxy):
    for star in small_galaxy.stars:
        if star.structure.is_main_galaxy:
            assert 3 <= len(star.planets) <= 8
        else:
            assert star.planets == ()


def test_textures_and_groups(small_galaxy):
    groups = small_galaxy.texture_groups()
    assert sum(len(members) for members in groups.values()) == len(small_galaxy)
    assert all(0 <= key < 12 for key in groups)
    for star in small_galaxy.stars:
        if not star.structure.is_main_galaxy:
            assert star.texture_index < 7


def test_sizes_positive(small_galaxy):
    assert np.all(small_galaxy.sizes > 0)
    main_sizes = [s.size for s in small_galaxy.stars if s.structure.is_main_galaxy]
    assert min(main_sizes) >= 0.4 and max(main_sizes) <= 2.5


def test_main_galaxy_is_flattened(small_galaxy):
    ys = [abs(s.position[1]) for s in small_galaxy.stars if s.structure.is_main_galaxy]
    radius = small_galaxy.config.galaxy_radius
    assert max(ys) < radius * 0.5


def make_context(seed, **overrides):
    cfg = GalaxyConfig.from_overrides(galaxy_radius=400.0, **overrides)
    return GenerationContext(
        config=cfg,
        rng=np.random.default_rng(seed),
        sampler=RandomPlacementSampler(cfg.min_star_distance_squared, cfg.max_placement_attempts),
        color_in=parse_hex_color(cfg.color_in_hex),
        color_out=parse_hex_color(cfg.color_out_hex),
    )


@pytest.mark.parametrize("structure, radius", [
    (StructureType.BAR, 50.0),
    (StructureType.BULGE, 80.0),
    (StructureType.ARM, 150.0),
    (StructureType.ARM, 390.0),
    (StructureType.DISK, 200.0),
    (StructureType.DISK, 399.0),
])
def test_vertical_clamp_rebiases_into_upper_band(structure, radius):
    ctx = make_context(0)
    max_y = max_vertical_extent(ctx.config, structure, radius)
    for sign in (1.0, -1.0):
        for _ in range(200):
            _, y, _ = _jitter_and_clamp(ctx, 10.0, sign * 1e6, 10.0, structure, radius)
            assert np.sign(y) == sign
            assert 0.7 * max_y <= abs(y) <= max_y


def test_vertical_clamp_leaves_points_inside_the_limit():
    ctx = make_context(1)
    max_y = max_vertical_extent(ctx.config, StructureType.DISK, 200.0)
    jitter = ctx.config.galaxy_radius * 0.01
    for _ in range(200):
        _, y, _ = _jitter_and_clamp(ctx, 10.0, 0.0, 10.0, StructureType.DISK, 200.0)
        assert abs(y) <= jitter
    assert jitter < max_y


def test_main_galaxy_heights_within_structure_limits(small_galaxy):
    cfg = small_galaxy.config
    limits = {
        StructureType.BAR: cfg.bar_width * cfg.bar_y_scale * 1.3,
        StructureType.BULGE: cfg.bulge_radius * cfg.bulge_y_scale * 0.8,
        StructureType.ARM: cfg.arm_width * cfg.disk_y_scale_for_arms * 1.8,
        StructureType.DISK: cfg.galaxy_radius * cfg.disk_y_scale * 1.5,
    }
    for star in small_galaxy.stars:
        if star.structure in limits:
            assert abs(star.position[1]) <= limits[star.structure] + 1e-9


def test_halo_stars_lie_in_flattened_shell(small_galaxy):
    cfg = small_galaxy.config
    R = cfg.galaxy_radius
    halo = [s.position for s in small_galaxy.stars if s.structure is StructureType.HALO]
    assert halo
    for x, y, z in halo:
        unscaled = np.sqrt(x * x + (y / cfg.halo_y_scale) ** 2 + z * z)
        assert R * cfg.halo_min_radius_factor - 1e-6 <= unscaled
        assert unscaled <= R * cfg.halo_max_radius_factor + 1e-6
        assert abs(y) <= R * cfg.halo_max_radius_factor * cfg.halo_y_scale + 1e-6


def test_outer_disk_stays_thin(small_galaxy):
    cfg = small_galaxy.config
    ys = [s.position[1] for s in small_galaxy.stars if s.structure is StructureType.OUTER_DISK]
    assert ys
    assert max(abs(y) for y in ys) <= cfg.galaxy_radius * cfg.outer_disk_y_scale


def test_bulge_proposals_fill_clamped_ellipsoid_shell():
    ctx = make_context(2)
    cfg = ctx.config
    for _ in range(2000):
        x, y, z, radius = _propose_bulge(ctx)
        assert cfg.bar_length * 0.5 <= radius <= cfg.bulge_radius
        shell = np.sqrt(x * x + (y / cfg.bulge_y_scale) ** 2 + z * z)
        assert shell == pytest.approx(radius, rel=1e-9)
