"""
Structure generators for the spiral galaxy.

Every generator follows the same contract: it receives the shared
StarAccumulator, its star quota and the GenerationContext, and appends
exactly ``quota`` stars. Ids follow global insertion order, so the order in
which the composer calls the generators matters.

Coordinates: the galactic plane is XZ, Y is the pole axis.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from config import galaxy as config
from .colors import Color, hsl_to_rgb, lerp_color
from .config import GalaxyConfig
from .names import random_star_name
from .planets import generate_planets
from .records import StarRecord, StructureType
from .sampler import RandomPlacementSampler


MAIN = config.MAIN_GALAXY
TEXTURES = config.TEXTURES
CLUSTER_COLOR = config.GLOBULAR_CLUSTERS


@dataclass
class GenerationContext:
    """Parameters and shared state handed to every structure generator."""
    config: GalaxyConfig
    rng: np.random.Generator
    sampler: RandomPlacementSampler
    color_in: Color
    color_out: Color

    @property
    def radius(self) -> float:
        return self.config.galaxy_radius


@dataclass
class Candidate:
    """A proposed star position with the values its colour and size derive from."""
    position: Tuple[float, float, float]
    structure: StructureType
    radius: float


# ============================================================================
# SHARED HELPERS
# ============================================================================

def taper(normalized: float) -> float:
    """Width multiplier: 1.0 at the inner edge down to taper_min at the rim."""
    taper_min = MAIN["taper_min"]
    return max(taper_min, 1.0 - normalized * (1.0 - taper_min))


def pick_texture(rng: np.random.Generator, allow_rare: bool = True) -> int:
    """Common textures with 96% probability, rare ones (indexed after them) otherwise."""
    num_common = TEXTURES["num_common"]
    if not allow_rare or rng.random() < TEXTURES["common_probability"]:
        return int(rng.integers(num_common))
    return num_common + int(rng.integers(TEXTURES["num_rare"]))


def random_direction(rng: np.random.Generator) -> Tuple[float, float, float]:
    """Uniform unit vector (x, y, z) with y as the polar axis."""
    phi = rng.random() * 2.0 * math.pi
    cos_theta = (rng.random() - 0.5) * 2.0
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    return sin_theta * math.cos(phi), cos_theta, sin_theta * math.sin(phi)


def _symmetric(rng: np.random.Generator) -> float:
    """Uniform in [-1, 1)."""
    return (rng.random() - 0.5) * 2.0


def _push(accumulator, ctx: GenerationContext, position, color, size,
          texture_index, structure, with_planets=False):
    star_id = accumulator.next_id()
    planets = generate_planets(star_id, ctx.rng) if with_planets else ()
    accumulator.append(StarRecord(
        id=star_id,
        name=random_star_name(ctx.rng),
        position=(float(position[0]), float(position[1]), float(position[2])),
        color=(float(color[0]), float(color[1]), float(color[2])),
        size=float(size),
        texture_index=int(texture_index),
        structure=structure,
        planets=planets,
    ))


# ============================================================================
# MAIN GALAXY: BAR, BULGE, SPIRAL ARMS, GENERAL DISK
# ============================================================================

def _arm_normalized_radius(cfg: GalaxyConfig, radius: float) -> float:
    bar_length = cfg.bar_length
    span = cfg.galaxy_radius - bar_length
    return min(1.0, max(0.0, radius - bar_length) / span)


def _disk_normalized_radius(cfg: GalaxyConfig, radius: float) -> float:
    bulge_radius = cfg.bulge_radius
    span = cfg.galaxy_radius - bulge_radius
    return max(0.0, min(1.0, (radius - bulge_radius) / span))


def _propose_bar(ctx: GenerationContext):
    cfg, rng = ctx.config, ctx.rng
    fuzz = MAIN["bar_fuzziness"] - 1.0
    length_bias = rng.random() ** MAIN["bar_skew_power"]
    x = _symmetric(rng) * cfg.bar_length * length_bias
    z = _symmetric(rng) * cfg.bar_width * (1.0 + (rng.random() - 0.5) * fuzz)
    y = _symmetric(rng) * cfg.bar_width * cfg.bar_y_scale * (1.0 + (rng.random() - 0.5) * fuzz)
    return x, y, z, math.sqrt(x * x + z * z)


def _propose_bulge(ctx: GenerationContext):
    cfg, rng = ctx.config, ctx.rng
    bulge_radius = cfg.bulge_radius
    inner = cfg.bar_length * 0.6

    r = rng.random() ** cfg.bulge_density_power * bulge_radius
    if r < inner:
        r = inner + rng.random() * (bulge_radius - inner)
    radius = min(max(r, cfg.bar_length * 0.5), bulge_radius)

    phi = rng.random() * 2.0 * math.pi
    theta = math.acos(rng.random() * 2.0 - 1.0)
    x = radius * math.sin(theta) * math.cos(phi)
    z = radius * math.sin(theta) * math.sin(phi)
    y = radius * math.cos(theta) * cfg.bulge_y_scale
    return x, y, z, radius


def _propose_arm(ctx: GenerationContext, star_index: int):
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    bar_length = cfg.bar_length

    radius = bar_length + rng.random() ** cfg.arm_radius_power * (R - bar_length)
    radius = min(radius, R)
    normalized = _arm_normalized_radius(cfg, radius)

    base_angle = normalized * cfg.spiral_tightness * cfg.spiral_angle_factor
    arm_index = star_index % cfg.num_arms
    arm_offset = arm_index / cfg.num_arms * 2.0 * math.pi
    width = cfg.arm_width * taper(normalized)

    if rng.random() < cfg.sub_arm_chance:
        arm_offset += (rng.random() - 0.5) * cfg.sub_arm_angle_offset_range
        width *= cfg.sub_arm_scatter_factor

    angle = base_angle + arm_offset
    scatter = rng.random() ** cfg.arm_point_density_power * width
    sx = scatter * _symmetric(rng)
    sz = scatter * _symmetric(rng)

    # Rotate the scatter into the arm's local frame
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    x = cos_a * radius + (sx * cos_a - sz * sin_a)
    z = sin_a * radius + (sx * sin_a + sz * cos_a)
    y = _symmetric(rng) * width * cfg.disk_y_scale_for_arms
    return x, y, z, radius


def _propose_disk(ctx: GenerationContext):
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    bulge_radius = cfg.bulge_radius

    radius = min(bulge_radius + rng.random() * (R - bulge_radius), R)
    angle = rng.random() * 2.0 * math.pi
    x = math.cos(angle) * radius
    z = math.sin(angle) * radius

    base_thickness = R * cfg.disk_y_scale
    y = _symmetric(rng) * base_thickness * taper(_disk_normalized_radius(cfg, radius))
    return x, y, z, radius


def max_vertical_extent(cfg: GalaxyConfig, structure: StructureType, radius: float) -> float:
    """Vertical clamp limit for a main-galaxy star, from the same taper used to place it."""
    if structure is StructureType.BAR:
        return cfg.bar_width * cfg.bar_y_scale * 1.3
    if structure is StructureType.BULGE:
        return cfg.bulge_radius * cfg.bulge_y_scale * 0.8
    if structure is StructureType.ARM:
        normalized = _arm_normalized_radius(cfg, radius)
        return cfg.arm_width * taper(normalized) * cfg.disk_y_scale_for_arms * 1.8
    base_thickness = cfg.galaxy_radius * cfg.disk_y_scale
    return base_thickness * taper(_disk_normalized_radius(cfg, radius)) * 1.5


def _jitter_and_clamp(ctx: GenerationContext, x, y, z, structure, radius):
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    noise = MAIN["noise_factor"]

    x += _symmetric(rng) * R * noise
    y += _symmetric(rng) * R * noise * 0.5
    z += _symmetric(rng) * R * noise

    dist_sq = x * x + z * z
    if dist_sq > R * R:
        scale = R / math.sqrt(dist_sq)
        x *= scale
        z *= scale

    # Re-bias into 70-100% of the limit instead of a flat ceiling
    max_y = max_vertical_extent(cfg, structure, radius)
    if abs(y) > max_y:
        y = math.copysign(1.0, y) * max_y * (0.7 + rng.random() * 0.3)
    return x, y, z


def _propose_main(ctx: GenerationContext, star_index: int) -> Candidate:
    roll = ctx.rng.random()
    bar_p = MAIN["bar_probability"]
    bulge_p = bar_p + MAIN["bulge_probability"]
    arm_p = bulge_p + MAIN["arm_probability"]

    if roll < bar_p:
        structure = StructureType.BAR
        x, y, z, radius = _propose_bar(ctx)
    elif roll < bulge_p:
        structure = StructureType.BULGE
        x, y, z, radius = _propose_bulge(ctx)
    elif roll < arm_p:
        structure = StructureType.ARM
        x, y, z, radius = _propose_arm(ctx, star_index)
    else:
        structure = StructureType.DISK
        x, y, z, radius = _propose_disk(ctx)

    x, y, z = _jitter_and_clamp(ctx, x, y, z, structure, radius)
    return Candidate((x, y, z), structure, radius)


def main_color_factor(cfg: GalaxyConfig, structure: StructureType, radius: float) -> float:
    """Interpolation factor from the inner toward the outer colour."""
    bulge_radius = cfg.bulge_radius
    if structure is StructureType.BULGE or (
        structure is StructureType.BAR and radius < bulge_radius * 0.7
    ):
        # Compressed 0-0.4 range for the concentrated core populations
        return min(radius / (bulge_radius * 0.8), 1.0) * 0.4
    return min(radius / (cfg.galaxy_radius * 0.75), 1.0)


def _main_size(ctx: GenerationContext, structure: StructureType, radius: float) -> float:
    size = ctx.rng.random() * 1.5 + 0.5
    if structure in (StructureType.BULGE, StructureType.BAR):
        size *= 1.2
    elif structure is StructureType.ARM:
        size *= 1.1 - _arm_normalized_radius(ctx.config, radius) * 0.3
    return max(0.4, min(size, 2.5))


def generate_main_galaxy(accumulator, quota: int, ctx: GenerationContext):
    """Bar, bulge, spiral-arm and general-disk stars; the structure is re-rolled per attempt."""
    cfg = ctx.config
    for i in range(quota):
        placement = ctx.sampler.place(lambda: _propose_main(ctx, i), accumulator)
        candidate = placement.candidate

        factor = main_color_factor(cfg, candidate.structure, candidate.radius)
        color = lerp_color(ctx.color_in, ctx.color_out, factor)
        texture_index = pick_texture(ctx.rng)
        size = _main_size(ctx, candidate.structure, candidate.radius)

        _push(accumulator, ctx, candidate.position, color, size, texture_index,
              candidate.structure, with_planets=cfg.with_planets)


# ============================================================================
# OUTER DISK
# ============================================================================

def generate_outer_disk(accumulator, quota: int, ctx: GenerationContext):
    """Thin, very flat ring just beyond the galaxy radius, coloured near the outer endpoint."""
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    inner = R * cfg.outer_disk_min_radius_factor
    span = R * (cfg.outer_disk_max_radius_factor - cfg.outer_disk_min_radius_factor)

    def propose():
        radius = inner + rng.random() * span
        angle = rng.random() * 2.0 * math.pi
        x = math.cos(angle) * radius
        z = math.sin(angle) * radius
        y = _symmetric(rng) * R * cfg.outer_disk_y_scale
        return Candidate((x, y, z), StructureType.OUTER_DISK, radius)

    for _ in range(quota):
        candidate = ctx.sampler.place(propose, accumulator).candidate

        factor = min(1.0, (candidate.radius - inner) / (span * 0.8)) if span > 0 else 0.0
        color = lerp_color(ctx.color_out, ctx.color_in, 0.1 + factor * 0.1)
        size = rng.random() * 0.8 + 0.3

        _push(accumulator, ctx, candidate.position, color, size,
              pick_texture(rng, allow_rare=False), StructureType.OUTER_DISK)


# ============================================================================
# HALO
# ============================================================================

def generate_halo(accumulator, quota: int, ctx: GenerationContext):
    """Flattened spheroid of faint stars concentrated toward its inner edge."""
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    inner = R * cfg.halo_min_radius_factor
    span = R * (cfg.halo_max_radius_factor - cfg.halo_min_radius_factor)

    def propose():
        radius = inner + rng.random() ** cfg.halo_density_power * span
        dx, dy, dz = random_direction(rng)
        position = (radius * dx, radius * dy * cfg.halo_y_scale, radius * dz)
        return Candidate(position, StructureType.HALO, radius)

    for _ in range(quota):
        candidate = ctx.sampler.place(propose, accumulator).candidate

        factor = min(1.0, (candidate.radius - inner) / (span * 0.5)) if span > 0 else 0.0
        color = lerp_color(ctx.color_out, ctx.color_in, 0.01 + factor * 0.05)
        size = rng.random() * 0.6 + 0.2

        _push(accumulator, ctx, candidate.position, color, size,
              pick_texture(rng, allow_rare=False), StructureType.HALO)


def generate_halo_filler(accumulator, count: int, ctx: GenerationContext):
    """
    Simplified halo stars used to top up the galaxy to its exact star count.

    No minimum-distance check: these only cover integer truncation left by
    the cluster split.
    """
    cfg, rng = ctx.config, ctx.rng
    R = cfg.galaxy_radius
    inner = R * cfg.halo_min_radius_factor
    span = R * (cfg.halo_max_radius_factor - cfg.halo_min_radius_factor)

    for _ in range(count):
        radius = inner + rng.random() * span
        dx, dy, dz = random_direction(rng)
        position = (radius * dx, radius * dy * cfg.halo_y_scale, radius * dz)
        size = rng.random() * 0.6 + 0.2
        _push(accumulator, ctx, position, ctx.color_out, size,
              pick_texture(rng, allow_rare=False), StructureType.HALO)


# ============================================================================
# GLOBULAR CLUSTERS
# ============================================================================

def cluster_color(rng: np.random.Generator) -> Color:
    """Narrow yellowish hue band for old stellar populations."""
    hue = rng.random() * CLUSTER_COLOR["hue_range"] + CLUSTER_COLOR["hue_min"]
    return hsl_to_rgb(hue, CLUSTER_COLOR["saturation"], CLUSTER_COLOR["lightness"])


def generate_globular_clusters(accumulator, quota: int, ctx: GenerationContext):
    """
    Dense spherical clusters on a shell around the galaxy.

    Each cluster gets ``quota // num_globular_clusters`` stars; the remainder
    is left for the composer's filler pass.
    """
    cfg, rng = ctx.config, ctx.rng
    if cfg.num_globular_clusters <= 0:
        return
    stars_per_cluster = quota // cfg.num_globular_clusters
    if stars_per_cluster <= 0:
        return

    R = cfg.galaxy_radius
    r_min, r_max = cfg.globular_cluster_radius_min, cfg.globular_cluster_radius_max

    for _ in range(cfg.num_globular_clusters):
        orbit = R * (cfg.globular_cluster_position_radius_min_factor
                     + rng.random() * (cfg.globular_cluster_position_radius_max_factor
                                       - cfg.globular_cluster_position_radius_min_factor))
        ux, uy, uz = random_direction(rng)
        cx, cy, cz = orbit * ux, orbit * uy, orbit * uz

        def propose():
            local = rng.random() ** cfg.globular_cluster_density_power * (
                rng.random() * (r_max - r_min) + r_min
            )
            dx, dy, dz = random_direction(rng)
            position = (cx + local * dx, cy + local * dy, cz + local * dz)
            return Candidate(position, StructureType.GLOBULAR_CLUSTER, local)

        for _ in range(stars_per_cluster):
            candidate = ctx.sampler.place(propose, accumulator).candidate
            size = rng.random() * 0.5 + 0.2
            _push(accumulator, ctx, candidate.position, cluster_color(rng), size,
                  pick_texture(rng, allow_rare=False), StructureType.GLOBULAR_CLUSTER)
