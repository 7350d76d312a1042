"""Configuration for procedural spiral galaxy generation and LOD control."""

import math

# =============================================================================
# SIZE PRESETS - Choose one by uncommenting
# =============================================================================

# PRESET: DENSE (20K stars) - generation takes a while, fine for screenshots
# STAR_COUNT = 20_000
# GALAXY_RADIUS = 2000.0

# PRESET: DEFAULT (2K stars) - interactive
STAR_COUNT = 2_000
GALAXY_RADIUS = 1000.0

# PRESET: TINY (500 stars) - quick iteration
# STAR_COUNT = 500
# GALAXY_RADIUS = 600.0

# =============================================================================

GALAXY = {
    "num_stars": STAR_COUNT,
    "galaxy_radius": GALAXY_RADIUS,
    "color_in_hex": "#ff9040",        # Hotter/younger core stars (orange-yellow)
    "color_out_hex": "#5070cc",       # Cooler/older rim stars (blue-ish)
    "with_planets": True,
    "seed": None,                     # None = non-seeded, every run differs
}

# Star-count fractions per population (remainder goes to the main galaxy)
STRUCTURES = {
    "main_fraction": 0.825,           # Bar, bulge, arms and inner disk
    "outer_disk_fraction": 0.025,     # Sparse disk beyond the galaxy radius
    "halo_fraction": 0.10,            # Loosely scattered stars around the galaxy
    "globular_cluster_fraction": 0.05,
}

MAIN_GALAXY = {
    # Spiral arms
    "num_arms": 4,
    "spiral_tightness": 0.4,          # How tightly arms are wound
    "spiral_angle_factor": 12.0,      # Multiplier on the winding angle
    "arm_width": 120.0,
    "arm_point_density_power": 2.5,   # Higher = scatter concentrated on the arm spine
    "arm_radius_power": 1.8,          # Radial bias of arm stars toward the bar
    "disk_y_scale_for_arms": 0.30,
    "sub_arm_chance": 0.15,
    "sub_arm_scatter_factor": 1.5,
    "sub_arm_angle_offset_range": math.pi / 6,

    # Bulge
    "bulge_size_factor": 0.28,        # Fraction of galaxy radius
    "bulge_y_scale": 0.6,             # Oblate: height is 60% of radius
    "bulge_density_power": 1.5,

    # Central bar
    "bar_length_factor": 0.25,
    "bar_width_factor": 0.05,
    "bar_y_scale": 0.8,
    "bar_skew_power": 1.5,            # Length bias toward the centre
    "bar_fuzziness": 1.5,

    # General disk
    "disk_y_scale": 0.18,             # Thickness at the bulge edge, tapers outward

    # Per-attempt structure roll (cumulative thresholds bar < bulge < arm < disk)
    "bar_probability": 0.15,
    "bulge_probability": 0.20,
    "arm_probability": 0.50,

    # Shared shaping
    "taper_min": 0.15,                # Width/thickness at the rim relative to the core
    "noise_factor": 0.02,             # Post-placement jitter, fraction of radius
}

HALO = {
    "min_radius_factor": 0.8,
    "max_radius_factor": 1.4,
    "y_scale": 0.7,                   # Less flat than the disk, not a sphere
    "density_power": 2.0,             # Higher = concentrated near the inner edge
}

OUTER_DISK = {
    "min_radius_factor": 1.0,
    "max_radius_factor": 1.1,
    "y_scale": 0.025,                 # Very flat
}

GLOBULAR_CLUSTERS = {
    "count": 5,
    "radius_min": 20.0,               # Star radius in cluster-local space
    "radius_max": 40.0,
    "density_power": 2.5,             # Higher = more centrally condensed
    "position_radius_min_factor": 0.5,
    "position_radius_max_factor": 1.2,
    "hue_min": 0.08,                  # Yellowish old population
    "hue_range": 0.05,
    "saturation": 0.7,
    "lightness": 0.65,
}

PLACEMENT = {
    "min_star_distance": 5.0,
    "max_attempts": 10,
}

TEXTURES = {
    "num_common": 7,
    "num_rare": 5,
    "common_probability": 0.96,       # Fixed design constant
}

PLANETS = {
    "min_per_system": 3,
    "max_per_system": 8,
    "types": (
        "terrestrial",
        "gas_giant",
        "ice",
        "desert",
        "volcanic",
        "oceanic",
        "barren",
    ),
    "min_size": 0.5,
    "max_size": 2.5,
    "orbit_radius_base_min": 5.0,
    "orbit_radius_random_factor": 5.0,
    "min_orbit_speed": 0.001,
    "max_orbit_speed": 0.006,
    "max_inclination": 0.1,
    "max_axial_tilt": 0.5,
    "min_rotation_speed": 0.005,
    "max_rotation_speed": 0.05,
}

NEBULAE = {
    "count": 144,
    "num_textures": 9,
    "plane_thickness_factor": 0.05,
    "radial_power": 2.0,
    "max_radial_factor": 0.9,
    "y_deviation_chance": 0.1,
    "y_deviation_multiplier_min": 1.0,
    "y_deviation_multiplier_random": 1.0,
    "base_scale_min_factor": 0.04,
    "base_scale_random_factor": 0.08,
    "aspect_variation_base": 0.7,
    "aspect_variation_random": 0.6,
    "max_tilt": math.pi * 0.1,
    "opacity_base": 0.15,
    "opacity_random": 0.20,
    "max_spin_speed": 0.0015,
}

LOD = {
    "mid_factor": 0.6,                # Fractions of galaxy radius
    "near_factor": 0.4,
    "very_near_factor": 0.2,
    "throttle_frames": 10,
    "star_sizes": (15, 12, 9, 6),     # Far, Mid, Near, Very Near
    "nebula_opacity": (1.0, 0.85, 0.65, 0.35),
    "labels": ("Far", "Mid", "Near", "Very Near"),
}

CAMERA_DYNAMICS = {
    "rotation_debounce": 0.2,         # Seconds without change before rotation ends
    "smoothing": 0.5,                 # EMA weight of the previous value
    "min_delta": 0.001,               # Floor on delta for angular speed
    "min_valid_delta": 1e-5,
    "frame_window": 30,
    "degraded_frame_time": 1.0 / 20.0,
}

OCTREE = {
    "capacity": 8,
    "min_bounds_size": 1e-5,
    "max_depth": 32,
}

CAMERA = {
    "initial_radius": 1800.0,
    "initial_theta": 45.0,            # Degrees
    "initial_phi": 30.0,
    "min_radius": 5.0,
    "max_radius": 6000.0,
    "min_phi": -89.0,
    "max_phi": 89.0,
    "zoom_smoothing": 8.0,
}
