"""Nebula placement in the galactic plane."""

import math
from typing import List, Optional

import numpy as np

from config import galaxy as config
from .records import NebulaRecord


def generate_nebulae(galaxy_radius: float,
                     rng: Optional[np.random.Generator] = None,
                     params: Optional[dict] = None) -> List[NebulaRecord]:
    """
    Scatter nebula billboards through the disk.

    Radial placement uses ``u ** radial_power`` so nebulae crowd the inner
    galaxy; a small fraction gets extra height off the plane.
    """
    p = dict(config.NEBULAE)
    if params:
        p.update(params)
    rng = rng if rng is not None else np.random.default_rng()
    thickness = galaxy_radius * p["plane_thickness_factor"]

    nebulae = []
    for i in range(p["count"]):
        r = galaxy_radius * rng.random() ** p["radial_power"] * p["max_radial_factor"]
        theta = rng.random() * 2.0 * math.pi

        y = (rng.random() - 0.5) * 2.0 * thickness
        if rng.random() < p["y_deviation_chance"]:
            y *= p["y_deviation_multiplier_min"] + rng.random() * p["y_deviation_multiplier_random"]

        base_scale = galaxy_radius * (p["base_scale_min_factor"]
                                      + rng.random() * p["base_scale_random_factor"])
        scale = (
            base_scale * (p["aspect_variation_base"] + rng.random() * p["aspect_variation_random"]),
            base_scale * (p["aspect_variation_base"] + rng.random() * p["aspect_variation_random"]),
            1.0,
        )
        rotation = (
            (rng.random() * 2.0 - 1.0) * p["max_tilt"],
            rng.random() * 2.0 * math.pi,
            (rng.random() * 2.0 - 1.0) * p["max_tilt"],
        )

        nebulae.append(NebulaRecord(
            id=f"nebula-{i}",
            position=(r * math.cos(theta), y, r * math.sin(theta)),
            scale=scale,
            rotation=rotation,
            opacity=p["opacity_base"] + rng.random() * p["opacity_random"],
            spin_speed=(rng.random() - 0.5) * 2.0 * p["max_spin_speed"],
            texture_index=i % p["num_textures"],
        ))
    return nebulae
