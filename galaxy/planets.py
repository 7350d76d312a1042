"""Planet sub-generator for main-galaxy stars."""

from typing import Tuple

import numpy as np

from config import galaxy as config
from .records import PlanetRecord


def generate_planets(star_id: str, rng: np.random.Generator) -> Tuple[PlanetRecord, ...]:
    """
    Generate the planetary system of one star.

    Orbit radii grow with the planet index so inner planets stay inside
    outer ones: orbit_k = (k + 1) * U(base, base + random_factor).
    """
    cfg = config.PLANETS
    count = int(rng.integers(cfg["min_per_system"], cfg["max_per_system"] + 1))
    types = cfg["types"]

    planets = []
    for i in range(count):
        planets.append(PlanetRecord(
            id=f"{star_id}-p{i}",
            name=f"Planet {chr(65 + i)}",
            type=types[int(rng.integers(len(types)))],
            size=float(rng.uniform(cfg["min_size"], cfg["max_size"])),
            orbit_radius=(i + 1) * float(
                rng.random() * cfg["orbit_radius_random_factor"] + cfg["orbit_radius_base_min"]
            ),
            orbit_speed=float(rng.uniform(cfg["min_orbit_speed"], cfg["max_orbit_speed"])),
            orbit_inclination=float(rng.uniform(-cfg["max_inclination"], cfg["max_inclination"])),
            axial_tilt=float(rng.uniform(0.0, cfg["max_axial_tilt"])),
            rotation_speed=float(rng.uniform(cfg["min_rotation_speed"], cfg["max_rotation_speed"])),
            color=f"{int(rng.integers(0x1000000)):06x}",
        ))
    return tuple(planets)
