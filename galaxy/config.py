"""Galaxy generation parameters."""

import dataclasses
import math
from dataclasses import dataclass
from typing import Optional

from config import galaxy as config
from .colors import parse_hex_color


_GALAXY = config.GALAXY
_FRACTIONS = config.STRUCTURES
_MAIN = config.MAIN_GALAXY
_HALO = config.HALO
_OUTER = config.OUTER_DISK
_CLUSTERS = config.GLOBULAR_CLUSTERS
_PLACEMENT = config.PLACEMENT


@dataclass
class GalaxyConfig:
    """
    All tunable parameters for one generated galaxy.

    Defaults come from ``config/galaxy.py``. Distances share the unit of
    ``galaxy_radius``; factors are fractions of it.
    """
    num_stars: int = _GALAXY["num_stars"]
    galaxy_radius: float = _GALAXY["galaxy_radius"]

    # Population fractions
    main_fraction: float = _FRACTIONS["main_fraction"]
    outer_disk_fraction: float = _FRACTIONS["outer_disk_fraction"]
    halo_fraction: float = _FRACTIONS["halo_fraction"]
    globular_cluster_fraction: float = _FRACTIONS["globular_cluster_fraction"]

    # Spiral arms
    num_arms: int = _MAIN["num_arms"]
    spiral_tightness: float = _MAIN["spiral_tightness"]
    spiral_angle_factor: float = _MAIN["spiral_angle_factor"]
    arm_width: float = _MAIN["arm_width"]
    arm_point_density_power: float = _MAIN["arm_point_density_power"]
    arm_radius_power: float = _MAIN["arm_radius_power"]
    disk_y_scale_for_arms: float = _MAIN["disk_y_scale_for_arms"]
    sub_arm_chance: float = _MAIN["sub_arm_chance"]
    sub_arm_scatter_factor: float = _MAIN["sub_arm_scatter_factor"]
    sub_arm_angle_offset_range: float = _MAIN["sub_arm_angle_offset_range"]

    # Bulge and bar
    bulge_size_factor: float = _MAIN["bulge_size_factor"]
    bulge_y_scale: float = _MAIN["bulge_y_scale"]
    bulge_density_power: float = _MAIN["bulge_density_power"]
    bar_length_factor: float = _MAIN["bar_length_factor"]
    bar_width_factor: float = _MAIN["bar_width_factor"]
    bar_y_scale: float = _MAIN["bar_y_scale"]

    # General disk
    disk_y_scale: float = _MAIN["disk_y_scale"]

    # Halo
    halo_min_radius_factor: float = _HALO["min_radius_factor"]
    halo_max_radius_factor: float = _HALO["max_radius_factor"]
    halo_y_scale: float = _HALO["y_scale"]
    halo_density_power: float = _HALO["density_power"]

    # Outer disk
    outer_disk_min_radius_factor: float = _OUTER["min_radius_factor"]
    outer_disk_max_radius_factor: float = _OUTER["max_radius_factor"]
    outer_disk_y_scale: float = _OUTER["y_scale"]

    # Globular clusters
    num_globular_clusters: int = _CLUSTERS["count"]
    globular_cluster_radius_min: float = _CLUSTERS["radius_min"]
    globular_cluster_radius_max: float = _CLUSTERS["radius_max"]
    globular_cluster_density_power: float = _CLUSTERS["density_power"]
    globular_cluster_position_radius_min_factor: float = _CLUSTERS["position_radius_min_factor"]
    globular_cluster_position_radius_max_factor: float = _CLUSTERS["position_radius_max_factor"]

    # Colours
    color_in_hex: str = _GALAXY["color_in_hex"]
    color_out_hex: str = _GALAXY["color_out_hex"]

    # Rejection sampling
    min_star_distance: float = _PLACEMENT["min_star_distance"]
    max_placement_attempts: int = _PLACEMENT["max_attempts"]

    with_planets: bool = _GALAXY["with_planets"]
    seed: Optional[int] = _GALAXY["seed"]

    @classmethod
    def from_overrides(cls, **overrides) -> "GalaxyConfig":
        """Build a validated config from defaults plus keyword overrides."""
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(overrides) - names)
        if unknown:
            raise ValueError(f"Unknown galaxy parameter(s): {', '.join(unknown)}")
        cfg = cls(**overrides)
        cfg.validate()
        return cfg

    @property
    def min_star_distance_squared(self) -> float:
        return self.min_star_distance * self.min_star_distance

    @property
    def bulge_radius(self) -> float:
        return self.galaxy_radius * self.bulge_size_factor

    @property
    def bar_length(self) -> float:
        return self.galaxy_radius * self.bar_length_factor

    @property
    def bar_width(self) -> float:
        return self.galaxy_radius * self.bar_width_factor

    def quotas(self) -> dict:
        """
        Integer star count per population.

        Outer disk, halo and clusters get ``floor(num_stars * fraction)``;
        the main galaxy absorbs everything else so the quotas sum to
        ``num_stars`` exactly.
        """
        n = self.num_stars
        outer = math.floor(n * self.outer_disk_fraction)
        halo = math.floor(n * self.halo_fraction)
        clusters = math.floor(n * self.globular_cluster_fraction)
        main = n - outer - halo - clusters
        return {
            "main": main,
            "outer_disk": outer,
            "halo": halo,
            "globular_cluster": clusters,
        }

    def validate(self):
        """Raise ValueError if the parameters cannot produce a galaxy."""
        if self.num_stars < 0:
            raise ValueError(f"num_stars must be >= 0, got {self.num_stars}")
        if self.galaxy_radius <= 0:
            raise ValueError(f"galaxy_radius must be > 0, got {self.galaxy_radius}")

        fractions = {
            "main_fraction": self.main_fraction,
            "outer_disk_fraction": self.outer_disk_fraction,
            "halo_fraction": self.halo_fraction,
            "globular_cluster_fraction": self.globular_cluster_fraction,
        }
        for name, value in fractions.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        n = self.num_stars
        committed = (math.floor(n * self.main_fraction)
                     + math.floor(n * self.outer_disk_fraction)
                     + math.floor(n * self.halo_fraction)
                     + math.floor(n * self.globular_cluster_fraction))
        if committed > n:
            raise ValueError(
                f"Structure fractions commit {committed} stars but num_stars is {n}"
            )

        if self.num_arms < 1:
            raise ValueError(f"num_arms must be >= 1, got {self.num_arms}")
        if self.num_globular_clusters < 0:
            raise ValueError(
                f"num_globular_clusters must be >= 0, got {self.num_globular_clusters}"
            )
        if self.bar_length >= self.galaxy_radius or self.bulge_radius >= self.galaxy_radius:
            raise ValueError("Bar length and bulge radius must be smaller than galaxy_radius")
        if self.halo_max_radius_factor < self.halo_min_radius_factor:
            raise ValueError("halo_max_radius_factor must be >= halo_min_radius_factor")
        if self.outer_disk_max_radius_factor < self.outer_disk_min_radius_factor:
            raise ValueError("outer_disk_max_radius_factor must be >= outer_disk_min_radius_factor")
        if self.globular_cluster_radius_max < self.globular_cluster_radius_min:
            raise ValueError("globular_cluster_radius_max must be >= globular_cluster_radius_min")
        if self.min_star_distance < 0:
            raise ValueError(f"min_star_distance must be >= 0, got {self.min_star_distance}")
        if self.max_placement_attempts < 1:
            raise ValueError(
                f"max_placement_attempts must be >= 1, got {self.max_placement_attempts}"
            )

        parse_hex_color(self.color_in_hex)
        parse_hex_color(self.color_out_hex)
