"""Star, planet and nebula records produced by galaxy generation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class StructureType(Enum):
    """Galactic structure a star was generated for."""
    BAR = "bar"
    BULGE = "bulge"
    ARM = "arm"
    DISK = "disk_general"
    OUTER_DISK = "outer_disk"
    HALO = "halo"
    GLOBULAR_CLUSTER = "globular_cluster"

    @property
    def is_main_galaxy(self) -> bool:
        return self in MAIN_GALAXY_STRUCTURES


MAIN_GALAXY_STRUCTURES = frozenset({
    StructureType.BAR,
    StructureType.BULGE,
    StructureType.ARM,
    StructureType.DISK,
})


@dataclass(frozen=True)
class PlanetRecord:
    """
    A planet orbiting a generated star.

    Attributes:
        id: "<star id>-p<index>"
        name: Display name ("Planet A", "Planet B", ...)
        type: One of the planet categories in config.PLANETS["types"]
        size: Size relative to its star
        orbit_radius: Distance from the star
        orbit_speed: Angular speed along the orbit (rad/frame)
        orbit_inclination: Tilt of the orbital plane (rad)
        axial_tilt: Tilt of the rotation axis (rad)
        rotation_speed: Spin about its own axis (rad/frame)
        color: Fallback colour as 6-digit hex without '#'
    """
    id: str
    name: str
    type: str
    size: float
    orbit_radius: float
    orbit_speed: float
    orbit_inclination: Optional[float] = None
    axial_tilt: Optional[float] = None
    rotation_speed: Optional[float] = None
    color: str = "ffffff"


@dataclass(frozen=True)
class StarRecord:
    """
    A single star in the generated galaxy. Immutable once generated.

    Attributes:
        id: "star-N", N being the global insertion index
        name: Generated display name
        position: (x, y, z); y is the galactic pole axis
        color: RGB tuple (0-1 range)
        size: Relative point size
        texture_index: Common textures first, rare ones after them
        structure: Structure the star belongs to
        planets: Planets owned by this star (empty outside the main galaxy)
    """
    id: str
    name: str
    position: Tuple[float, float, float]
    color: Tuple[float, float, float]
    size: float
    texture_index: int
    structure: StructureType
    planets: Tuple[PlanetRecord, ...] = field(default_factory=tuple)

    @property
    def radius_xz(self) -> float:
        x, _, z = self.position
        return (x * x + z * z) ** 0.5


@dataclass(frozen=True)
class NebulaRecord:
    """A textured nebula billboard placed in the galactic plane."""
    id: str
    position: Tuple[float, float, float]
    scale: Tuple[float, float, float]
    rotation: Tuple[float, float, float]
    opacity: float
    spin_speed: float
    texture_index: int
