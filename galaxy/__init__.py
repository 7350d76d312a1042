"""Procedural spiral galaxy generation."""

from .config import GalaxyConfig
from .records import StarRecord, PlanetRecord, NebulaRecord, StructureType
from .composer import GalaxyComposer, GalaxyData, generate_galaxy
from .nebulae import generate_nebulae

__all__ = [
    "GalaxyConfig",
    "StarRecord",
    "PlanetRecord",
    "NebulaRecord",
    "StructureType",
    "GalaxyComposer",
    "GalaxyData",
    "generate_galaxy",
    "generate_nebulae",
]
