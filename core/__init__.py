"""Core application components."""

from .camera import CameraPose, OrbitCamera, quaternion_angle
from .lod import LODController, LODState, LODUpdate
from .dynamics import CameraDynamicsMonitor, CameraDynamicsState, CameraDynamicsUpdate, FrameClock
from .application import FrameUpdate, GalaxyApplication

__all__ = [
    "CameraPose",
    "OrbitCamera",
    "quaternion_angle",
    "LODController",
    "LODState",
    "LODUpdate",
    "CameraDynamicsMonitor",
    "CameraDynamicsState",
    "CameraDynamicsUpdate",
    "FrameClock",
    "FrameUpdate",
    "GalaxyApplication",
]
