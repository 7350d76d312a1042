"""Host-facing application that ties generation, indexing and LOD together."""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from galaxy import GalaxyComposer, GalaxyConfig, GalaxyData, StarRecord, generate_nebulae
from spatial import PointOctree
from .camera import CameraPose, OrbitCamera
from .dynamics import CameraDynamicsMonitor, CameraDynamicsUpdate, FrameClock
from .lod import LODController, LODUpdate


@dataclass(frozen=True)
class FrameUpdate:
    lod: LODUpdate
    dynamics: CameraDynamicsUpdate


class GalaxyApplication:
    """
    Owns the current galaxy snapshot and the per-frame controllers.

    The host loop calls ``update(dt, pose)`` once per tick and feeds the
    returned LOD level and optimized-mode flag to its renderer.
    """

    def __init__(self, config: Optional[GalaxyConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 requested_optimized_mode: bool = False,
                 clock=None):
        self.config = config if config is not None else GalaxyConfig()
        self._rng = rng
        self.galaxy: Optional[GalaxyData] = None
        self.nebulae = []
        self.index: Optional[PointOctree] = None

        self.lod = LODController(self.config.galaxy_radius)
        if clock is not None:
            self.dynamics = CameraDynamicsMonitor(requested_optimized_mode, clock=clock)
        else:
            self.dynamics = CameraDynamicsMonitor(requested_optimized_mode)

    def generate(self, config: Optional[GalaxyConfig] = None) -> GalaxyData:
        """Replace the current galaxy and rebuild its index."""
        if config is not None:
            self.config = config
        composer = GalaxyComposer(self.config, self._rng)
        self.galaxy = composer.compose()
        self.nebulae = generate_nebulae(self.config.galaxy_radius, composer.rng)
        self.index = PointOctree(self.galaxy.positions)
        self.lod.bind_index(self.index, self.config.galaxy_radius)
        return self.galaxy

    def update(self, dt: float, pose: CameraPose) -> FrameUpdate:
        return FrameUpdate(
            lod=self.lod.update(pose.position),
            dynamics=self.dynamics.update(dt, pose.quaternion),
        )

    def set_manual_lod(self, enabled: bool, level: Optional[int] = None) -> LODUpdate:
        return self.lod.set_manual(enabled, level)

    def request_optimized_mode(self, enabled: bool):
        self.dynamics.request_optimized_mode(enabled)

    def nearest_star(self, position) -> Optional[StarRecord]:
        """Star closest to position, or None before generation."""
        if self.index is None or self.galaxy is None:
            return None
        index = self.index.find_closest_index(position)
        if index < 0:
            return None
        return self.galaxy.stars[index]

    def run(self, num_frames: int, dt: float = 1.0 / 60.0,
            camera: Optional[OrbitCamera] = None,
            orbit_speed: float = 10.0, zoom_speed: float = 0.0) -> List[FrameUpdate]:
        """
        Drive a fixed number of frames with an orbiting camera.

        Args:
            num_frames: Ticks to run
            dt: Frame delta in seconds
            camera: Camera to move (a fresh OrbitCamera by default)
            orbit_speed: Degrees per second around the vertical axis
            zoom_speed: Radius change per second (negative flies inward)

        The dynamics monitor is switched to a FrameClock that advances by dt
        per frame, so rotation debounce follows simulated time.
        """
        if self.galaxy is None:
            self.generate()
        camera = camera if camera is not None else OrbitCamera()

        clock = self.dynamics.clock
        if not isinstance(clock, FrameClock):
            clock = FrameClock(clock())
            self.dynamics.clock = clock

        updates = []
        for _ in range(num_frames):
            clock.advance(dt)
            camera.rotate(orbit_speed * dt, 0.0)
            if zoom_speed:
                camera.zoom_smooth(zoom_speed * dt)
            camera.update(dt)
            updates.append(self.update(dt, camera.pose()))
        return updates
