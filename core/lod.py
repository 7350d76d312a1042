"""
Distance-driven level of detail.

Levels: 0 = Far, 1 = Mid, 2 = Near, 3 = Very Near. In automatic mode the
level comes from the camera's distance to the nearest star, checked only
every few frames; manual mode pins it to whatever the caller set.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from config import galaxy as config


LEVEL_FAR = 0
LEVEL_MID = 1
LEVEL_NEAR = 2
LEVEL_VERY_NEAR = 3


@dataclass
class LODState:
    level: int = LEVEL_FAR
    manual: bool = False
    manual_level: int = LEVEL_FAR
    frame_index: int = 0
    last_recompute_frame: int = -1


@dataclass(frozen=True)
class LODUpdate:
    """
    Result of one LOD tick.

    ``level`` is the raw level (a manual level may lie outside 0-3);
    ``checked_level`` is clamped into the lookup tables and is what the
    renderer should index with.
    """
    level: int
    checked_level: int
    changed: bool
    star_size: float
    nebula_opacity_factor: float


class LODController:
    """Throttled nearest-star LOD selection with a manual override."""

    def __init__(
        self,
        galaxy_radius: float,
        index=None,
        mid_factor: Optional[float] = None,
        near_factor: Optional[float] = None,
        very_near_factor: Optional[float] = None,
        throttle_frames: Optional[int] = None,
        size_table: Optional[Sequence[float]] = None,
        opacity_table: Optional[Sequence[float]] = None,
    ):
        lod = config.LOD
        self.galaxy_radius = float(galaxy_radius)
        self.mid_factor = float(mid_factor if mid_factor is not None else lod["mid_factor"])
        self.near_factor = float(near_factor if near_factor is not None else lod["near_factor"])
        self.very_near_factor = float(
            very_near_factor if very_near_factor is not None else lod["very_near_factor"])
        self.throttle_frames = int(
            throttle_frames if throttle_frames is not None else lod["throttle_frames"])
        self.size_table = tuple(size_table if size_table is not None else lod["star_sizes"])
        self.opacity_table = tuple(
            opacity_table if opacity_table is not None else lod["nebula_opacity"])
        self._validate()

        self.index = index
        self.state = LODState()
        self._reported_level: Optional[int] = None
        self._force_recompute = False

    def _validate(self):
        if self.galaxy_radius <= 0:
            raise ValueError(f"galaxy_radius must be positive, got {self.galaxy_radius}")
        if not 0 < self.very_near_factor < self.near_factor < self.mid_factor:
            raise ValueError(
                "LOD thresholds must be nested 0 < very_near < near < mid, got "
                f"{self.very_near_factor}, {self.near_factor}, {self.mid_factor}"
            )
        if self.throttle_frames < 1:
            raise ValueError(f"throttle_frames must be >= 1, got {self.throttle_frames}")
        if not self.size_table or not self.opacity_table:
            raise ValueError("size and opacity tables must not be empty")

    @property
    def thresholds(self):
        """(very_near, near, mid) distances in world units."""
        r = self.galaxy_radius
        return (self.very_near_factor * r, self.near_factor * r, self.mid_factor * r)

    def level_for_distance(self, distance: float) -> int:
        very_near, near, mid = self.thresholds
        if distance < very_near:
            return LEVEL_VERY_NEAR
        if distance < near:
            return LEVEL_NEAR
        if distance < mid:
            return LEVEL_MID
        return LEVEL_FAR

    def bind_index(self, index, galaxy_radius: Optional[float] = None):
        """Swap in the index for a newly generated galaxy."""
        self.index = index
        if galaxy_radius is not None:
            self.galaxy_radius = float(galaxy_radius)
            self._validate()
        self._force_recompute = True

    def distance_to_nearest(self, camera_position) -> float:
        x, y, z = (float(v) for v in camera_position)
        distance = self.index.distance_to_closest((x, y, z)) if self.index is not None else None
        if distance is None:
            return math.sqrt(x * x + y * y + z * z)
        return distance

    def checked(self, level: int) -> int:
        return max(0, min(len(self.size_table) - 1, int(level)))

    def _result(self) -> LODUpdate:
        level = self.state.level
        changed = self._reported_level is None or level != self._reported_level
        self._reported_level = level
        checked = self.checked(level)
        opacity_index = max(0, min(len(self.opacity_table) - 1, checked))
        return LODUpdate(
            level=level,
            checked_level=checked,
            changed=changed,
            star_size=self.size_table[checked],
            nebula_opacity_factor=self.opacity_table[opacity_index],
        )

    def set_manual(self, enabled: bool, level: Optional[int] = None) -> LODUpdate:
        """
        Turn the manual override on or off.

        Enabling (or changing the manual level) applies immediately. Turning
        it off hands control back to automatic mode on the next update.
        """
        state = self.state
        state.manual = bool(enabled)
        if level is not None:
            state.manual_level = int(level)
        if state.manual:
            state.level = state.manual_level
            label = self._label(state.level)
            print(f"[LOD] Manual override: level {state.level} ({label})")
        else:
            self._force_recompute = True
            print("[LOD] Automatic mode")
        return self._result()

    def update(self, camera_position) -> LODUpdate:
        """Advance one frame; recompute on the first tick and every throttle_frames after."""
        state = self.state
        frame = state.frame_index
        state.frame_index += 1

        if state.manual:
            state.level = state.manual_level
        elif self._force_recompute or frame % self.throttle_frames == 0:
            self._force_recompute = False
            state.last_recompute_frame = frame
            distance = self.distance_to_nearest(camera_position)
            level = self.level_for_distance(distance)
            state.level = level

        return self._result()

    @staticmethod
    def _label(level: int) -> str:
        labels = config.LOD["labels"]
        return labels[level] if 0 <= level < len(labels) else "custom"
