"""
Camera motion and frame-time telemetry.

The monitor reports whether the camera is rotating, how fast, and whether
frame times have degraded during rotation. It never switches optimized mode
on its own: the mode always mirrors what the caller requested.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Optional

from config import galaxy as config
from .camera import Quaternion, normalize_quaternion, quaternion_angle


@dataclass
class CameraDynamicsState:
    smoothed_angular_speed: float = 0.0
    frame_times: Deque[float] = field(default_factory=deque)
    average_frame_time: float = 0.0
    is_rotating: bool = False
    is_degraded: bool = False
    requested_optimized_mode: bool = False
    optimized_mode: bool = False
    last_quaternion: Optional[Quaternion] = None
    last_rotation_time: Optional[float] = None


class FrameClock:
    """Simulated time that only moves when a frame loop advances it."""

    def __init__(self, start: float = 0.0):
        self.now = float(start)

    def advance(self, dt: float):
        self.now += dt

    def __call__(self) -> float:
        return self.now


@dataclass(frozen=True)
class CameraDynamicsUpdate:
    is_rotating: bool
    angular_speed: float          # Smoothed, radians per second
    raw_angular_speed: float
    average_frame_time: float
    is_degraded: bool
    optimized_mode: bool
    optimized_mode_changed: bool


class CameraDynamicsMonitor:
    """Per-frame rotation detection, angular speed EMA and frame-time window."""

    def __init__(self, requested_optimized_mode: bool = False,
                 clock: Callable[[], float] = time.monotonic):
        dyn = config.CAMERA_DYNAMICS
        self.debounce = dyn["rotation_debounce"]
        self.smoothing = dyn["smoothing"]
        self.min_delta = dyn["min_delta"]
        self.min_valid_delta = dyn["min_valid_delta"]
        self.window_size = dyn["frame_window"]
        self.degraded_frame_time = dyn["degraded_frame_time"]
        self.clock = clock

        self.state = CameraDynamicsState(frame_times=deque(maxlen=self.window_size))
        self.state.requested_optimized_mode = bool(requested_optimized_mode)
        self._mode_pending = True

    def request_optimized_mode(self, enabled: bool):
        """Record the caller's choice; it is applied on the next update."""
        self.state.requested_optimized_mode = bool(enabled)
        self._mode_pending = True

    def _track_rotation(self, quaternion: Quaternion, now: float):
        state = self.state
        if state.last_quaternion is not None and quaternion != state.last_quaternion:
            state.is_rotating = True
            state.last_rotation_time = now
        elif state.is_rotating and now - state.last_rotation_time >= self.debounce:
            state.is_rotating = False

    def _angular_speed(self, quaternion: Quaternion, delta: float) -> float:
        previous = self.state.last_quaternion
        if previous is None or delta <= self.min_valid_delta:
            return 0.0
        return quaternion_angle(previous, quaternion) / max(delta, self.min_delta)

    def _track_frame_time(self, delta: float):
        state = self.state
        window = state.frame_times
        if not state.is_rotating or delta <= 0:
            window.clear()
            state.average_frame_time = max(delta, 0.0)
            state.is_degraded = False
            return

        window.append(delta)
        full = len(window) == self.window_size
        state.average_frame_time = sum(window) / len(window) if full else delta
        state.is_degraded = full and state.average_frame_time > self.degraded_frame_time

    def update(self, delta: float, quaternion) -> CameraDynamicsUpdate:
        """Fold one frame into the telemetry."""
        state = self.state
        now = self.clock()
        q = normalize_quaternion(quaternion)

        self._track_rotation(q, now)
        raw = self._angular_speed(q, delta)
        state.smoothed_angular_speed = (
            state.smoothed_angular_speed * self.smoothing + raw * (1.0 - self.smoothing)
        )
        self._track_frame_time(delta)
        state.last_quaternion = q

        mode_changed = self._mode_pending
        self._mode_pending = False
        if mode_changed:
            state.optimized_mode = state.requested_optimized_mode
            print(f"[Dynamics] Optimized mode {'on' if state.optimized_mode else 'off'}")

        return CameraDynamicsUpdate(
            is_rotating=state.is_rotating,
            angular_speed=state.smoothed_angular_speed,
            raw_angular_speed=raw,
            average_frame_time=state.average_frame_time,
            is_degraded=state.is_degraded,
            optimized_mode=state.optimized_mode,
            optimized_mode_changed=mode_changed,
        )
