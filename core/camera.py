"""Camera pose and a minimal orbit camera for driving the LOD loop."""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from config import galaxy as config


Quaternion = Tuple[float, float, float, float]   # (x, y, z, w)

IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)


def normalize_quaternion(q) -> Quaternion:
    x, y, z, w = (float(v) for v in q)
    length = math.sqrt(x * x + y * y + z * z + w * w)
    if length == 0.0:
        return IDENTITY_QUATERNION
    return (x / length, y / length, z / length, w / length)


def quaternion_angle(q1, q2) -> float:
    """Rotation angle in radians between two unit orientations."""
    dot = abs(sum(a * b for a, b in zip(q1, q2)))
    return 2.0 * math.acos(min(1.0, dot))


def quaternion_from_basis(right: np.ndarray, up: np.ndarray, back: np.ndarray) -> Quaternion:
    """Quaternion for the rotation whose matrix columns are right, up, back."""
    m00, m01, m02 = right[0], up[0], back[0]
    m10, m11, m12 = right[1], up[1], back[1]
    m20, m21, m22 = right[2], up[2], back[2]

    trace = m00 + m11 + m22
    if trace > 0:
        s = 0.5 / math.sqrt(trace + 1.0)
        q = ((m21 - m12) * s, (m02 - m20) * s, (m10 - m01) * s, 0.25 / s)
    elif m00 > m11 and m00 > m22:
        s = 2.0 * math.sqrt(1.0 + m00 - m11 - m22)
        q = (0.25 * s, (m01 + m10) / s, (m02 + m20) / s, (m21 - m12) / s)
    elif m11 > m22:
        s = 2.0 * math.sqrt(1.0 + m11 - m00 - m22)
        q = ((m01 + m10) / s, 0.25 * s, (m12 + m21) / s, (m02 - m20) / s)
    else:
        s = 2.0 * math.sqrt(1.0 + m22 - m00 - m11)
        q = ((m02 + m20) / s, (m12 + m21) / s, 0.25 * s, (m10 - m01) / s)
    return normalize_quaternion(q)


@dataclass(frozen=True)
class CameraPose:
    """World position and orientation handed to the per-frame update."""
    position: Tuple[float, float, float]
    quaternion: Quaternion = IDENTITY_QUATERNION


class OrbitCamera:
    """Orbital camera around the galactic centre with smooth zoom."""

    def __init__(self):
        cam = config.CAMERA
        self.radius = cam["initial_radius"]
        self.target_radius = self.radius
        self.theta = cam["initial_theta"]
        self.phi = cam["initial_phi"]
        self.target = np.array([0.0, 0.0, 0.0])
        self.zoom_smoothing = cam["zoom_smoothing"]

    def get_direction(self) -> np.ndarray:
        """Get the normalized direction vector from target to camera."""
        theta_rad = math.radians(self.theta)
        phi_rad = math.radians(self.phi)
        x = math.cos(phi_rad) * math.cos(theta_rad)
        y = math.sin(phi_rad)
        z = math.cos(phi_rad) * math.sin(theta_rad)
        return np.array([x, y, z])

    def get_camera_axes(self) -> tuple:
        """
        Get the camera's local coordinate axes (forward, right, up).
        Forward points from camera toward target.
        """
        forward = -self.get_direction()
        world_up = np.array([0.0, 1.0, 0.0])

        right = np.cross(forward, world_up)
        right_len = np.linalg.norm(right)
        if right_len < 0.001:
            right = np.array([1.0, 0.0, 0.0])
        else:
            right = right / right_len

        up = np.cross(right, forward)
        up = up / np.linalg.norm(up)
        return forward, right, up

    def get_position(self) -> np.ndarray:
        return self.target + self.radius * self.get_direction()

    def rotate(self, d_theta: float, d_phi: float):
        """Rotate the camera by the given angles in degrees."""
        cam = config.CAMERA
        self.theta = (self.theta + d_theta) % 360
        self.phi = max(cam["min_phi"], min(cam["max_phi"], self.phi + d_phi))

    def zoom_smooth(self, delta: float):
        cam = config.CAMERA
        self.target_radius = max(
            cam["min_radius"],
            min(cam["max_radius"], self.target_radius + delta)
        )

    def update(self, dt: float):
        """Ease the radius toward its target (called each frame)."""
        cam = config.CAMERA
        self.radius += (self.target_radius - self.radius) * min(1.0, self.zoom_smoothing * dt)
        self.radius = max(cam["min_radius"], min(cam["max_radius"], self.radius))

    def pose(self) -> CameraPose:
        forward, right, up = self.get_camera_axes()
        position = self.get_position()
        return CameraPose(
            position=(float(position[0]), float(position[1]), float(position[2])),
            quaternion=quaternion_from_basis(right, up, -forward),
        )
