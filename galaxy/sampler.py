"""Rejection sampling with a minimum separation between stars."""

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numba import njit


@njit(cache=True)
def is_clear_of_neighbors(
    positions: np.ndarray,
    count: int,
    x: float, y: float, z: float,
    min_dist_sq: float,
) -> bool:
    """True if no placed position is closer than sqrt(min_dist_sq)."""
    for k in range(count):
        dx = x - positions[k, 0]
        dy = y - positions[k, 1]
        dz = z - positions[k, 2]
        if dx * dx + dy * dy + dz * dz < min_dist_sq:
            return False
    return True


@dataclass
class Placement:
    candidate: Any
    attempts: int
    forced: bool


class RandomPlacementSampler:
    """
    Propose-and-reject placement shared by every structure generator.

    Each attempt draws a candidate from a structure-specific proposal
    function and scans every star placed so far. After ``max_attempts``
    rejections the last candidate is accepted anyway, so generation always
    terminates at the cost of an occasional close pair.
    """

    def __init__(self, min_distance_squared: float, max_attempts: int):
        self.min_distance_squared = float(min_distance_squared)
        self.max_attempts = max(1, int(max_attempts))
        self.forced_count = 0
        self.placed_count = 0

    def place(self, propose: Callable[[], Any], accumulator) -> Placement:
        """
        Draw candidates until one clears the minimum distance.

        Args:
            propose: Returns a candidate exposing ``position`` as (x, y, z)
            accumulator: StarAccumulator holding the already placed stars

        Returns:
            Placement with the accepted candidate and whether it was forced
        """
        placed = accumulator.placed_positions()
        count = len(placed)

        candidate = None
        for attempt in range(1, self.max_attempts + 1):
            candidate = propose()
            x, y, z = candidate.position
            if count == 0 or is_clear_of_neighbors(
                placed, count, x, y, z, self.min_distance_squared
            ):
                self.placed_count += 1
                return Placement(candidate, attempt, False)

        self.placed_count += 1
        self.forced_count += 1
        return Placement(candidate, self.max_attempts, True)
