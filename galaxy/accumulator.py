"""Growing star collection shared by the structure generators."""

from typing import List

import numpy as np

from .records import StarRecord


class StarAccumulator:
    """
    Collects generated stars in insertion order.

    Positions are mirrored into a contiguous float64 buffer so the placement
    sampler can scan them without touching the record objects. Colours and
    sizes are kept alongside for the flat render arrays.
    """

    def __init__(self, expected: int = 0):
        capacity = max(16, int(expected))
        self._stars: List[StarRecord] = []
        self._positions = np.zeros((capacity, 3), dtype=np.float64)
        self._colors = np.zeros((capacity, 3), dtype=np.float32)
        self._sizes = np.zeros(capacity, dtype=np.float32)

    def __len__(self) -> int:
        return len(self._stars)

    def count(self) -> int:
        return len(self._stars)

    def next_id(self) -> str:
        """Id the next appended star should carry."""
        return f"star-{len(self._stars)}"

    def append(self, star: StarRecord):
        i = len(self._stars)
        if i >= len(self._positions):
            self._grow()
        self._stars.append(star)
        self._positions[i] = star.position
        self._colors[i] = star.color
        self._sizes[i] = star.size

    def _grow(self):
        new_capacity = len(self._positions) * 2
        positions = np.zeros((new_capacity, 3), dtype=np.float64)
        colors = np.zeros((new_capacity, 3), dtype=np.float32)
        sizes = np.zeros(new_capacity, dtype=np.float32)
        n = len(self._stars)
        positions[:n] = self._positions[:n]
        colors[:n] = self._colors[:n]
        sizes[:n] = self._sizes[:n]
        self._positions = positions
        self._colors = colors
        self._sizes = sizes

    @property
    def stars(self) -> List[StarRecord]:
        return self._stars

    def placed_positions(self) -> np.ndarray:
        """View of the positions placed so far, shape (count, 3)."""
        return self._positions[:len(self._stars)]

    def positions(self) -> np.ndarray:
        return self._positions[:len(self._stars)].astype(np.float32)

    def colors(self) -> np.ndarray:
        return self._colors[:len(self._stars)].copy()

    def sizes(self) -> np.ndarray:
        return self._sizes[:len(self._stars)].copy()
