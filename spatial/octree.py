"""
Point octree for nearest-star queries.

Key properties:
- Flattened array-based tree (nodes are integer handles, no Python objects)
- Numba JIT build and query with explicit stacks instead of recursion
- Capacity-bounded leaves, subdivided into 8 octants about a "safe" centre
  that stays on the face of a zero-width box
- Nearest-point search visits children nearest-box-first and prunes any
  child whose box is no closer than the best point found so far
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit

from config import galaxy as config


# ============================================================================
# OCTREE - FLATTENED ARRAY IMPLEMENTATION
# ============================================================================

# Node structure (stored in flat arrays):
# - node_min, node_max: axis-aligned bounding box
# - node_children[8]: indices of child nodes (-1 for leaves)
# - node_head: first stored point (-1 if none); point_next chains the rest
# - node_count: number of points stored directly on the node
# - node_depth: 0 for the root
# - node_is_leaf: False once subdivided; internal nodes may still hold
#   fallback points that fit none of their children

NO_NODE = -1


@njit(cache=True)
def box_contains(node_min: np.ndarray, node_max: np.ndarray, node: int,
                 px: float, py: float, pz: float) -> bool:
    """Inclusive containment test."""
    return (node_min[node, 0] <= px <= node_max[node, 0]
            and node_min[node, 1] <= py <= node_max[node, 1]
            and node_min[node, 2] <= pz <= node_max[node, 2])


@njit(cache=True)
def box_distance_sq(node_min: np.ndarray, node_max: np.ndarray, node: int,
                    px: float, py: float, pz: float) -> float:
    """Squared distance from a point to a node's box (0 inside)."""
    d = 0.0
    for axis in range(3):
        if axis == 0:
            v = px
        elif axis == 1:
            v = py
        else:
            v = pz
        lo = node_min[node, axis]
        hi = node_max[node, axis]
        if v < lo:
            d += (lo - v) * (lo - v)
        elif v > hi:
            d += (v - hi) * (v - hi)
    return d


@njit(cache=True)
def _subdivide(
    node: int,
    num_nodes: int,
    points: np.ndarray,
    point_next: np.ndarray,
    node_min: np.ndarray,
    node_max: np.ndarray,
    node_children: np.ndarray,
    node_head: np.ndarray,
    node_count: np.ndarray,
    node_depth: np.ndarray,
    node_is_leaf: np.ndarray,
) -> int:
    """
    Split a leaf into 8 octants and move its points down.
    Returns the new node count.
    """
    # Safe centre: a zero-width axis keeps its coordinate instead of a midpoint
    center = np.empty(3)
    for axis in range(3):
        lo = node_min[node, axis]
        hi = node_max[node, axis]
        center[axis] = lo if lo == hi else (lo + hi) * 0.5

    for octant in range(8):
        child = num_nodes
        num_nodes += 1
        node_children[node, octant] = child
        for axis in range(3):
            if (octant >> axis) & 1:
                node_min[child, axis] = center[axis]
                node_max[child, axis] = node_max[node, axis]
            else:
                node_min[child, axis] = node_min[node, axis]
                node_max[child, axis] = center[axis]
        for c in range(8):
            node_children[child, c] = NO_NODE
        node_head[child] = NO_NODE
        node_count[child] = 0
        node_depth[child] = node_depth[node] + 1
        node_is_leaf[child] = True

    node_is_leaf[node] = False

    # Redistribute; anything no child accepts stays here as a fallback
    current = node_head[node]
    kept_head = NO_NODE
    kept_count = 0
    while current != NO_NODE:
        following = point_next[current]
        px, py, pz = points[current, 0], points[current, 1], points[current, 2]
        target = NO_NODE
        for octant in range(8):
            child = node_children[node, octant]
            if box_contains(node_min, node_max, child, px, py, pz):
                target = child
                break
        if target != NO_NODE:
            point_next[current] = node_head[target]
            node_head[target] = current
            node_count[target] += 1
        else:
            point_next[current] = kept_head
            kept_head = current
            kept_count += 1
        current = following

    node_head[node] = kept_head
    node_count[node] = kept_count
    return num_nodes


@njit(cache=True)
def build_octree(
    points: np.ndarray,
    start: int,
    num_points: int,
    num_nodes: int,
    capacity: int,
    max_depth: int,
    # Output arrays (pre-allocated)
    point_next: np.ndarray,        # (num_points,)
    point_inserted: np.ndarray,    # (num_points,)
    node_min: np.ndarray,          # (max_nodes, 3)
    node_max: np.ndarray,          # (max_nodes, 3)
    node_children: np.ndarray,     # (max_nodes, 8)
    node_head: np.ndarray,         # (max_nodes,)
    node_count: np.ndarray,        # (max_nodes,)
    node_depth: np.ndarray,        # (max_nodes,)
    node_is_leaf: np.ndarray,      # (max_nodes,)
) -> Tuple[int, int]:
    """
    Insert points[start:num_points] one at a time.

    Stops early when the node arrays could not absorb a worst-case insert
    (one subdivision per level). Returns (next point to insert, node count);
    the caller grows the arrays and resumes.
    """
    max_nodes = node_min.shape[0]
    worst_case = 8 * (max_depth + 1)

    i = start
    while i < num_points:
        if num_nodes + worst_case > max_nodes:
            return i, num_nodes

        px, py, pz = points[i, 0], points[i, 1], points[i, 2]
        if not box_contains(node_min, node_max, 0, px, py, pz):
            point_inserted[i] = False
            i += 1
            continue

        current = 0
        while True:
            if node_is_leaf[current]:
                if node_count[current] < capacity or node_depth[current] >= max_depth:
                    point_next[i] = node_head[current]
                    node_head[current] = i
                    node_count[current] += 1
                    break
                num_nodes = _subdivide(
                    current, num_nodes, points, point_next,
                    node_min, node_max, node_children, node_head,
                    node_count, node_depth, node_is_leaf,
                )

            target = NO_NODE
            for octant in range(8):
                child = node_children[current, octant]
                if box_contains(node_min, node_max, child, px, py, pz):
                    target = child
                    break

            if target == NO_NODE:
                # Fallback: keep it on the internal node
                point_next[i] = node_head[current]
                node_head[current] = i
                node_count[current] += 1
                break
            current = target

        point_inserted[i] = True
        i += 1

    return i, num_nodes


@njit(cache=True)
def find_closest(
    points: np.ndarray,
    point_next: np.ndarray,
    node_min: np.ndarray,
    node_max: np.ndarray,
    node_children: np.ndarray,
    node_head: np.ndarray,
    node_is_leaf: np.ndarray,
    max_depth: int,
    tx: float, ty: float, tz: float,
) -> Tuple[int, float]:
    """
    Depth-first nearest-point search.

    Each node checks its own points first (leaves and internal fallbacks),
    then pushes its children so the nearest box is popped next. Children
    whose box is not closer than the current best are skipped.
    Returns (point index or -1, squared distance).
    """
    best = -1
    best_d2 = np.inf

    stack_size = 8 * (max_depth + 2) + 8
    stack_nodes = np.empty(stack_size, dtype=np.int32)
    stack_dist = np.empty(stack_size, dtype=np.float64)
    stack_nodes[0] = 0
    stack_dist[0] = box_distance_sq(node_min, node_max, 0, tx, ty, tz)
    stack_ptr = 1

    child_ids = np.empty(8, dtype=np.int32)
    child_dist = np.empty(8, dtype=np.float64)

    while stack_ptr > 0:
        stack_ptr -= 1
        node = stack_nodes[stack_ptr]
        if node != 0 and stack_dist[stack_ptr] >= best_d2:
            continue

        current = node_head[node]
        while current != NO_NODE:
            dx = points[current, 0] - tx
            dy = points[current, 1] - ty
            dz = points[current, 2] - tz
            d2 = dx * dx + dy * dy + dz * dz
            if d2 < best_d2:
                best_d2 = d2
                best = current
            current = point_next[current]

        if node_is_leaf[node]:
            continue

        # Insertion sort of the 8 children by box distance
        n = 0
        for octant in range(8):
            child = node_children[node, octant]
            d2 = box_distance_sq(node_min, node_max, child, tx, ty, tz)
            j = n
            while j > 0 and child_dist[j - 1] > d2:
                child_dist[j] = child_dist[j - 1]
                child_ids[j] = child_ids[j - 1]
                j -= 1
            child_dist[j] = d2
            child_ids[j] = child
            n += 1

        # Push farthest first so the nearest child is visited next
        for k in range(n - 1, -1, -1):
            if child_dist[k] < best_d2 and stack_ptr < stack_size:
                stack_nodes[stack_ptr] = child_ids[k]
                stack_dist[stack_ptr] = child_dist[k]
                stack_ptr += 1

    return best, best_d2


# ============================================================================
# POINT OCTREE CLASS
# ============================================================================

class PointOctree:
    """
    Read-only spatial index over a fixed point set.

    Built once per generated galaxy. Points outside the supplied bounds are
    not indexed.
    """

    def __init__(
        self,
        points,
        bounds: Optional[Tuple[Sequence[float], Sequence[float]]] = None,
        capacity: Optional[int] = None,
    ):
        octree_cfg = config.OCTREE
        self.capacity = int(capacity if capacity is not None else octree_cfg["capacity"])
        self.max_depth = int(octree_cfg["max_depth"])
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")

        pts = np.asarray(points, dtype=np.float64)
        if pts.size == 0:
            pts = np.zeros((0, 3), dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"points must have shape (N, 3), got {pts.shape}")
        self.points = np.ascontiguousarray(pts)
        num_points = len(self.points)

        box_min, box_max = self._resolve_bounds(bounds, octree_cfg["min_bounds_size"])

        # Headroom for one worst-case insert on top of the size estimate
        max_nodes = 8 * (self.max_depth + 1) + (num_points // self.capacity + 1) * 16
        self._node_min = np.zeros((max_nodes, 3), dtype=np.float64)
        self._node_max = np.zeros((max_nodes, 3), dtype=np.float64)
        self._node_children = np.full((max_nodes, 8), NO_NODE, dtype=np.int32)
        self._node_head = np.full(max_nodes, NO_NODE, dtype=np.int32)
        self._node_count = np.zeros(max_nodes, dtype=np.int32)
        self._node_depth = np.zeros(max_nodes, dtype=np.int32)
        self._node_is_leaf = np.ones(max_nodes, dtype=np.bool_)
        self._point_next = np.full(num_points, NO_NODE, dtype=np.int32)
        self._point_inserted = np.zeros(num_points, dtype=np.bool_)

        self._node_min[0] = box_min
        self._node_max[0] = box_max
        self._num_nodes = 1

        next_point = 0
        while True:
            next_point, self._num_nodes = build_octree(
                self.points,
                next_point,
                num_points,
                self._num_nodes,
                self.capacity,
                self.max_depth,
                self._point_next,
                self._point_inserted,
                self._node_min,
                self._node_max,
                self._node_children,
                self._node_head,
                self._node_count,
                self._node_depth,
                self._node_is_leaf,
            )
            if next_point >= num_points:
                break
            self._grow()

        self._size = int(self._point_inserted.sum())
        skipped = num_points - self._size
        print(f"[Octree] Indexed {self._size:,} points in {self._num_nodes:,} nodes"
              + (f" ({skipped:,} outside bounds)" if skipped else ""))

    def _resolve_bounds(self, bounds, min_size: float):
        if bounds is not None:
            box_min = np.asarray(bounds[0], dtype=np.float64).copy()
            box_max = np.asarray(bounds[1], dtype=np.float64).copy()
        elif len(self.points) > 0:
            box_min = self.points.min(axis=0)
            box_max = self.points.max(axis=0)
        else:
            box_min = np.full(3, -1.0)
            box_max = np.full(3, 1.0)

        # Give flat dimensions some volume so subdivision stays well defined
        center = (box_min + box_max) * 0.5
        for axis in range(3):
            if box_max[axis] - box_min[axis] < min_size:
                box_min[axis] = center[axis] - min_size / 2
                box_max[axis] = center[axis] + min_size / 2
        return box_min, box_max

    def _grow(self):
        old = len(self._node_min)
        self._node_min = np.concatenate([self._node_min, np.zeros((old, 3))])
        self._node_max = np.concatenate([self._node_max, np.zeros((old, 3))])
        self._node_children = np.concatenate(
            [self._node_children, np.full((old, 8), NO_NODE, dtype=np.int32)])
        self._node_head = np.concatenate(
            [self._node_head, np.full(old, NO_NODE, dtype=np.int32)])
        self._node_count = np.concatenate([self._node_count, np.zeros(old, dtype=np.int32)])
        self._node_depth = np.concatenate([self._node_depth, np.zeros(old, dtype=np.int32)])
        self._node_is_leaf = np.concatenate([self._node_is_leaf, np.ones(old, dtype=np.bool_)])
        print(f"[Octree] Grew node arena to {len(self._node_min):,} nodes")

    def __len__(self) -> int:
        return self._size

    @property
    def num_nodes(self) -> int:
        return self._num_nodes

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._node_min[0].copy(), self._node_max[0].copy()

    def find_closest_index(self, target) -> int:
        """Index into ``points`` of the nearest indexed point, or -1 if empty."""
        if self._size == 0:
            return -1
        tx, ty, tz = (float(v) for v in target)
        index, _ = find_closest(
            self.points,
            self._point_next,
            self._node_min,
            self._node_max,
            self._node_children,
            self._node_head,
            self._node_is_leaf,
            self.max_depth,
            tx, ty, tz,
        )
        return int(index)

    def find_closest_point(self, target) -> Optional[np.ndarray]:
        """Nearest indexed point to target, or None if the index is empty."""
        index = self.find_closest_index(target)
        if index < 0:
            return None
        return self.points[index].copy()

    def distance_to_closest(self, target) -> Optional[float]:
        """Euclidean distance to the nearest indexed point, or None if empty."""
        point = self.find_closest_point(target)
        if point is None:
            return None
        return math.sqrt(float(np.sum((point - np.asarray(target, dtype=np.float64)) ** 2)))
