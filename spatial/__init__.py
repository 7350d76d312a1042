"""Spatial indexing over generated star positions."""

from .octree import PointOctree

__all__ = ["PointOctree"]
