# ============================================================================
# STL Reader -- Mesh Builder interface (stlreader/core/mesh.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   The reader does not own any mesh data structure. It hands every merged
#   node and every non-degenerate triangle to a "mesh builder" the caller
#   supplies. Anything with these two methods works:
#
#     add_node(point) -> int        returns the new node's index
#     add_triangle(i, j, k)         three node indices
#
#   MeshCollector is the simple in-memory builder used by StlParser and
#   the tests: it keeps nodes and triangles in lists and turns them into
#   numpy arrays on demand.
# ============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import numpy as np

from .numeric_codec import Point3D


class MeshBuilder(Protocol):
    def add_node(self, point: Point3D) -> int: ...

    def add_triangle(self, i: int, j: int, k: int) -> None: ...


@dataclass
class BlockStats:
    """What one block parse delivered to the builder."""
    facets: int = 0              # facet records decoded
    triangles: int = 0           # forwarded to add_triangle
    degenerate: int = 0          # dropped: repeated node index
    nodes: int = 0               # forwarded to add_node
    facets_declared: Optional[int] = None   # binary header count
    ended_with_endsolid: bool = False


class MeshCollector:
    """Triangle soup with sequential 0-based node indices."""

    def __init__(self) -> None:
        self.nodes: List[Point3D] = []
        self.triangles: List[Tuple[int, int, int]] = []

    def add_node(self, point: Point3D) -> int:
        self.nodes.append(point)
        return len(self.nodes) - 1

    def add_triangle(self, i: int, j: int, k: int) -> None:
        self.triangles.append((i, j, k))

    @property
    def nb_nodes(self) -> int:
        return len(self.nodes)

    @property
    def nb_triangles(self) -> int:
        return len(self.triangles)

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """(N, 3) float64 node coordinates and (M, 3) int64 triangle indices."""
        vertices = np.array(self.nodes, dtype=np.float64).reshape(-1, 3)
        faces = np.array(self.triangles, dtype=np.int64).reshape(-1, 3)
        return vertices, faces

    def bounding_box(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """(mins, maxs) over all nodes, or None for an empty mesh."""
        if not self.nodes:
            return None
        vertices, _ = self.to_arrays()
        return vertices.min(axis=0), vertices.max(axis=0)
