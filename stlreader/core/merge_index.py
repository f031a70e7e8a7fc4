# ============================================================================
# STL Reader -- Spatial Merge Index (stlreader/core/merge_index.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   STL stores every triangle with its own copy of each corner, so a cube
#   arrives as 36 corners for 8 real points. This index glues the copies
#   back together: the first time a point is seen it is sent to the mesh
#   builder and gets a node index; every later point closer than the
#   confusion tolerance gets that same index back.
#
# HOW IT WORKS:
#   Space is cut into a uniform grid of cubes whose edge is the linear
#   tolerance (sqrt of the squared tolerance). Two points closer than the
#   tolerance differ by less than one cell on every axis, so a lookup only
#   has to check the point's own cell and its 26 neighbours. Equality is
#   the squared distance test, never exact float comparison.
#
# LIFETIME:
#   One index per block parse. It is filled as vertices arrive and thrown
#   away when the block ends; it is never shared between blocks.
# ============================================================================

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from .numeric_codec import Point3D

# Squared linear confusion of 1e-7.
SQUARE_CONFUSION = 1.0e-14

_NEIGHBOUR_OFFSETS = tuple(
    (dx, dy, dz)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    for dz in (-1, 0, 1)
    if (dx, dy, dz) != (0, 0, 0)
)

CellKey = Tuple[int, int, int]


class MergeNodeIndex:
    """
    Tolerant point -> node index map in front of a mesh builder.

    builder must provide add_node(point) -> int.
    """

    def __init__(self, builder, square_tolerance: float = SQUARE_CONFUSION):
        if square_tolerance <= 0.0:
            raise ValueError("square_tolerance must be positive")
        self._builder = builder
        self.square_tolerance = square_tolerance
        self._cell_size = math.sqrt(square_tolerance)
        self._cells: Dict[CellKey, List[Tuple[float, float, float, int]]] = {}
        self.nodes_added = 0
        self.nodes_reused = 0

    def __len__(self) -> int:
        return self.nodes_added

    def add_or_reuse(self, x: float, y: float, z: float) -> int:
        """Return the node index for (x, y, z), creating the node on a miss."""
        key = self._cell_key(x, y, z)
        if key is None:
            # NaN/inf never compare equal to anything
            return self._add(x, y, z, None)

        found = self._find(key, x, y, z)
        if found is not None:
            self.nodes_reused += 1
            return found
        return self._add(x, y, z, key)

    def add_triangle(self, p1: Point3D, p2: Point3D, p3: Point3D) -> bool:
        """
        Merge the three corners and forward the triangle to the builder.

        Returns False (and forwards nothing) when two corners collapse to
        the same node.
        """
        n1 = self.add_or_reuse(p1[0], p1[1], p1[2])
        n2 = self.add_or_reuse(p2[0], p2[1], p2[2])
        n3 = self.add_or_reuse(p3[0], p3[1], p3[2])
        if n1 == n2 or n2 == n3 or n3 == n1:
            return False
        self._builder.add_triangle(n1, n2, n3)
        return True

    def find(self, x: float, y: float, z: float) -> Optional[int]:
        """Return the node index for (x, y, z) without adding anything."""
        key = self._cell_key(x, y, z)
        if key is None:
            return None
        return self._find(key, x, y, z)

    # ------------------------------------------------------------------

    def _cell_key(self, x: float, y: float, z: float) -> Optional[CellKey]:
        size = self._cell_size
        qx, qy, qz = x / size, y / size, z / size
        # also rejects coordinates so large the cell number overflows
        if not (math.isfinite(qx) and math.isfinite(qy) and math.isfinite(qz)):
            return None
        return (math.floor(qx), math.floor(qy), math.floor(qz))

    def _find(self, key: CellKey, x: float, y: float, z: float) -> Optional[int]:
        # exact duplicates are the common case: check the own cell first
        hit = self._scan(self._cells.get(key), x, y, z)
        if hit is not None:
            return hit
        cx, cy, cz = key
        for dx, dy, dz in _NEIGHBOUR_OFFSETS:
            bucket = self._cells.get((cx + dx, cy + dy, cz + dz))
            if bucket:
                hit = self._scan(bucket, x, y, z)
                if hit is not None:
                    return hit
        return None

    def _scan(self, bucket, x: float, y: float, z: float) -> Optional[int]:
        if not bucket:
            return None
        tol = self.square_tolerance
        for px, py, pz, index in bucket:
            dx = px - x
            dy = py - y
            dz = pz - z
            if dx * dx + dy * dy + dz * dz < tol:
                return index
        return None

    def _add(self, x: float, y: float, z: float, key: Optional[CellKey]) -> int:
        index = self._builder.add_node(Point3D(x, y, z))
        self.nodes_added += 1
        if key is not None:
            self._cells.setdefault(key, []).append((x, y, z, index))
        return index
