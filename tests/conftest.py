# ============================================================================
# conftest.py -- Shared Test Fixtures for the STL reader test suite
# ============================================================================
#
# WHAT THIS FILE DOES:
#   Pytest automatically loads this file before any test runs.
#   It provides:
#     1. sys.path setup so "from stlreader.core.X import Y" works from any test
#     2. RecordingBuilder, a fake mesh builder that remembers every call
#     3. Helpers that build ASCII and binary STL bytes in memory
#
# WHY FAKE BUILDERS:
#   The reader only talks to a mesh builder through add_node() and
#   add_triangle(). Recording those calls lets every test check exactly
#   what the reader delivered, in order, without a real mesh library.
#
# INTERNET ACCESS: NONE
# ============================================================================

import struct
import sys
from pathlib import Path

import pytest

# -- sys.path setup --
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ============================================================================
# SECTION 0: FAKE MESH BUILDER
# ============================================================================

class RecordingBuilder:
    """Mesh builder that records calls and hands out 0-based indices."""

    def __init__(self):
        self.nodes = []
        self.triangles = []
        self.calls = []

    def add_node(self, point):
        self.nodes.append(tuple(point))
        self.calls.append(("add_node", tuple(point)))
        return len(self.nodes) - 1

    def add_triangle(self, i, j, k):
        self.triangles.append((i, j, k))
        self.calls.append(("add_triangle", (i, j, k)))


@pytest.fixture
def builder():
    return RecordingBuilder()


# ============================================================================
# SECTION 1: STL BYTE BUILDERS
# ============================================================================

TRIANGLE = ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))

SCENARIO_A = (
    b"solid test\n"
    b"facet normal 0 0 1\n"
    b"outer loop\n"
    b"vertex 0 0 0\n"
    b"vertex 1 0 0\n"
    b"vertex 0 1 0\n"
    b"endloop\n"
    b"endfacet\n"
    b"endsolid test\n"
)


def ascii_facet(corners, normal=(0.0, 0.0, 1.0)):
    """One facet block as text, indented like common exporters."""
    lines = ["  facet normal %r %r %r" % tuple(normal), "    outer loop"]
    for x, y, z in corners:
        lines.append("      vertex %r %r %r" % (x, y, z))
    lines.extend(["    endloop", "  endfacet"])
    return "\n".join(lines) + "\n"


def ascii_stl(facets, name="test", endsolid=True):
    """A complete text STL block as bytes."""
    text = "solid %s\n" % name
    text += "".join(ascii_facet(f) for f in facets)
    if endsolid:
        text += "endsolid %s\n" % name
    return text.encode("ascii")


def binary_stl(facets, declared=None, header=b"binary stl test"):
    """
    A binary STL block as bytes.

    declared overrides the facet count written at offset 80, to build
    files whose header lies about their length.
    """
    count = len(facets) if declared is None else declared
    data = bytearray(header[:80].ljust(80, b"\x00"))
    data += struct.pack("<I", count)
    for corners in facets:
        data += struct.pack("<3f", 0.0, 0.0, 1.0)
        for corner in corners:
            data += struct.pack("<3f", *corner)
        data += b"\x00\x00"
    return bytes(data)


def distinct_facets(n):
    """n facets that share no coordinates with each other."""
    facets = []
    for i in range(n):
        base = float(i * 10)
        facets.append((
            (base, 0.0, 0.0),
            (base + 1.0, 0.0, 0.0),
            (base, 1.0, 0.5),
        ))
    return facets
