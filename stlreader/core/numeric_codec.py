# ============================================================================
# STL Reader -- Numeric Codec (stlreader/core/numeric_codec.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Turns raw bytes from an STL file into numbers, for both encodings:
#
#   TEXT side:  "vertex 1.5 -2e-3 0" -> three floats. The decimal point is
#               ALWAYS '.', whatever locale the host process runs in. We
#               tokenize with a regex over bytes and hand the token to
#               float(), which never looks at the locale.
#
#   BINARY side: 4-byte little-endian IEEE-754 floats. struct's "<" and
#               numpy's "<f4" both mean "little-endian, no matter what the
#               CPU is": on little-endian hosts the bytes are reinterpreted
#               as-is, on big-endian hosts they are swapped first.
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

import re
import struct
from typing import NamedTuple, Optional, Tuple

import numpy as np


class Point3D(NamedTuple):
    """Three double-precision coordinates."""
    x: float
    y: float
    z: float

    def square_distance(self, other: "Point3D") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return dx * dx + dy * dy + dz * dz


# -------------------------------------------------------------------
# Text side
# -------------------------------------------------------------------

# Leading whitespace, optional sign, then digits with optional fraction
# and exponent (or inf/nan), like strtod in the "C" locale.
_FLOAT_TOKEN = re.compile(
    rb"[ \t\r\n\v\f]*"
    rb"([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_SPACE_OR_ALPHA = frozenset(b" \t\r\n\v\f"
                            b"abcdefghijklmnopqrstuvwxyz"
                            b"ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def parse_float(line: bytes, pos: int = 0) -> Tuple[float, int, bool]:
    """
    Parse one floating-point token from line starting at pos.

    Returns (value, new_pos, ok). When no number is found, ok is False
    and new_pos == pos, so the cursor never moves on failure.
    """
    match = _FLOAT_TOKEN.match(line, pos)
    if match is None:
        return 0.0, pos, False
    return float(match.group(1)), match.end(), True


def read_vertex_line(line: bytes) -> Optional[Point3D]:
    """
    Parse "vertex x y z" (keyword and whitespace are skipped).

    Returns None if any of the three coordinates is missing.
    """
    pos = 0
    end = len(line)
    while pos < end and line[pos] in _SPACE_OR_ALPHA:
        pos += 1

    x, pos, ok_x = parse_float(line, pos)
    y, pos, ok_y = parse_float(line, pos)
    z, pos, ok_z = parse_float(line, pos)
    if not (ok_x and ok_y and ok_z):
        return None
    return Point3D(x, y, z)


# -------------------------------------------------------------------
# Binary side
#
# The binary parser decodes whole chunks with decode_facets() and reads
# the header count with read_uint32_le(). read_float_le() and
# read_vec3_le() are public helpers for callers that inspect one field
# of a record (a normal, a single corner) without numpy.
# -------------------------------------------------------------------

_FLOAT32_LE = struct.Struct("<f")
_VEC3_LE = struct.Struct("<3f")

# One binary facet record: 50 bytes, packed (no alignment padding).
FACET_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])
FACET_RECORD_SIZE = FACET_DTYPE.itemsize


def read_float_le(data, offset: int = 0) -> float:
    """Read one little-endian float32 at offset."""
    return _FLOAT32_LE.unpack_from(data, offset)[0]


def read_vec3_le(data, offset: int = 0) -> Point3D:
    """Read three consecutive little-endian float32 values at offset."""
    return Point3D(*_VEC3_LE.unpack_from(data, offset))


def read_uint32_le(data, offset: int = 0) -> int:
    """Read a little-endian unsigned 32-bit integer at offset."""
    return int.from_bytes(bytes(data[offset:offset + 4]), "little", signed=False)


def decode_facets(data, count: int) -> np.ndarray:
    """
    Decode count facet records from the start of data.

    Returns a (count, 3, 3) float64 array of vertex coordinates; the
    normal and attribute fields are dropped.
    """
    records = np.frombuffer(data, dtype=FACET_DTYPE, count=count)
    return records["vertices"].astype(np.float64)
