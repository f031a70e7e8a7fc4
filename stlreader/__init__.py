"""Streaming ASCII/binary STL reader with tolerant vertex merging."""

from .core.config import Config, ReaderConfig, load_config
from .core.exceptions import (
    BinaryTruncationError,
    CancellationAbort,
    FormatDetectionIOError,
    StlReaderError,
    StreamReadError,
    StructuralParseError,
)
from .core.format_sniffer import StlFormat, detect_format
from .core.mesh import BlockStats, MeshBuilder, MeshCollector
from .core.numeric_codec import (
    Point3D,
    decode_facets,
    read_float_le,
    read_uint32_le,
    read_vec3_le,
)
from .core.progress import ProgressIndicator, ProgressRange, ProgressScope
from .core.reader import StlReader

__version__ = "1.0.0"

__all__ = [
    "BinaryTruncationError",
    "BlockStats",
    "CancellationAbort",
    "Config",
    "FormatDetectionIOError",
    "MeshBuilder",
    "MeshCollector",
    "Point3D",
    "ProgressIndicator",
    "ProgressRange",
    "ProgressScope",
    "ReaderConfig",
    "StlFormat",
    "StlReader",
    "StlReaderError",
    "StreamReadError",
    "StructuralParseError",
    "decode_facets",
    "detect_format",
    "load_config",
    "read_float_le",
    "read_uint32_le",
    "read_vec3_le",
]
