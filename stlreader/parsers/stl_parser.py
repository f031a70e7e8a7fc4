# ============================================================================
# STL Reader -- STL Summary Parser (stlreader/parsers/stl_parser.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Reads an STL file and describes it as plain text:
#     - Encoding (ascii / binary) and number of solid blocks
#     - Triangle count, merged node count, dropped degenerate facets
#     - Bounding box dimensions (X/Y/Z size and ranges)
#
#   This answers "how big is the part?" or "how dense is the mesh?"
#   without loading the mesh into a viewer.
#
# ERROR POLICY:
#   Never raises for a bad file. Problems land in details["error"] as
#   "<ERROR_CODE>: <message>", and the failure is logged to the error log.
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..core.config import ReaderConfig
from ..core.mesh import MeshCollector
from ..core.reader import StlReader
from ..monitoring.logger import get_error_logger


class StlParser:
    """
    Extract metadata from STL 3D mesh files.

    NON-PROGRAMMER NOTE:
      STL files have no readable text inside them -- they are lists of
      triangle coordinates. We extract dimensional and structural info
      as text so it can be searched and compared.
    """

    def __init__(self, config: Optional[ReaderConfig] = None):
        self.config = config or ReaderConfig()

    def parse(self, file_path: str) -> str:
        text, _ = self.parse_with_details(file_path)
        return text

    def parse_with_details(self, file_path: str) -> Tuple[str, Dict[str, Any]]:
        path = Path(file_path)
        details: Dict[str, Any] = {"file": str(path), "parser": "StlParser"}

        mesh = MeshCollector()
        messages = []
        reader = StlReader(mesh, self.config, diagnostics=messages.append)

        if not reader.read_file(path):
            err = reader.last_error
            if err is not None:
                details["error"] = f"{err.error_code}: {err}"
            else:
                details["error"] = "CANCEL-001: STL reading cancelled"
            details["messages"] = messages
            get_error_logger("stlreader.summary").error(
                "stl_summary_failed", file=str(path), error=details["error"]
            )
            return "", details

        blocks = reader.blocks
        degenerate = sum(b.degenerate for b in blocks)
        parts = [
            f"3D Model (STL): {path.name}",
            f"Format: {reader.detected_format.value}",
            f"Solid blocks: {len(blocks)}",
            f"Triangles: {mesh.nb_triangles:,}",
            f"Nodes: {mesh.nb_nodes:,}",
        ]
        if degenerate:
            parts.append(f"Degenerate facets dropped: {degenerate:,}")

        box = mesh.bounding_box()
        if box is not None:
            mins, maxs = box
            dims = maxs - mins
            parts.extend([
                f"Bounding box: {dims[0]:.2f} x {dims[1]:.2f} x {dims[2]:.2f}",
                f"X range: {mins[0]:.2f} to {maxs[0]:.2f}",
                f"Y range: {mins[1]:.2f} to {maxs[1]:.2f}",
                f"Z range: {mins[2]:.2f} to {maxs[2]:.2f}",
            ])

        full = "\n".join(parts)
        details["total_len"] = len(full)
        details["format"] = reader.detected_format.value
        details["blocks"] = len(blocks)
        details["triangles"] = mesh.nb_triangles
        details["nodes"] = mesh.nb_nodes
        return full, details
