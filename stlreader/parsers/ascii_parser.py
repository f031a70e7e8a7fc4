# ============================================================================
# STL Reader -- ASCII STL Parser (stlreader/parsers/ascii_parser.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Reads ONE "solid ... endsolid" block of a text STL file, line by line:
#
#     solid <name>                      <- any content, must exist
#       facet normal nx ny nz           <- must start with "facet"
#         outer loop                    <- must start with "outer"
#           vertex x y z                <- three of these
#           vertex x y z
#           vertex x y z
#         endloop                       <- read and ignored
#       endfacet                        <- read and ignored
#     endsolid <name>
#
#   Keywords are matched case-insensitively after leading whitespace, and
#   only as prefixes. Every facet goes through the merge index; facets
#   whose corners collapse to fewer than three nodes are dropped.
#
# WHAT COUNTS AS "DONE":
#   - an "endsolid" line
#   - end of file where a facet (or its first vertex) would start; sloppy
#     exporters that forget "endsolid" are accepted
#   Anything else unexpected raises StructuralParseError with the line
#   number of the offending line.
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

from typing import Optional

from ..core.config import ReaderConfig
from ..core.exceptions import CancellationAbort, StructuralParseError
from ..core.merge_index import MergeNodeIndex
from ..core.mesh import BlockStats
from ..core.numeric_codec import read_vertex_line
from ..core.progress import ProgressRange, ProgressScope
from ..core.stream_buffer import StreamBuffer


def starts_with_keyword(line: bytes, keyword: bytes) -> bool:
    """Case-insensitive prefix match after leading whitespace."""
    stripped = line.lstrip()
    return stripped[:len(keyword)].lower() == keyword


class AsciiStlParser:
    """
    Text STL block parser.

    builder: any object with add_node(point) -> int and add_triangle(i, j, k).
    """

    def __init__(self, builder, config: Optional[ReaderConfig] = None):
        self.builder = builder
        self.config = config or ReaderConfig()

    def parse(
        self,
        buffer: StreamBuffer,
        until_pos: Optional[int] = None,
        progress: Optional[ProgressRange] = None,
    ) -> BlockStats:
        """
        Parse one block starting at the buffer's current position.

        until_pos is the stream length, used only to size the progress
        scope (one step per text_progress_step_bytes).
        """
        start_pos = buffer.tell()
        stats = BlockStats()

        # skip header "solid ..."
        if buffer.readline() is None:
            raise StructuralParseError(
                "Error: premature end of file",
                line_number=buffer.line_number + 1,
            )

        merge = MergeNodeIndex(self.builder, self.config.square_confusion)
        step_bytes = self.config.text_progress_step_bytes
        remaining = max(0, until_pos - start_pos) if until_pos is not None else 0
        nb_steps = 1 + remaining // step_bytes

        with ProgressScope(progress, "Reading text STL file", nb_steps) as ps:
            progress_pos = start_pos + step_bytes
            while True:
                if not ps.more():
                    raise CancellationAbort()
                while buffer.tell() > progress_pos:
                    ps.next()
                    progress_pos += step_bytes

                line = buffer.readline()  # "facet normal nx ny nz"
                if line is None:
                    break
                if starts_with_keyword(line, b"endsolid"):
                    stats.ended_with_endsolid = True
                    break
                if not starts_with_keyword(line, b"facet"):
                    raise StructuralParseError(line_number=buffer.line_number)

                line = buffer.readline()  # "outer loop"
                if line is None:
                    raise StructuralParseError(
                        "Error: premature end of file",
                        line_number=buffer.line_number + 1,
                    )
                if not starts_with_keyword(line, b"outer"):
                    raise StructuralParseError(line_number=buffer.line_number)

                points = self._read_vertices(buffer)
                if points is None:
                    # end of file before the vertex triple
                    break

                stats.facets += 1
                if merge.add_triangle(points[0], points[1], points[2]):
                    stats.triangles += 1
                else:
                    stats.degenerate += 1

                buffer.readline()  # skip "endloop"
                buffer.readline()  # skip "endfacet"

        stats.nodes = merge.nodes_added
        return stats

    def _read_vertices(self, buffer: StreamBuffer):
        points = []
        for i in range(3):
            line = buffer.readline()
            if line is None:
                if i == 0:
                    return None
                raise StructuralParseError(
                    "Error: premature end of file",
                    line_number=buffer.line_number + 1,
                )
            point = read_vertex_line(line)
            if point is None:
                raise StructuralParseError(
                    f"Error: cannot read vertex co-ordinates at line {buffer.line_number}",
                    line_number=buffer.line_number,
                )
            points.append(point)
        return points
