# ============================================================================
# STL Reader -- Binary STL Parser (stlreader/parsers/binary_parser.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Reads ONE binary STL block:
#
#     offset 0   80 bytes   header (free text, ignored)
#     offset 80   4 bytes   facet count, uint32 little-endian
#     offset 84  50 bytes   per facet:
#                             12 bytes normal (3 x float32, ignored)
#                             36 bytes corners (3 x 3 x float32)
#                              2 bytes attribute (ignored)
#
# DON'T TRUST THE FACET COUNT:
#   Exporters get it wrong. It only sizes the progress scope and bounds the
#   loop; the real limit is how many bytes the stream actually has. When
#   the data stops early, every complete record read so far is delivered,
#   then BinaryTruncationError is raised.
#
# SPEED:
#   Records are read 80 at a time into ONE preallocated bytearray and
#   decoded with a numpy structured dtype, so there is no per-facet
#   allocation or struct call.
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

from typing import Optional

from ..core.config import ReaderConfig
from ..core.exceptions import BinaryTruncationError, CancellationAbort
from ..core.format_sniffer import STL_HEADER_SIZE
from ..core.merge_index import MergeNodeIndex
from ..core.mesh import BlockStats
from ..core.numeric_codec import FACET_RECORD_SIZE, decode_facets, read_uint32_le
from ..core.progress import ProgressRange, ProgressScope
from ..core.stream_buffer import StreamBuffer


class BinaryStlParser:
    """
    Binary STL block parser.

    builder: any object with add_node(point) -> int and add_triangle(i, j, k).
    """

    def __init__(self, builder, config: Optional[ReaderConfig] = None):
        self.builder = builder
        self.config = config or ReaderConfig()
        self._chunk_facets = self.config.binary_chunk_facets
        self._chunk = bytearray(FACET_RECORD_SIZE * self._chunk_facets)

    def parse(
        self,
        buffer: StreamBuffer,
        progress: Optional[ProgressRange] = None,
    ) -> BlockStats:
        header = bytearray(STL_HEADER_SIZE)
        if buffer.readinto(header) != STL_HEADER_SIZE:
            raise BinaryTruncationError("Error: Corrupted binary STL file")

        nb_facets = read_uint32_le(header, 80)
        stats = BlockStats(facets_declared=nb_facets)
        merge = MergeNodeIndex(self.builder, self.config.square_confusion)
        view = memoryview(self._chunk)

        with ProgressScope(progress, "Reading binary STL file", nb_facets) as ps:
            while stats.facets < nb_facets:
                if not ps.more():
                    raise CancellationAbort()

                in_chunk = min(self._chunk_facets, nb_facets - stats.facets)
                wanted = in_chunk * FACET_RECORD_SIZE
                got = buffer.readinto(view[:wanted])
                complete = got // FACET_RECORD_SIZE

                if complete:
                    for corners in decode_facets(self._chunk, complete).tolist():
                        if not ps.more():
                            raise CancellationAbort()
                        stats.facets += 1
                        if merge.add_triangle(corners[0], corners[1], corners[2]):
                            stats.triangles += 1
                        else:
                            stats.degenerate += 1
                        ps.next()

                if got != wanted:
                    raise BinaryTruncationError(
                        f"Error: binary STL read failed after {stats.facets} "
                        f"of {nb_facets} facets",
                        facets_read=stats.facets,
                        facets_expected=nb_facets,
                    )

        stats.nodes = merge.nodes_added
        return stats
