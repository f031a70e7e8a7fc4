# ============================================================================
# STL Reader -- Reader (stlreader/core/reader.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   The front door. Give it a binary stream (or a path) and a mesh builder;
#   it figures out whether the file is text or binary, then parses block
#   after block until the stream is exhausted:
#
#     1. Sniff the format ONCE (format_sniffer.detect_format)
#     2. Parse one block (ascii_parser or binary_parser)
#     3. Skip whitespace; if bytes remain, go back to 2
#        (some tools write several "solid" sections into one file)
#
#   read() returns True when the whole stream was consumed without error
#   and without cancellation. On failure, one human-readable message goes
#   to the diagnostics sink and the exception is kept in last_error.
#   Nothing is rolled back: nodes and triangles already handed to the
#   builder stay there.
#
# PROGRESS:
#   The top-level scope is "infinite" because the number of blocks is not
#   known up front; each block gets a share of what remains.
#
# THREADING:
#   None. One read() owns its stream until it returns.
# ============================================================================

from __future__ import annotations

import os
import time
from typing import Callable, Optional

from .config import Config, ReaderConfig
from .exceptions import (
    CancellationAbort,
    StlReaderError,
    StreamReadError,
)
from .format_sniffer import StlFormat, detect_format
from .mesh import BlockStats
from .progress import ProgressRange, ProgressScope
from .stream_buffer import StreamBuffer
from ..monitoring.logger import ReadLogEntry, get_logger, initialize_logging
from ..parsers.ascii_parser import AsciiStlParser
from ..parsers.binary_parser import BinaryStlParser

DiagnosticsSink = Callable[[str], None]


class StlReader:
    """
    Streaming STL reader with vertex merging.

    Usage:
        mesh = MeshCollector()
        reader = StlReader(mesh)
        if not reader.read_file("part.stl"):
            print(reader.last_error)
    """

    def __init__(
        self,
        builder,
        config: Optional[ReaderConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        self.builder = builder
        self.config = config or ReaderConfig()
        self.logger = get_logger("stlreader.reader")
        self._diagnostics = diagnostics or self._log_diagnostic

        self.last_error: Optional[StlReaderError] = None
        self.detected_format: Optional[StlFormat] = None
        self.blocks: list = []

    @classmethod
    def from_config(
        cls,
        builder,
        config: Config,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> "StlReader":
        """
        Reader built from a loaded Config.

        Logging is initialized from config.logging before the reader's
        logger is created, so the YAML log_dir and level take effect.
        """
        initialize_logging(config.logging.log_dir, config.logging.level)
        return cls(builder, config.reader, diagnostics)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_file(self, path, progress: Optional[ProgressRange] = None) -> bool:
        """Open path in binary mode and read it."""
        try:
            f = open(path, "rb")
        except OSError as e:
            self._reset()
            self._report(StreamReadError(f"Error: cannot open file {path} ({e})"))
            return False
        with f:
            return self.read(f, progress, source=str(path))

    def read(
        self,
        stream,
        progress: Optional[ProgressRange] = None,
        source: str = "<stream>",
    ) -> bool:
        """Read every STL block from stream. True on complete success."""
        self._reset()
        t0 = time.perf_counter()
        self.logger.info("stl_read_started", source=source)

        end_pos = self._stream_length(stream)
        is_ascii = self.is_ascii(stream)
        self.detected_format = StlFormat.ASCII if is_ascii else StlFormat.BINARY

        buffer = StreamBuffer(stream, self.config.line_buffer_size)
        cancelled = False
        scope = ProgressScope(progress, "Reading STL", 1, infinite=True)
        try:
            while True:
                if is_ascii:
                    stats = self.read_ascii(buffer, end_pos, scope.next(2))
                else:
                    stats = self.read_binary(buffer, scope.next(2))
                self.blocks.append(stats)
                self.logger.debug(
                    "stl_block_parsed",
                    source=source,
                    block=len(self.blocks),
                    nodes=stats.nodes,
                    triangles=stats.triangles,
                    degenerate=stats.degenerate,
                )
                buffer.skip_whitespace()
                if buffer.at_eof():
                    break
        except CancellationAbort as e:
            cancelled = True
            self.logger.info("stl_read_cancelled", source=source, message=str(e))
        except StlReaderError as e:
            self._report(e)
        finally:
            scope.close()

        ok = self.last_error is None and not cancelled
        self.logger.info(
            "stl_read_finished",
            ok=ok,
            **ReadLogEntry.build(
                source=source,
                stl_format=self.detected_format.value,
                blocks=len(self.blocks),
                nodes=sum(b.nodes for b in self.blocks),
                triangles=sum(b.triangles for b in self.blocks),
                elapsed_ms=(time.perf_counter() - t0) * 1000.0,
                error=self.last_error.to_dict() if self.last_error else None,
            ),
        )
        return ok

    def is_ascii(self, stream) -> bool:
        """Sniff the format without moving the stream. Failures count as ASCII."""
        return detect_format(stream, on_error=self._report) == StlFormat.ASCII

    def read_ascii(
        self,
        buffer: StreamBuffer,
        until_pos: Optional[int] = None,
        progress: Optional[ProgressRange] = None,
    ) -> BlockStats:
        """Parse one text block; a fresh merge index is used per call."""
        return AsciiStlParser(self.builder, self.config).parse(buffer, until_pos, progress)

    def read_binary(
        self,
        buffer: StreamBuffer,
        progress: Optional[ProgressRange] = None,
    ) -> BlockStats:
        """Parse one binary block; a fresh merge index is used per call."""
        return BinaryStlParser(self.builder, self.config).parse(buffer, progress)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self.last_error = None
        self.detected_format = None
        self.blocks = []

    def _report(self, error: StlReaderError) -> None:
        # first failure wins; later ones are consequences of it
        if self.last_error is None:
            self.last_error = error
        self._diagnostics(str(error))

    def _log_diagnostic(self, message: str) -> None:
        self.logger.error("stl_read_failed", message=message)

    @staticmethod
    def _stream_length(stream) -> Optional[int]:
        """Total stream size, leaving the position untouched (None if unknown)."""
        try:
            if not stream.seekable():
                return None
            pos = stream.tell()
            end = stream.seek(0, os.SEEK_END)
            stream.seek(pos)
            return end
        except (AttributeError, OSError, ValueError):
            return None
