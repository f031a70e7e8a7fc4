# ===========================================================================
# STL Reader -- TYPED EXCEPTIONS
# ===========================================================================
# FILE: stlreader/core/exceptions.py
#
# WHAT THIS IS:
#   Custom error types for the STL reader. Instead of a bare "read failed",
#   these tell you WHICH stage failed (format detection, text grammar,
#   binary layout, stream I/O) and HOW TO FIX IT.
#
# HOW IT'S USED:
#   The parsers raise these. StlReader.read() catches them, sends the
#   message once to the diagnostics sink, and returns False:
#
#     try:
#         parser.parse(buffer, end_pos, progress)
#     except CancellationAbort:
#         ...  # cooperative stop, not reported
#     except StlReaderError as e:
#         diagnostics(str(e))
#
#   All exceptions inherit from StlReaderError, so "except StlReaderError"
#   catches every reader failure while "except StructuralParseError"
#   catches only grammar violations in text files.
# ===========================================================================

from __future__ import annotations


class StlReaderError(Exception):
    """
    Base class for all STL reader errors.

    Attributes:
        fix_suggestion (str | None): Human-readable fix instruction.
        error_code (str | None): Machine-readable code like "PARSE-001"
            for logs and summaries.
    """

    def __init__(self, message, fix_suggestion=None, error_code=None):
        self.fix_suggestion = fix_suggestion
        self.error_code = error_code
        super().__init__(message)

    def to_dict(self):
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": str(self),
            "fix_suggestion": self.fix_suggestion,
        }


# ---------------------------------------------------------------------------
# FORMAT DETECTION (FMT-xxx)
# ---------------------------------------------------------------------------

class FormatDetectionIOError(StlReaderError):
    """
    The first bytes of the stream could not be read while sniffing.

    The reader falls back to the text path after reporting this, because
    the text parser produces the clearer follow-up diagnostic.
    """
    def __init__(self, message=None):
        super().__init__(
            message or "Error: Cannot read file",
            fix_suggestion="Check that the file exists, is readable and is not locked.",
            error_code="FMT-001",
        )


# ---------------------------------------------------------------------------
# PARSE ERRORS (PARSE-xxx, BIN-xxx)
# ---------------------------------------------------------------------------

class StructuralParseError(StlReaderError):
    """
    ASCII STL grammar violation.

    WHEN YOU'LL SEE THIS:
      - "facet" line missing where a facet or "endsolid" was expected
      - "outer loop" line missing after "facet normal ..."
      - a vertex line without three numbers
      - the file stops in the middle of a facet
    """
    def __init__(self, message=None, line_number=None):
        self.line_number = line_number
        if message is None:
            message = "Error: unexpected format of facet"
            if line_number is not None:
                message += f" at line {line_number}"
        super().__init__(
            message,
            fix_suggestion=(
                "Open the file in a text editor at the reported line; each facet "
                "must be 'facet normal', 'outer loop', three 'vertex' lines, "
                "'endloop', 'endfacet'."
            ),
            error_code="PARSE-001",
        )


class BinaryTruncationError(StlReaderError):
    """
    Binary STL data ended before the header or a facet record was complete.

    Facets decoded before the short read stay delivered to the mesh builder.
    """
    def __init__(self, message=None, facets_read=0, facets_expected=None):
        self.facets_read = facets_read
        self.facets_expected = facets_expected
        super().__init__(
            message or "Error: binary STL read failed",
            fix_suggestion=(
                "The file is truncated or its facet count is wrong. "
                "Re-export or re-download the file."
            ),
            error_code="BIN-001",
        )


# ---------------------------------------------------------------------------
# STREAM ERRORS (IO-xxx)
# ---------------------------------------------------------------------------

class StreamReadError(StlReaderError):
    """The operating system refused a read (or open) during parsing."""
    def __init__(self, message=None):
        super().__init__(
            message or "Error: cannot read from stream",
            fix_suggestion="Check file permissions, network drives and disk health.",
            error_code="IO-001",
        )


# ---------------------------------------------------------------------------
# CANCELLATION (CANCEL-xxx)
# ---------------------------------------------------------------------------

class CancellationAbort(StlReaderError):
    """
    The progress indicator asked to stop.

    Not a real failure: it is logged but never sent to the diagnostics sink.
    Triangles delivered before the stop stay in the mesh builder.
    """
    def __init__(self, message=None):
        super().__init__(
            message or "STL reading cancelled by user",
            fix_suggestion=None,
            error_code="CANCEL-001",
        )
