# ============================================================================
# STL Reader -- Format Sniffer (stlreader/core/format_sniffer.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Decides whether an STL stream is text ("solid ... endsolid") or binary,
#   WITHOUT consuming it: we read a short prefix and seek back.
#
# THE RULE:
#   - A binary file can never be shorter than 134 bytes (80-byte header +
#     4-byte facet count + one 50-byte facet). Anything shorter is text.
#   - Otherwise, any byte above '~' (0x7E) in the first 134 bytes means
#     binary. Printable-only means text.
#
#   Do NOT look for the "solid" keyword: plenty of binary exporters write
#   "solid " at the start of their 80-byte header.
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .exceptions import FormatDetectionIOError

logger = logging.getLogger(__name__)

STL_HEADER_SIZE = 84            # 80-byte opaque header + uint32 facet count
STL_FACET_SIZE = 50
STL_MIN_FILE_SIZE = STL_HEADER_SIZE + STL_FACET_SIZE

_MAX_ASCII_BYTE = ord("~")


class StlFormat(str, Enum):
    ASCII = "ascii"
    BINARY = "binary"


def detect_format(
    stream,
    on_error: Optional[Callable[[FormatDetectionIOError], None]] = None,
) -> StlFormat:
    """
    Classify stream as ASCII or BINARY STL, leaving its position unchanged.

    On a read failure the error goes to on_error (or the module logger)
    and ASCII is returned, so the text parser reports what is wrong.
    """
    try:
        start = stream.tell()
        prefix = stream.read(STL_MIN_FILE_SIZE)
        stream.seek(start)
    except (OSError, ValueError) as e:
        err = FormatDetectionIOError(f"Error: Cannot read file ({e})")
        if on_error is not None:
            on_error(err)
        else:
            logger.error("%s", err)
        return StlFormat.ASCII

    if prefix is None or len(prefix) < STL_MIN_FILE_SIZE:
        return StlFormat.ASCII

    if max(prefix) > _MAX_ASCII_BYTE:
        return StlFormat.BINARY
    return StlFormat.ASCII
