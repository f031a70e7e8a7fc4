# ============================================================================
# STL Reader -- Buffered Stream (stlreader/core/stream_buffer.py)
# ============================================================================
#
# WHAT THIS FILE DOES (plain English):
#   Sits between the raw binary stream and both parsers. The text parser
#   pulls whole lines; the binary parser pulls fixed-size records; the
#   reader skips whitespace between concatenated STL blocks. All three go
#   through the same buffer, so bytes read ahead for one line are never
#   lost to the next consumer.
#
#   It also keeps the two counters the parsers report with:
#     - tell():       logical byte offset (what has been handed out)
#     - line_number:  how many newline-terminated lines were consumed
#
# INTERNET ACCESS: NONE
# ============================================================================

from __future__ import annotations

from typing import Optional

from .exceptions import StreamReadError

_WHITESPACE = frozenset(b" \t\r\n\v\f")


class StreamBuffer:
    """
    Read-ahead buffer over a binary stream.

    The stream needs read(); readinto() is used when present and tell()
    when it works.

    chunk_size is the number of bytes requested from the stream per refill.
    """

    def __init__(self, stream, chunk_size: int = 1024):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._stream = stream
        self._chunk_size = chunk_size
        self._buf = bytearray()
        self._pos = 0
        self._eof = False
        self._consumed = 0
        self.line_number = 0
        try:
            self._origin = stream.tell()
        except (AttributeError, OSError, ValueError):
            self._origin = 0

    def tell(self) -> int:
        """Stream offset of the next byte a consumer will receive."""
        return self._origin + self._consumed

    def _available(self) -> int:
        return len(self._buf) - self._pos

    def _fill(self) -> bool:
        """Append one chunk from the stream. False at end of stream."""
        if self._eof:
            return False
        try:
            data = self._stream.read(self._chunk_size)
        except OSError as e:
            raise StreamReadError(f"Error: cannot read from stream ({e})") from e
        if not data:
            self._eof = True
            return False
        if self._pos:
            del self._buf[:self._pos]
            self._pos = 0
        self._buf += data
        return True

    def _take(self, n: int) -> bytes:
        chunk = bytes(self._buf[self._pos:self._pos + n])
        self._pos += n
        self._consumed += n
        return chunk

    def readline(self) -> Optional[bytes]:
        """
        Next line without its terminator ("\\n" or "\\r\\n").

        Returns None only when the stream is exhausted. A final line without
        a trailing newline is still returned.
        """
        search_from = self._pos
        while True:
            idx = self._buf.find(b"\n", search_from)
            if idx >= 0:
                line = self._take(idx - self._pos + 1)[:-1]
                break
            search_from = len(self._buf) - self._pos
            if not self._fill():
                if self._available() == 0:
                    return None
                line = self._take(self._available())
                break
            search_from += self._pos
        self.line_number += 1
        if line.endswith(b"\r"):
            line = line[:-1]
        return line

    def readinto(self, view) -> int:
        """
        Fill view (a writable buffer) as far as the stream allows.

        Returns the number of bytes written; less than len(view) only at
        end of stream.
        """
        view = memoryview(view).cast("B")
        wanted = len(view)
        done = min(wanted, self._available())
        if done:
            view[:done] = self._buf[self._pos:self._pos + done]
            self._pos += done
            self._consumed += done
        while done < wanted and not self._eof:
            try:
                n = self._read_direct(view[done:])
            except OSError as e:
                raise StreamReadError(f"Error: cannot read from stream ({e})") from e
            if not n:
                self._eof = True
                break
            done += n
            self._consumed += n
        return done

    def _read_direct(self, view) -> int:
        # read()-only streams are copied into view
        readinto = getattr(self._stream, "readinto", None)
        if readinto is not None:
            return readinto(view) or 0
        data = self._stream.read(len(view))
        if not data:
            return 0
        view[:len(data)] = data
        return len(data)

    def skip_whitespace(self) -> int:
        """Consume whitespace (counting newlines as lines). Returns bytes skipped."""
        skipped = 0
        while True:
            while self._pos < len(self._buf) and self._buf[self._pos] in _WHITESPACE:
                if self._buf[self._pos] == 0x0A:
                    self.line_number += 1
                self._pos += 1
                skipped += 1
            if self._pos < len(self._buf) or not self._fill():
                break
        self._consumed += skipped
        return skipped

    def at_eof(self) -> bool:
        """True when no byte is left in the buffer or the stream."""
        if self._available():
            return False
        return not self._fill()
