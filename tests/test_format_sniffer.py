# ============================================================================
# test_format_sniffer.py -- Tests for ASCII/binary detection
# ============================================================================
#
# RUN:
#   python -m pytest tests/test_format_sniffer.py -v
# ============================================================================

import io

import sys as _sys, os as _os
_sys.path.insert(0, _os.path.dirname(__file__))
from conftest import SCENARIO_A, TRIANGLE, ascii_stl, binary_stl, distinct_facets

from stlreader.core.exceptions import FormatDetectionIOError
from stlreader.core.format_sniffer import STL_MIN_FILE_SIZE, StlFormat, detect_format


class BrokenStream(io.BytesIO):
    """A stream whose reads always fail."""

    def read(self, *args):
        raise OSError("device not ready")


class TestDetectFormat:

    def test_min_size_constant(self):
        assert STL_MIN_FILE_SIZE == 134

    def test_ascii_file(self):
        data = ascii_stl(distinct_facets(4))
        assert len(data) > STL_MIN_FILE_SIZE
        assert detect_format(io.BytesIO(data)) == StlFormat.ASCII

    def test_binary_file(self):
        assert detect_format(io.BytesIO(binary_stl([TRIANGLE]))) == StlFormat.BINARY

    def test_binary_header_starting_with_solid(self):
        data = binary_stl([TRIANGLE], header=b"solid exported by some CAD tool")
        assert data.startswith(b"solid ")
        assert detect_format(io.BytesIO(data)) == StlFormat.BINARY

    def test_short_file_with_high_bytes_is_ascii(self):
        data = b"\xff\xfe\x80" * 40
        assert len(data) < STL_MIN_FILE_SIZE
        assert detect_format(io.BytesIO(data)) == StlFormat.ASCII

    def test_short_scenario_file_is_ascii(self):
        assert detect_format(io.BytesIO(SCENARIO_A)) == StlFormat.ASCII

    def test_single_high_byte_forces_binary(self):
        data = bytearray(b"a" * 200)
        data[133] = 0x7F
        assert detect_format(io.BytesIO(bytes(data))) == StlFormat.BINARY

    def test_byte_after_prefix_is_not_inspected(self):
        data = bytearray(b"a" * 200)
        data[134] = 0xFF
        assert detect_format(io.BytesIO(bytes(data))) == StlFormat.ASCII

    def test_stream_position_unchanged(self):
        data = binary_stl(distinct_facets(3))
        stream = io.BytesIO(data)
        detect_format(stream)
        assert stream.tell() == 0
        assert stream.read() == data

    def test_stream_position_unchanged_from_offset(self):
        data = b"prefix" + ascii_stl(distinct_facets(3))
        stream = io.BytesIO(data)
        stream.seek(6)
        detect_format(stream)
        assert stream.tell() == 6
        assert stream.read() == data[6:]

    def test_read_failure_defaults_to_ascii(self):
        errors = []
        result = detect_format(BrokenStream(b"x" * 500), on_error=errors.append)
        assert result == StlFormat.ASCII
        assert len(errors) == 1
        assert isinstance(errors[0], FormatDetectionIOError)
        assert errors[0].error_code == "FMT-001"
