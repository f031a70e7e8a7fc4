# ============================================================================
# test_stl_parser.py -- Tests for the plain-text STL summary
# ============================================================================
#
# RUN:
#   python -m pytest tests/test_stl_parser.py -v
# ============================================================================

from unittest.mock import MagicMock, patch

import sys as _sys, os as _os
_sys.path.insert(0, _os.path.dirname(__file__))
from conftest import TRIANGLE, ascii_stl, binary_stl, distinct_facets

from stlreader.parsers.stl_parser import StlParser


class TestStlParserSummary:

    def test_ascii_summary(self, tmp_path):
        path = tmp_path / "bracket.stl"
        path.write_bytes(ascii_stl([TRIANGLE, TRIANGLE]))
        text, details = StlParser().parse_with_details(str(path))
        assert "3D Model (STL): bracket.stl" in text
        assert "Format: ascii" in text
        assert "Triangles: 2" in text
        assert "Nodes: 3" in text
        assert "Bounding box: 1.00 x 1.00 x 0.00" in text
        assert details["triangles"] == 2
        assert details["nodes"] == 3
        assert details["total_len"] == len(text)

    def test_binary_summary(self, tmp_path):
        path = tmp_path / "plate.stl"
        path.write_bytes(binary_stl(distinct_facets(3)))
        text, details = StlParser().parse_with_details(str(path))
        assert "Format: binary" in text
        assert "Solid blocks: 1" in text
        assert "X range: 0.00 to 21.00" in text
        assert details["format"] == "binary"

    def test_degenerate_count_shown(self, tmp_path):
        path = tmp_path / "bad.stl"
        path.write_bytes(ascii_stl([((0, 0, 0), (0, 0, 0), (1, 1, 1)), TRIANGLE]))
        text = StlParser().parse(str(path))
        assert "Degenerate facets dropped: 1" in text

    def test_parse_returns_text_only(self, tmp_path):
        path = tmp_path / "one.stl"
        path.write_bytes(ascii_stl([TRIANGLE]))
        assert StlParser().parse(str(path)).startswith("3D Model (STL): one.stl")


class TestStlParserErrors:

    @patch("stlreader.parsers.stl_parser.get_error_logger")
    def test_structural_error(self, mock_get_logger, tmp_path):
        mock_logger = MagicMock()
        mock_get_logger.return_value = mock_logger
        path = tmp_path / "broken.stl"
        path.write_bytes(b"solid x\nfacet normal 0 0 1\nvertex 0 0 0\n")
        text, details = StlParser().parse_with_details(str(path))
        assert text == ""
        assert details["error"].startswith("PARSE-001")
        assert details["messages"] == ["Error: unexpected format of facet at line 3"]
        mock_logger.error.assert_called_once()

    @patch("stlreader.parsers.stl_parser.get_error_logger")
    def test_missing_file(self, mock_get_logger, tmp_path):
        mock_get_logger.return_value = MagicMock()
        text, details = StlParser().parse_with_details(str(tmp_path / "gone.stl"))
        assert text == ""
        assert details["error"].startswith("IO-001")

    @patch("stlreader.parsers.stl_parser.get_error_logger")
    def test_truncated_binary(self, mock_get_logger, tmp_path):
        mock_get_logger.return_value = MagicMock()
        path = tmp_path / "cut.stl"
        path.write_bytes(binary_stl(distinct_facets(2), declared=4))
        _, details = StlParser().parse_with_details(str(path))
        assert details["error"].startswith("BIN-001")
