"""End-to-end runs over generated PDFs: library entry point, MCP tools, CLI."""

from __future__ import annotations

import asyncio
import json
import re

import pytest
from conftest import BLUE, GOLD, LIGHT_GREEN, PROJECT_ROOT, REVIEW_PAGE, VIOLET, quad_for

from main import config_from_args, main, parse_arguments
from pdf_highlights.backends.pdfplumber_backend import extract_highlights
from pdf_highlights.core import paths
from pdf_highlights.core.config import ExtractionConfig
from pdf_highlights.core.errors import DocumentOpenError
from pdf_highlights.core.types import ColorCategory
from pdf_highlights.tools import mcp_tools


def _annot(rect, color, contents=None):
    x0, y0, x1, y1 = rect
    return {"rect": list(rect), "color": list(color), "quads": list(quad_for(x0, y0, x1, y1)),
            "contents": contents}


MIXED_PAGE = {
    "text": [(72, 700, 12, "Alpha"), (72, 650, 12, "Beta"), (72, 600, 12, "Gamma"), (72, 550, 12, "Delta")],
    "annots": [
        _annot((70, 696, 110, 712), GOLD),
        _annot((70, 646, 100, 662), VIOLET, contents="Beta note"),
        _annot((70, 596, 115, 612), BLUE),
        _annot((70, 546, 110, 562), LIGHT_GREEN),
    ],
}


@pytest.fixture
def allowed_dir(tmp_path):
    saved = list(paths.SEARCH_DIRECTORIES), paths.MAX_FILE_SIZE
    paths.configure([str(tmp_path)])
    yield tmp_path
    paths.SEARCH_DIRECTORIES[:] = saved[0]
    paths.MAX_FILE_SIZE = saved[1]


class TestExtractHighlights:
    def test_single_green_highlight(self, write_pdf):
        results = extract_highlights(write_pdf([REVIEW_PAGE]))
        assert len(results) == 1
        result = results[0]
        assert (result.text, result.color, result.page) == ("Review", ColorCategory.GREEN, 1)
        assert (result.region.x, result.region.y) == (70, 696)

    def test_mixed_colors(self, write_pdf):
        results = extract_highlights(write_pdf([MIXED_PAGE]))
        assert [(r.text, r.color, r.strategy) for r in results] == [
            ("Alpha", ColorCategory.YELLOW, "glyphs"),
            ("Beta note", ColorCategory.PURPLE, "contents"),
            ("Delta", ColorCategory.GREEN, "glyphs"),
        ]

    def test_page_range(self, write_pdf):
        path = write_pdf([MIXED_PAGE, REVIEW_PAGE])
        results = extract_highlights(path, ExtractionConfig(page_range="last"))
        assert [(r.text, r.page) for r in results] == [("Review", 2)]

    def test_no_annotations(self, write_pdf):
        assert extract_highlights(write_pdf([{"text": [(72, 700, 12, "Plain")]}])) == []

    def test_bad_page_range(self, write_pdf):
        with pytest.raises(ValueError):
            extract_highlights(write_pdf([REVIEW_PAGE]), ExtractionConfig(page_range="7"))

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(DocumentOpenError):
            extract_highlights(tmp_path / "nope.pdf")


class TestPaths:
    def test_find_by_name_and_substring(self, allowed_dir, write_pdf):
        path = write_pdf([REVIEW_PAGE], name="Quarterly Report.pdf")
        assert paths.find_file("Quarterly Report.pdf") == path.resolve()
        assert paths.find_file("quarterly") == path.resolve()
        assert paths.find_file("missing") is None

    def test_outside_allowed_directories(self, allowed_dir, tmp_path_factory):
        other = tmp_path_factory.mktemp("elsewhere") / "x.pdf"
        other.write_bytes(b"%PDF-1.4")
        assert paths.validate_and_resolve_path(str(other)) is None

    def test_size_limit(self, allowed_dir, write_pdf):
        path = write_pdf([REVIEW_PAGE])
        paths.MAX_FILE_SIZE = 10
        assert paths.validate_and_resolve_path(str(path)) is None

    def test_list_pdf_files(self, allowed_dir, write_pdf):
        write_pdf([REVIEW_PAGE], name="a.pdf")
        (allowed_dir / "notes.txt").write_text("x")
        nested = allowed_dir / "sub"
        nested.mkdir()
        (nested / "b.pdf").write_bytes(b"%PDF-1.4")
        shallow = paths.list_pdf_files(depth=0)
        assert [f["name"] for f in shallow[0]["files"]] == ["a.pdf"]
        deep = paths.list_pdf_files(depth=1)
        assert deep[0]["pdf_count"] == 2

    def test_invalid_directories_fall_back(self, tmp_path):
        saved = list(paths.SEARCH_DIRECTORIES)
        try:
            dirs = paths.configure([str(tmp_path / "does-not-exist")])
            assert str(tmp_path / "does-not-exist") not in dirs
        finally:
            paths.SEARCH_DIRECTORIES[:] = saved


class TestMcpTools:
    def test_requirement_stays_on_fastmcp_series(self):
        # FastMCP lives at mcp.server.fastmcp only in the 1.x releases.
        pyproject = (PROJECT_ROOT / "pyproject.toml").read_text(encoding="utf-8")
        (requirement,) = re.findall(r'"mcp([^"]*)"', pyproject)
        assert requirement == ">=1.2.0,<2"
        assert mcp_tools.mcp.name == "PDF Highlight Extractor"

    def test_extract_tool_returns_report(self, allowed_dir, write_pdf):
        path = write_pdf([MIXED_PAGE])
        report = json.loads(asyncio.run(mcp_tools.extract_colored_highlights(str(path))))
        assert report["fileName"] == path.name
        assert report["summary"] == {"yellow": 1, "purple": 1, "green": 1}

    def test_extract_tool_no_results(self, allowed_dir, write_pdf):
        path = write_pdf([{"text": [(72, 700, 12, "Plain")]}], name="plain.pdf")
        message = asyncio.run(mcp_tools.extract_colored_highlights("plain.pdf", page_range="first"))
        assert message == "No green, yellow or purple highlights found in 'plain.pdf' (scope: first)."
        assert path.exists()

    def test_extract_tool_errors(self, allowed_dir, write_pdf):
        write_pdf([REVIEW_PAGE])
        assert asyncio.run(mcp_tools.extract_colored_highlights("absent.pdf")).startswith("Error:")
        bad_preset = asyncio.run(mcp_tools.extract_colored_highlights("sample.pdf", preset="fast"))
        assert bad_preset.startswith("Error: Unknown preset")
        bad_range = asyncio.run(mcp_tools.extract_colored_highlights("sample.pdf", page_range="5"))
        assert bad_range.startswith("Error:")

    def test_directory_tools(self, allowed_dir, write_pdf):
        write_pdf([REVIEW_PAGE])
        info = json.loads(asyncio.run(mcp_tools.show_accessible_directories()))
        assert info["accessible_directories"] == [str(allowed_dir.resolve())]
        listing = json.loads(asyncio.run(mcp_tools.list_pdf_files()))
        assert listing[0]["files"][0]["name"] == "sample.pdf"
        assert asyncio.run(mcp_tools.list_pdf_files("no-such-root")).startswith("Error:")


class TestCli:
    def test_extract_writes_json(self, write_pdf, tmp_path, capsys):
        path = write_pdf([REVIEW_PAGE])
        out = tmp_path / "out.json"
        assert main(["extract", str(path), "--output", str(out)]) == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["fileName"] == "sample.pdf"
        assert data["highlightsByColor"]["green"][0]["text"] == "Review"
        assert "GREEN HIGHLIGHTS:" in capsys.readouterr().out

    def test_missing_file_exit_code(self, tmp_path):
        assert main(["extract", str(tmp_path / "missing.pdf")]) == 1

    def test_ocr_setup_failure_exit_code(self, write_pdf, tmp_path):
        path = write_pdf([REVIEW_PAGE])
        tessdata = tmp_path / "tessdata-empty"
        tessdata.mkdir()
        assert main(["extract", str(path), "--ocr", "--lang", "zzz",
                     "--tessdata-dir", str(tessdata)]) == 1

    def test_debug_images_option(self):
        config = config_from_args(parse_arguments(
            ["extract", "scan.pdf", "--ocr", "--debug-images", "debug-out"]))
        assert config.debug_images_dir == "debug-out"
        assert config.uses_ocr
        assert config_from_args(parse_arguments(["extract", "scan.pdf"])).debug_images_dir is None
