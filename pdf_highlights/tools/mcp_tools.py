import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from pdf_highlights.backends.pdfplumber_backend import extract_highlights
from pdf_highlights.core import paths as _paths
from pdf_highlights.core.config import ExtractionConfig
from pdf_highlights.core.errors import HighlightExtractionError
from pdf_highlights.core.paths import ALLOWED_EXTENSIONS, find_file
from pdf_highlights.core.strategies import PRESETS
from pdf_highlights.tools.report import build_report

logger = logging.getLogger(__name__)

mcp = FastMCP("PDF Highlight Extractor")


@mcp.tool()
async def extract_colored_highlights(
    file_path: str,
    page_range: Optional[str] = None,
    preset: str = "default",
    ocr: bool = False,
) -> str:
    """Extract green, yellow and purple highlights with the text they cover.

    Parameters
    ----------
    file_path: str
        Filename (relative) or absolute path to the PDF. The file must reside within the configured accessible directories.
    page_range: Optional[str]
        `first`, `last`, `N`, `S-E`, comma-separated combinations, or `None` for all pages.
    preset: str
        Strategy order: "default", "geometric", "ocr" or "area".
    ocr: bool
        Allow OCR of the rendered highlight area when no text layer matches (needs Tesseract).

    Returns JSON with `totalHighlights`, `summary` and `highlightsByColor`
    (`{green|yellow|purple: [{text, page, region, strategy}]}`).
    """
    path = find_file(file_path)
    if not path:
        return (
            "Error: Could not find file '{file}'. Provide an absolute path or place the file within the configured accessible directories."
        ).format(file=file_path)
    if preset not in PRESETS:
        return f"Error: Unknown preset '{preset}'. Available: {', '.join(PRESETS)}"

    config = ExtractionConfig(preset=preset, page_range=page_range,
                              enable_ocr=ocr or preset == "ocr")
    try:
        results = extract_highlights(path, config)
    except (HighlightExtractionError, ValueError) as e:
        return f"Error: {e}"

    if not results:
        scope = page_range or "all"
        return f"No green, yellow or purple highlights found in '{path.name}' (scope: {scope})."
    report = build_report(results, path.name, preset, config.dpi if config.uses_ocr else None)
    return json.dumps(report, indent=2, ensure_ascii=False)


@mcp.tool()
async def list_pdf_files(directory: str = "all", depth: int = 0, limit: int = 50) -> str:
    """
    List PDFs under the configured directories.

    Parameters
    ----------
    directory : str, default "all"
        "all" scans every allowed root; anything else is a substring filter on
        the root's basename or absolute path.
    depth : int, default 0
        0 = only the root. Clamped to 5.
    limit : int, default 50
        Most recent files shown per root. Clamped to 1..200.
    """
    listing = _paths.list_pdf_files(directory, depth, limit)
    if not listing:
        return f"Error: No accessible directory matched '{directory}'."
    return json.dumps(listing, indent=2, ensure_ascii=False)


@mcp.tool()
async def show_accessible_directories() -> str:
    """Return the current directory/configuration constraints as JSON."""
    info = {
        "accessible_directories": _paths.SEARCH_DIRECTORIES,
        "directory_count": len(_paths.SEARCH_DIRECTORIES),
        "max_file_size_mb": _paths.MAX_FILE_SIZE // (1024 * 1024),
        "allowed_extensions": ALLOWED_EXTENSIONS,
    }
    return json.dumps(info, indent=2, ensure_ascii=False)
