#!/usr/bin/env python3
"""
PDF Highlight Extractor
Extracts green, yellow and purple highlight annotations from PDF files together
with the text they cover, either as a one-shot command or as an MCP server.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from pdf_highlights.core.colors import DEFAULT_POLICY
from pdf_highlights.core.config import ExtractionConfig
from pdf_highlights.core.errors import HighlightExtractionError
from pdf_highlights.core.strategies import PRESETS

logger = logging.getLogger("PDFHighlights")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="PDF Highlight Extractor - colored highlight annotations to text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "\nExamples:\n"
            "  python main.py extract report.pdf\n"
            "  python main.py extract report.pdf --pages 2-4 --output highlights.json\n"
            "  python main.py extract scanned.pdf --preset ocr --tessdata-dir /usr/share/tessdata\n"
            "  python main.py serve ~/Downloads --allow-dir ~/Work/PDFs\n"
        ),
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Extract highlights from one PDF")
    extract.add_argument("pdf", help="Path to the PDF file")
    extract.add_argument("--preset", choices=sorted(PRESETS), default="default",
                         help="Text resolution strategy order (default: default)")
    extract.add_argument("--pages", dest="page_range", default=None,
                         help="Pages: 'first', 'last', '3', '1-5', '1,4-6' (default: all)")
    extract.add_argument("--ocr", action="store_true",
                         help="Enable OCR of the rendered highlight area (needs Tesseract)")
    extract.add_argument("--dpi", type=int, default=300, help="Render resolution for OCR (default: 300)")
    extract.add_argument("--lang", default="eng", help="Tesseract language (default: eng)")
    extract.add_argument("--tessdata-dir", default=None, help="Directory containing <lang>.traineddata")
    extract.add_argument("--tolerance", type=float, default=2.0,
                         help="Glyph containment tolerance in PDF units (default: 2.0)")
    extract.add_argument("--color-tolerance", type=int, default=DEFAULT_POLICY.reference_tolerance,
                         help="Per-channel tolerance for reference colors (default: %(default)s)")
    extract.add_argument("--output", "-o", default=None, help="Write the JSON report to this file")
    extract.add_argument("--debug-images", metavar="DIR", default=None,
                         help="Save rendered pages and OCR crops as PNG files in DIR (with --ocr)")

    serve = sub.add_parser("serve", help="Run the MCP server on stdio")
    serve.add_argument("directories", nargs="*", help="Accessible directories for PDFs (space-separated)")
    serve.add_argument("--allow-dir", action="append", dest="allowed_dirs",
                       help="Add an allowed directory (can be used multiple times)")
    serve.add_argument("--max-file-size", type=int, default=100 * 1024 * 1024,
                       help="Maximum file size in bytes (default: 100MB)")

    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ExtractionConfig:
    return ExtractionConfig(
        preset=args.preset,
        tolerance=args.tolerance,
        dpi=args.dpi,
        ocr_language=args.lang,
        tessdata_dir=args.tessdata_dir,
        color_policy=replace(DEFAULT_POLICY, reference_tolerance=args.color_tolerance),
        page_range=args.page_range,
        enable_ocr=args.ocr or args.preset == "ocr",
        debug_images_dir=args.debug_images,
    )


def run_extract(args: argparse.Namespace) -> int:
    from pdf_highlights.backends.pdfplumber_backend import extract_highlights
    from pdf_highlights.tools.report import build_report, format_summary, write_report

    config = config_from_args(args)
    try:
        results = extract_highlights(args.pdf, config)
    except (HighlightExtractionError, ValueError) as e:
        logger.error(str(e))
        return 1

    print(format_summary(results))
    if args.output:
        report = build_report(results, os.path.basename(args.pdf), config.preset,
                              config.dpi if config.uses_ocr else None)
        path = write_report(report, args.output)
        print(f"JSON output saved to: {path.resolve()}")
    return 0


def run_server(args: argparse.Namespace) -> int:
    from pdf_highlights.core import paths
    from pdf_highlights.tools.mcp_tools import mcp

    directories = list(args.directories or []) + list(args.allowed_dirs or [])
    paths.configure(directories, args.max_file_size)
    logger.info("Starting PDF Highlight Extractor MCP server...")
    mcp.run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    if args.command == "extract":
        return run_extract(args)
    return run_server(args)


if __name__ == "__main__":
    sys.exit(main())
