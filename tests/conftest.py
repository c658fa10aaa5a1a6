"""Pytest configuration and shared fixtures.

This module provides:
- Glyph/annotation/page factories for the in-memory engine tests
- A minimal PDF writer producing real files (Helvetica text + markup
  annotations) for the backend and end-to-end tests
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

# Ensure project root is importable when running tests via python -m pytest
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_highlights.core.types import (  # noqa: E402
    Glyph,
    PageContext,
    Region,
    TextMarkupAnnotation,
)

LIGHT_GREEN = (197 / 255, 251 / 255, 114 / 255)
GOLD = (1.0, 193 / 255, 0.0)
VIOLET = (150 / 255, 67 / 255, 252 / 255)
BLUE = (0.0, 0.0, 1.0)


def glyph_line(text: str, x: float, y: float, advance: float = 5.0, size: float = 10.0) -> List[Glyph]:
    """One glyph per character, evenly spaced on a line."""
    return [Glyph(ch, x + i * advance, y, size) for i, ch in enumerate(text)]


def quad_for(x0: float, y0: float, x1: float, y1: float) -> tuple:
    """Quad points in the usual producer order: UL, UR, LL, LR."""
    return (x0, y1, x1, y1, x0, y0, x1, y0)


def highlight(
    rect: Region,
    color: Sequence[float] = LIGHT_GREEN,
    contents: Optional[str] = None,
    quads: Sequence[float] = (),
    kind: str = "Highlight",
) -> TextMarkupAnnotation:
    return TextMarkupAnnotation(
        kind=kind,
        rect=rect,
        color=tuple(color),
        contents=contents,
        quad_points=tuple(quads),
    )


def make_page(annotations=(), glyphs=(), index: int = 0,
              width: float = 612.0, height: float = 792.0) -> PageContext:
    return PageContext(index=index, width=width, height=height,
                       annotations=tuple(annotations), glyphs=tuple(glyphs))


# ==================== Minimal PDF writer ====================


def _pdf_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return f"({escaped})"


def _numbers(values: Sequence[float]) -> str:
    return "[" + " ".join(f"{v:g}" for v in values) + "]"


def _annotation_dict(annot: Dict) -> str:
    parts = [f"/Type /Annot /Subtype /{annot.get('subtype', 'Highlight')}",
             f"/Rect {_numbers(annot['rect'])}"]
    if annot.get("color") is not None:
        parts.append(f"/C {_numbers(annot['color'])}")
    if annot.get("quads"):
        parts.append(f"/QuadPoints {_numbers(annot['quads'])}")
    if annot.get("contents") is not None:
        parts.append(f"/Contents {_pdf_string(annot['contents'])}")
    return "<< " + " ".join(parts) + " >>"


def build_pdf(pages: Sequence[Dict], media_box=(0, 0, 612, 792)) -> bytes:
    """Serialize pages of ``{"text": [(x, y, size, str)], "annots": [dict]}``.

    Annotation dicts take ``subtype``, ``rect``, ``color``, ``quads`` and
    ``contents``; a ``None`` entry is written as ``null`` in /Annots.
    Cross-reference offsets are computed, so the output is a well-formed PDF
    that PyPDF2 and pdfplumber read without repair.
    """
    objects: List[Optional[bytes]] = [None, None, None]  # catalog, pages, font

    def add(body: bytes) -> int:
        objects.append(body)
        return len(objects)

    objects[2] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>"
    page_ids = []
    for page in pages:
        stream = "".join(
            f"BT /F1 {size:g} Tf {x:g} {y:g} Td {_pdf_string(s)} Tj ET\n"
            for x, y, size, s in page.get("text", [])
        ).encode("latin-1")
        content_id = add(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"endstream")
        annot_refs = [
            "null" if a is None else f"{add(_annotation_dict(a).encode('latin-1'))} 0 R"
            for a in page.get("annots", [])
        ]
        annots = ""
        if annot_refs:
            annots = " /Annots [" + " ".join(annot_refs) + "]"
        page_ids.append(add((
            f"<< /Type /Page /Parent 2 0 R /MediaBox {_numbers(media_box)} "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_id} 0 R{annots} >>"
        ).encode("latin-1")))

    objects[0] = b"<< /Type /Catalog /Pages 2 0 R >>"
    kids = " ".join(f"{i} 0 R" for i in page_ids)
    objects[1] = f"<< /Type /Pages /Kids [{kids}] /Count {len(page_ids)} >>".encode("latin-1")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture
def write_pdf(tmp_path):
    """Write a generated PDF under tmp_path and return its path."""
    def _write(pages: Sequence[Dict], name: str = "sample.pdf", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(pages, **kwargs))
        return path
    return _write


# Helvetica 12pt "Review" drawn at (72, 700) spans x 72..111.3 and has its
# glyph boxes between y 697.5 and 709.5.
REVIEW_PAGE = {
    "text": [(72, 700, 12, "Review"), (300, 700, 12, "Other")],
    "annots": [{
        "subtype": "Highlight",
        "rect": [70, 696, 114, 712],
        "color": list(LIGHT_GREEN),
        "quads": list(quad_for(70, 696, 114, 712)),
    }],
}
