from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
import logging
import PyPDF2
import pdfplumber

from pdf_highlights.backends.debug_images import DebugImageWriter, RecordingOcrEngine, RecordingRenderer
from pdf_highlights.backends.pypdf2_backend import extract_markup_annotations
from pdf_highlights.core.config import ExtractionConfig, build_collector
from pdf_highlights.core.errors import DocumentOpenError
from pdf_highlights.core.page_range import parse_page_range
from pdf_highlights.core.types import Glyph, HighlightResult, PageContext

logger = logging.getLogger(__name__)


def glyphs_from_chars(chars: List[Dict], x_origin: float = 0.0) -> Tuple[Glyph, ...]:
    """pdfplumber chars -> Glyphs anchored at (left edge, vertical middle).

    Glyphs share the annotation frame: origin at the media box's lower-left
    corner, y up. pdfplumber reports x0 in the page's own coordinates (the
    frame of ``page.bbox``) but y0/y1 already relative to the page bottom, so
    only x is shifted, by ``x_origin`` (``page.bbox[0]``).
    """
    glyphs = []
    for c in chars:
        text = c.get("text") or ""
        if not text:
            continue
        glyphs.append(Glyph(
            text=text,
            x=float(c["x0"]) - x_origin,
            y=(float(c["y0"]) + float(c["y1"])) / 2,
            size=float(c.get("size") or 0.0),
            font_name=c.get("fontname"),
        ))
    return tuple(glyphs)


class PageRenderer:
    """Renders pages of an open pdfplumber document; keeps the last bitmap."""

    def __init__(self, pdf):
        self._pdf = pdf
        self._key: Optional[Tuple[int, int]] = None
        self._image = None

    def render(self, page_index: int, dpi: int):
        key = (page_index, dpi)
        if self._key != key:
            page = self._pdf.pages[page_index]
            self._image = page.to_image(resolution=dpi).original.convert("RGB")
            self._key = key
        return self._image


class HighlightDocument:
    def __init__(self, path: Path, reader, pdf):
        self.path = path
        self._reader = reader
        self._pdf = pdf
        self.page_count = len(pdf.pages)
        self.renderer = PageRenderer(pdf)

    def load_page(self, page_index: int) -> PageContext:
        pypdf_page = self._reader.pages[page_index]
        pl_page = self._pdf.pages[page_index]
        return PageContext(
            index=page_index,
            width=float(pl_page.width),
            height=float(pl_page.height),
            annotations=tuple(extract_markup_annotations(pypdf_page)),
            glyphs=glyphs_from_chars(pl_page.chars, float(pl_page.bbox[0])),
        )

    def pages(self, page_range: Optional[str] = None) -> Iterator[PageContext]:
        """Yield pages in order; an unreadable page is logged and skipped."""
        for page_index in parse_page_range(self.page_count, page_range):
            try:
                page = self.load_page(page_index)
            except Exception as e:
                logger.warning(f"Skipping unreadable page {page_index + 1} of {self.path.name}: {e}")
                continue
            yield page


@contextmanager
def open_document(pdf_path: Path) -> Iterator[HighlightDocument]:
    pdf_path = Path(pdf_path)
    try:
        f = open(pdf_path, "rb")
    except OSError as e:
        logger.error(f"Cannot read {pdf_path}: {e}")
        raise DocumentOpenError(pdf_path, e) from e
    with f:
        try:
            reader = PyPDF2.PdfReader(f)
            pdf = pdfplumber.open(pdf_path)
        except Exception as e:
            logger.error(f"PDF parsing failed for {pdf_path}: {e}")
            raise DocumentOpenError(pdf_path, e) from e
        with pdf:
            try:
                doc = HighlightDocument(pdf_path, reader, pdf)
            except Exception as e:
                logger.error(f"Cannot read page tree of {pdf_path}: {e}")
                raise DocumentOpenError(pdf_path, e) from e
            yield doc


def extract_highlights(pdf_path: Path, config: Optional[ExtractionConfig] = None,
                       ocr_engine=None) -> List[HighlightResult]:
    """Extract classified highlights from one PDF.

    When the configured strategies include OCR and no engine is given, a
    TesseractEngine is created before the document is opened so that missing
    language data fails the run up front. With ``debug_images_dir`` set, the
    rendered pages and every OCR crop are also written there as PNG files.
    """
    config = config or ExtractionConfig()
    if config.uses_ocr and ocr_engine is None:
        from pdf_highlights.backends.tesseract_backend import TesseractEngine
        ocr_engine = TesseractEngine(config.ocr_language, config.tessdata_dir)

    with open_document(pdf_path) as doc:
        logger.info(f"Extracting highlights from {doc.path.name} ({doc.page_count} pages)")
        renderer = doc.renderer if ocr_engine is not None else None
        if config.debug_images_dir and ocr_engine is not None:
            writer = DebugImageWriter(config.debug_images_dir)
            renderer = RecordingRenderer(renderer, writer)
            ocr_engine = RecordingOcrEngine(ocr_engine, writer)
        elif config.debug_images_dir:
            logger.debug("Debug images are only written when OCR runs")
        collector = build_collector(config, renderer=renderer, ocr_engine=ocr_engine)
        return collector.collect(doc.pages(config.page_range))
