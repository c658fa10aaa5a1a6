"""Ordered text-resolution strategies for one highlight annotation.

Each strategy takes ``(annotation, page)`` and returns text or an empty
string. The chain accepts the first non-empty result; an exception inside a
strategy only means that strategy had nothing to offer.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from pdf_highlights.core.geometry import (
    DEFAULT_PADDING,
    expand_region,
    pdf_rect_to_image_rect,
    quads_to_regions,
)
from pdf_highlights.core.resolver import TextRegionResolver
from pdf_highlights.core.types import PageContext, TextMarkupAnnotation

logger = logging.getLogger(__name__)

Strategy = Callable[[TextMarkupAnnotation, PageContext], str]

PRESETS: Dict[str, Tuple[str, ...]] = {
    "default": ("contents", "glyphs", "ocr", "coordinates"),
    "geometric": ("contents", "glyphs", "coordinates"),
    "ocr": ("contents", "ocr", "glyphs", "coordinates"),
    "area": ("glyphs", "contents", "nearby", "coordinates"),
}

PRESET_DESCRIPTIONS = {
    "default": "Annotation contents, coordinate-based text extraction, OCR fallback",
    "geometric": "Annotation contents and coordinate-based text extraction",
    "ocr": "OCR-based text extraction using Tesseract",
    "area": "Area-based text extraction with nearby-text fallback",
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")


def clean_ocr_text(text: Optional[str]) -> str:
    if not text:
        return ""
    text = _CONTROL_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def upscale_image(image: Image.Image, factor: int) -> Image.Image:
    """Enlarge a crop before OCR; Tesseract reads small text poorly."""
    return image.resize((image.width * factor, image.height * factor), Image.LANCZOS)


def describe_region(annotation: TextMarkupAnnotation) -> str:
    rect = annotation.rect
    return (f"Highlighted area at ({rect.x:.1f}, {rect.y:.1f}) "
            f"size {rect.width:.1f} x {rect.height:.1f}")


def annotation_regions(annotation: TextMarkupAnnotation):
    if annotation.quad_points:
        return quads_to_regions(annotation.quad_points)
    return [annotation.rect]


class ExtractionStrategyChain:
    def __init__(
        self,
        strategies: Sequence[str] = PRESETS["default"],
        tolerance: float = 2.0,
        renderer=None,
        ocr_engine=None,
        dpi: int = 300,
        padding: int = DEFAULT_PADDING,
        upscale: int = 2,
    ):
        self.resolver = TextRegionResolver(tolerance=tolerance)
        self.renderer = renderer
        self.ocr_engine = ocr_engine
        self.dpi = dpi
        self.padding = padding
        self.upscale = upscale

        available: Dict[str, Strategy] = {
            "contents": self.from_contents,
            "glyphs": self.from_glyphs,
            "ocr": self.from_ocr,
            "nearby": self.from_nearby_text,
            "coordinates": self.from_coordinates,
        }
        unknown = [name for name in strategies if name not in available]
        if unknown:
            raise ValueError(f"Unknown strategies: {', '.join(unknown)} "
                             f"(available: {', '.join(available)})")
        self.names: List[str] = list(strategies)
        self._strategies = [(name, available[name]) for name in self.names]

    @classmethod
    def from_preset(cls, preset: str, **kwargs) -> "ExtractionStrategyChain":
        if preset not in PRESETS:
            raise ValueError(f"Unknown preset '{preset}' (available: {', '.join(PRESETS)})")
        return cls(PRESETS[preset], **kwargs)

    @property
    def ocr_enabled(self) -> bool:
        return self.renderer is not None and self.ocr_engine is not None

    def resolve_text(self, annotation: TextMarkupAnnotation, page: PageContext) -> Tuple[str, str]:
        """Return ``(text, strategy_name)``; ``("", "")`` when nothing resolved."""
        for name, strategy in self._strategies:
            try:
                text = (strategy(annotation, page) or "").strip()
            except Exception as e:
                logger.debug(f"Strategy '{name}' failed on page {page.number}: {e}")
                continue
            if text:
                return text, name
        return "", ""

    # --- strategies ---

    def from_contents(self, annotation: TextMarkupAnnotation, page: PageContext) -> str:
        return annotation.contents or ""

    def from_glyphs(self, annotation: TextMarkupAnnotation, page: PageContext) -> str:
        return self.resolver.resolve(annotation_regions(annotation), page.glyphs)

    def from_nearby_text(self, annotation: TextMarkupAnnotation, page: PageContext) -> str:
        # Grow the highlight by one line height so glyphs just above or below
        # a slightly misplaced highlight are picked up.
        line_height = max((g.size for g in page.glyphs), default=0.0)
        if line_height <= 0:
            return ""
        region = expand_region(annotation.rect, 0.0, line_height)
        return self.resolver.resolve([region], page.glyphs)

    def from_ocr(self, annotation: TextMarkupAnnotation, page: PageContext) -> str:
        if not self.ocr_enabled:
            return ""
        image = self.renderer.render(page.index, self.dpi)
        box = pdf_rect_to_image_rect(
            annotation.rect, page.width, page.height,
            image.width, image.height, padding=self.padding,
        )
        if box.is_empty:
            return ""
        crop = image.crop(box.box())
        if self.upscale > 1:
            crop = upscale_image(crop, self.upscale)
        return clean_ocr_text(self.ocr_engine.recognize(crop))

    def from_coordinates(self, annotation: TextMarkupAnnotation, page: PageContext) -> str:
        return describe_region(annotation)
