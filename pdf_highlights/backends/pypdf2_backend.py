import logging
from typing import List, Optional, Tuple

from pdf_highlights.core.types import TEXT_MARKUP_KINDS, Region, TextMarkupAnnotation

logger = logging.getLogger(__name__)

_KINDS_BY_NAME = {kind.lower(): kind for kind in TEXT_MARKUP_KINDS}


def _floats(value) -> Tuple[float, ...]:
    if value is None:
        return ()
    try:
        return tuple(float(v) for v in value)
    except (TypeError, ValueError):
        return ()


def _contents(obj) -> Optional[str]:
    value = obj.get("/Contents")
    if value is None:
        return None
    return str(value)


def page_origin(page) -> Tuple[float, float]:
    box = page.mediabox
    return float(box.left), float(box.bottom)


def parse_markup_annotation(obj, origin: Tuple[float, float] = (0.0, 0.0)) -> Optional[TextMarkupAnnotation]:
    """Build a TextMarkupAnnotation from a PDF annotation dictionary.

    Returns None for annotations that are not text markup (links, popups,
    sticky notes, ...) or that lack a usable /Rect. Coordinates are shifted
    so the media box origin becomes (0, 0), matching pdfplumber's glyphs.
    """
    subtype = str(obj.get("/Subtype", "")).lstrip("/")
    kind = _KINDS_BY_NAME.get(subtype.lower())
    if kind is None:
        return None

    rect = _floats(obj.get("/Rect"))
    if len(rect) < 4:
        logger.debug(f"{kind} annotation without a usable /Rect skipped")
        return None
    ox, oy = origin
    region = Region.from_corners(rect[0] - ox, rect[1] - oy, rect[2] - ox, rect[3] - oy)

    quads = _floats(obj.get("/QuadPoints"))
    if quads and (ox or oy):
        quads = tuple(v - (ox if i % 2 == 0 else oy) for i, v in enumerate(quads))

    return TextMarkupAnnotation(
        kind=kind,
        rect=region,
        color=_floats(obj.get("/C"))[:4],
        contents=_contents(obj),
        quad_points=quads,
    )


def extract_markup_annotations(page) -> List[TextMarkupAnnotation]:
    """Text-markup annotations of a PyPDF2 page, in document order."""
    if "/Annots" not in page:
        return []
    origin = page_origin(page)
    items: List[TextMarkupAnnotation] = []
    for position, annot in enumerate(page["/Annots"]):
        try:
            item = parse_markup_annotation(annot.get_object(), origin)
        except Exception as e:
            logger.warning(f"Skipping unreadable annotation #{position + 1}: {e}")
            continue
        if item is not None:
            items.append(item)
    return items
