from typing import List, Sequence

from pdf_highlights.core.types import Glyph, PixelRect, Region

DEFAULT_TOLERANCE = 2.0
DEFAULT_PADDING = 5


# --- Quad points ---

def quad_to_region(quad: Sequence[float]) -> Region:
    """Bounding box of one quadrilateral given as x1 y1 x2 y2 x3 y3 x4 y4.

    Producers disagree on corner order, so min/max is taken over all four
    points per axis.
    """
    if len(quad) != 8:
        raise ValueError(f"A quadrilateral needs 8 numbers, got {len(quad)}")
    xs = [float(quad[i]) for i in range(0, 8, 2)]
    ys = [float(quad[i]) for i in range(1, 8, 2)]
    x0, x1 = min(xs), max(xs)
    y0, y1 = min(ys), max(ys)
    return Region(x0, y0, x1 - x0, y1 - y0)


def quads_to_regions(quad_points: Sequence[float]) -> List[Region]:
    """One region per complete group of 8; a trailing partial group is ignored."""
    return [
        quad_to_region(quad_points[i:i + 8])
        for i in range(0, len(quad_points) - 7, 8)
    ]


def union_regions(regions: Sequence[Region]) -> Region:
    x0 = min(r.x for r in regions)
    y0 = min(r.y for r in regions)
    x1 = max(r.x1 for r in regions)
    y1 = max(r.y1 for r in regions)
    return Region(x0, y0, x1 - x0, y1 - y0)


def expand_region(region: Region, dx: float, dy: float) -> Region:
    x = max(region.x - dx, 0.0)
    y = max(region.y - dy, 0.0)
    return Region(x, y, region.x1 + dx - x, region.y1 + dy - y)


# --- Containment ---

def contains_with_tolerance(glyph: Glyph, region: Region,
                            tolerance: float = DEFAULT_TOLERANCE) -> bool:
    return (
        region.x - tolerance <= glyph.x <= region.x1 + tolerance
        and region.y - tolerance <= glyph.y <= region.y1 + tolerance
    )


# --- PDF space -> raster space ---

def pdf_to_image_y(page_height: float, y_pdf: float, scale_y: float = 1.0) -> float:
    """Convert PDF user-space Y (origin bottom-left, y up) to image Y
    (origin top-left, y down)."""
    return (float(page_height) - float(y_pdf)) * scale_y


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def pdf_rect_to_image_rect(
    rect: Region,
    page_width: float,
    page_height: float,
    image_width: int,
    image_height: int,
    padding: int = DEFAULT_PADDING,
) -> PixelRect:
    """Map a page-space rectangle onto a rendered bitmap of the page.

    The result is clamped to the image and grown by `padding` pixels on every
    side (re-clamped). A rectangle entirely off the image yields an empty
    rectangle, never negative dimensions.
    """
    if page_width <= 0 or page_height <= 0 or image_width <= 0 or image_height <= 0:
        return PixelRect(0, 0, 0, 0)

    scale_x = image_width / page_width
    scale_y = image_height / page_height

    left = rect.x * scale_x
    right = rect.x1 * scale_x
    top = pdf_to_image_y(page_height, rect.y1, scale_y)
    bottom = pdf_to_image_y(page_height, rect.y, scale_y)

    x = _clamp(int(left), 0, image_width - 1)
    y = _clamp(int(top), 0, image_height - 1)

    # Nothing of the rectangle is on the image, so there is nothing to pad.
    if right < 0 or left >= image_width or bottom < 0 or top >= image_height:
        return PixelRect(x, y, 0, 0)

    width = _clamp(int(right), 0, image_width) - x
    height = _clamp(int(bottom), 0, image_height) - y
    width = max(width, 0)
    height = max(height, 0)

    padded_x = max(0, x - padding)
    padded_y = max(0, y - padding)
    right = min(image_width, x + width + padding)
    bottom = min(image_height, y + height + padding)
    return PixelRect(padded_x, padded_y, right - padded_x, bottom - padded_y)
