"""Highlight color classification.

Highlight colors vary between PDF producers (a "green" highlighter may be
RGB(197, 251, 114) in one viewer and pure green in another), so a color is
first checked against broad discriminative rules and only then against a
table of reference colors with a per-channel tolerance. Every call site goes
through :func:`classify`; the thresholds live in :class:`ColorPolicy`.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from pdf_highlights.core.types import ColorCategory

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class ColorPolicy:
    green_min: int = 200
    yellow_red_min: int = 200
    yellow_green_min: int = 150
    yellow_blue_max: int = 100
    purple_blue_min: int = 200
    purple_red_min: int = 100
    purple_green_max: int = 150
    reference_tolerance: int = 80
    references: Tuple[Tuple[ColorCategory, RGB], ...] = (
        (ColorCategory.GREEN, (0, 255, 0)),
        (ColorCategory.YELLOW, (255, 255, 0)),
        (ColorCategory.PURPLE, (128, 0, 128)),
    )


DEFAULT_POLICY = ColorPolicy()


def _match_rules(r: int, g: int, b: int, policy: ColorPolicy) -> Optional[ColorCategory]:
    # Rule order matters: a color that is green-dominant never reaches the
    # yellow test, which keeps the categories disjoint.
    if g > policy.green_min and g > r and g > b:
        return ColorCategory.GREEN
    if r > policy.yellow_red_min and g > policy.yellow_green_min and b < policy.yellow_blue_max:
        return ColorCategory.YELLOW
    if b > policy.purple_blue_min and r > policy.purple_red_min and g < policy.purple_green_max:
        return ColorCategory.PURPLE
    return None


def _match_reference(r: int, g: int, b: int, policy: ColorPolicy) -> Optional[ColorCategory]:
    tol = policy.reference_tolerance
    for category, (rr, rg, rb) in policy.references:
        if abs(r - rr) <= tol and abs(g - rg) <= tol and abs(b - rb) <= tol:
            return category
    return None


def classify(r: int, g: int, b: int, policy: ColorPolicy = DEFAULT_POLICY) -> Optional[ColorCategory]:
    """Return the highlight category for an 8-bit RGB color, or None."""
    return _match_rules(r, g, b, policy) or _match_reference(r, g, b, policy)


def to_rgb255(components: Sequence[float]) -> RGB:
    """Convert 0..1 DeviceRGB components to 8-bit channels (round half up)."""
    channels = [int(float(c) * 255 + 0.5) for c in components[:3]]
    r, g, b = (max(0, min(255, c)) for c in channels)
    return r, g, b


def classify_components(components: Optional[Sequence[float]],
                        policy: ColorPolicy = DEFAULT_POLICY) -> Optional[ColorCategory]:
    """Classify an annotation's /C entry.

    Missing or transparent colors, grayscale entries and non-numeric values
    are not highlights of interest.
    """
    if not components or len(components) < 3:
        return None
    try:
        r, g, b = to_rgb255(components)
    except (TypeError, ValueError):
        logger.debug(f"Unreadable color components: {components!r}")
        return None
    return classify(r, g, b, policy)
