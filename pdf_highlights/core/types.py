from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, TypedDict

# Annotation subtypes that carry quad points / color (PDF 32000 §12.5.6.10)
TEXT_MARKUP_KINDS = ("Highlight", "Underline", "StrikeOut", "Squiggly")


class ColorCategory(Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    PURPLE = "PURPLE"


@dataclass(frozen=True)
class Glyph:
    """One positioned character. Coordinates are page user space (y up)."""
    text: str
    x: float
    y: float
    size: float = 0.0
    font_name: Optional[str] = None


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle; (x, y) is the lower-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "Region":
        left, right = min(x0, x1), max(x0, x1)
        bottom, top = min(y0, y1), max(y0, y1)
        return cls(left, bottom, right - left, top - bottom)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class PixelRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as expected by PIL's Image.crop."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class TextMarkupAnnotation:
    kind: str
    rect: Region
    color: Tuple[float, ...] = ()
    contents: Optional[str] = None
    quad_points: Tuple[float, ...] = ()


@dataclass(frozen=True)
class PageContext:
    index: int                # 0-based
    width: float
    height: float
    annotations: Tuple[TextMarkupAnnotation, ...] = ()
    glyphs: Tuple[Glyph, ...] = ()

    @property
    def number(self) -> int:
        return self.index + 1


class RegionRecord(TypedDict):
    x: float
    y: float
    width: float
    height: float


class HighlightRecord(TypedDict):
    text: str
    color: str
    page: int
    region: RegionRecord
    strategy: str


@dataclass(frozen=True)
class HighlightResult:
    text: str
    color: ColorCategory
    page: int                 # 1-based
    region: Region
    strategy: str = ""

    def to_dict(self) -> HighlightRecord:
        return {
            "text": self.text,
            "color": self.color.value,
            "page": self.page,
            "region": self.region.to_dict(),
            "strategy": self.strategy,
        }
