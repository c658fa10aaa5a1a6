from collections import defaultdict
from typing import Dict, List, Sequence

from pdf_highlights.core.geometry import DEFAULT_TOLERANCE, contains_with_tolerance
from pdf_highlights.core.types import Glyph, Region


def reading_order(glyphs: Sequence[Glyph]) -> List[Glyph]:
    """Top-to-bottom, left-to-right in PDF space (y grows upward)."""
    return sorted(glyphs, key=lambda g: (-g.y, g.x))


def _join_regions(texts: Sequence[str]) -> str:
    return " ".join(t.strip() for t in texts if t.strip()).strip()


def resolve(regions: Sequence[Region], glyphs: Sequence[Glyph],
            tolerance: float = DEFAULT_TOLERANCE) -> str:
    """Text of the glyphs inside `regions`, one region per highlighted line."""
    ordered = reading_order(glyphs)
    texts = []
    for region in regions:
        texts.append("".join(
            g.text for g in ordered if contains_with_tolerance(g, region, tolerance)
        ))
    return _join_regions(texts)


class TextRegionResolver:
    """Same result as :func:`resolve`, with the page's glyphs sorted once and
    bucketed by y so each region only scans the rows it can touch.

    Annotations on one page share the page's glyph tuple, so the index for
    the most recent tuple is kept.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, bucket_size: float = 10.0):
        if bucket_size <= 0:
            raise ValueError("bucket_size must be positive")
        self.tolerance = tolerance
        self.bucket_size = bucket_size
        self._indexed_glyphs = None
        self._buckets: Dict[int, List[int]] = {}
        self._ordered: List[Glyph] = []

    def _bucket(self, y: float) -> int:
        return int(y // self.bucket_size)

    def _index(self, glyphs: Sequence[Glyph]) -> None:
        if self._indexed_glyphs is glyphs:
            return
        self._ordered = reading_order(glyphs)
        buckets: Dict[int, List[int]] = defaultdict(list)
        for position, glyph in enumerate(self._ordered):
            buckets[self._bucket(glyph.y)].append(position)
        self._buckets = dict(buckets)
        self._indexed_glyphs = glyphs

    def _candidates(self, region: Region) -> List[int]:
        low = self._bucket(region.y - self.tolerance)
        high = self._bucket(region.y1 + self.tolerance)
        positions: List[int] = []
        for key in range(low, high + 1):
            positions.extend(self._buckets.get(key, ()))
        # Positions index into the reading-ordered list, so sorting them
        # restores reading order across buckets.
        positions.sort()
        return positions

    def resolve(self, regions: Sequence[Region], glyphs: Sequence[Glyph]) -> str:
        self._index(glyphs)
        texts = []
        for region in regions:
            chars = []
            for position in self._candidates(region):
                glyph = self._ordered[position]
                if contains_with_tolerance(glyph, region, self.tolerance):
                    chars.append(glyph.text)
            texts.append("".join(chars))
        return _join_regions(texts)
