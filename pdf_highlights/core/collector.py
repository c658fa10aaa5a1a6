import logging
from typing import Dict, Iterable, List, Optional

from pdf_highlights.core.colors import DEFAULT_POLICY, ColorPolicy, classify_components
from pdf_highlights.core.strategies import ExtractionStrategyChain
from pdf_highlights.core.types import ColorCategory, HighlightResult, PageContext

logger = logging.getLogger(__name__)


class HighlightCollector:
    """Turn pages of text-markup annotations into HighlightResult records."""

    def __init__(self, chain: Optional[ExtractionStrategyChain] = None,
                 policy: ColorPolicy = DEFAULT_POLICY):
        self.chain = chain or ExtractionStrategyChain()
        self.policy = policy

    def collect_page(self, page: PageContext) -> List[HighlightResult]:
        results: List[HighlightResult] = []
        for annotation in page.annotations:
            color = classify_components(annotation.color, self.policy)
            if color is None:
                logger.debug(f"Page {page.number}: {annotation.kind} color "
                             f"{list(annotation.color)} matches no category")
                continue
            text, strategy = self.chain.resolve_text(annotation, page)
            if not text:
                continue
            results.append(HighlightResult(
                text=text,
                color=color,
                page=page.number,
                region=annotation.rect,
                strategy=strategy,
            ))
            logger.debug(f"  {color.value}: {text[:60]!r} ({strategy})")
        return results

    def collect(self, pages: Iterable[PageContext]) -> List[HighlightResult]:
        results: List[HighlightResult] = []
        for page in pages:
            logger.info(f"Processing page {page.number}...")
            page_results = self.collect_page(page)
            logger.info(f"Found {len(page_results)} highlights on page {page.number}")
            results.extend(page_results)
        return results


def group_by_color(results: Iterable[HighlightResult]) -> Dict[ColorCategory, List[HighlightResult]]:
    """Results per color, keeping first-seen color order and result order."""
    groups: Dict[ColorCategory, List[HighlightResult]] = {}
    for result in results:
        groups.setdefault(result.color, []).append(result)
    return groups
