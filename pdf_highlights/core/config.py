import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pdf_highlights.core.collector import HighlightCollector
from pdf_highlights.core.colors import DEFAULT_POLICY, ColorPolicy
from pdf_highlights.core.strategies import PRESETS, ExtractionStrategyChain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionConfig:
    preset: str = "default"
    strategies: Optional[Tuple[str, ...]] = None   # overrides preset
    tolerance: float = 2.0
    dpi: int = 300
    ocr_padding: int = 5
    upscale: int = 2
    ocr_language: str = "eng"
    tessdata_dir: Optional[str] = None
    color_policy: ColorPolicy = DEFAULT_POLICY
    page_range: Optional[str] = None
    enable_ocr: bool = False
    debug_images_dir: Optional[str] = None   # PNGs of OCR pages and crops

    def strategy_names(self) -> Tuple[str, ...]:
        if self.strategies:
            return tuple(self.strategies)
        if self.preset not in PRESETS:
            raise ValueError(f"Unknown preset '{self.preset}' (available: {', '.join(PRESETS)})")
        return PRESETS[self.preset]

    @property
    def uses_ocr(self) -> bool:
        return self.enable_ocr and "ocr" in self.strategy_names()


def build_chain(config: ExtractionConfig, renderer=None, ocr_engine=None) -> ExtractionStrategyChain:
    return ExtractionStrategyChain(
        config.strategy_names(),
        tolerance=config.tolerance,
        renderer=renderer,
        ocr_engine=ocr_engine,
        dpi=config.dpi,
        padding=config.ocr_padding,
        upscale=config.upscale,
    )


def build_collector(config: ExtractionConfig, renderer=None, ocr_engine=None) -> HighlightCollector:
    chain = build_chain(config, renderer=renderer, ocr_engine=ocr_engine)
    if "ocr" in chain.names and not chain.ocr_enabled:
        logger.debug("OCR strategy not enabled; it will be skipped")
    return HighlightCollector(chain, config.color_policy)
