import logging
from pathlib import Path
from typing import Set, Tuple

logger = logging.getLogger(__name__)


class DebugImageWriter:
    """Saves rendered pages and OCR crops as PNG files for troubleshooting."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.region_count = 0

    def save_page(self, page_index: int, dpi: int, image) -> Path:
        path = self.directory / f"page_{page_index + 1}_{dpi}dpi.png"
        image.save(path, format="PNG")
        logger.debug(f"Saved page image: {path}")
        return path

    def save_region(self, image) -> Path:
        self.region_count += 1
        path = self.directory / f"highlight_region_{self.region_count:03d}.png"
        image.save(path, format="PNG")
        logger.debug(f"Saved highlight region image: {path}")
        return path


class RecordingRenderer:
    """Page renderer wrapper that writes each newly rendered page once."""

    def __init__(self, renderer, writer: DebugImageWriter):
        self._renderer = renderer
        self._writer = writer
        self._saved: Set[Tuple[int, int]] = set()

    def render(self, page_index: int, dpi: int):
        image = self._renderer.render(page_index, dpi)
        if (page_index, dpi) not in self._saved:
            self._writer.save_page(page_index, dpi, image)
            self._saved.add((page_index, dpi))
        return image


class RecordingOcrEngine:
    """OCR engine wrapper that writes every image it is asked to read."""

    def __init__(self, engine, writer: DebugImageWriter):
        self._engine = engine
        self._writer = writer

    def recognize(self, image) -> str:
        self._writer.save_region(image)
        return self._engine.recognize(image)
