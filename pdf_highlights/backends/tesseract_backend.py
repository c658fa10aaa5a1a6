import logging
import os
from pathlib import Path
from typing import List, Optional

import pytesseract

from pdf_highlights.core.errors import OcrSetupError

logger = logging.getLogger(__name__)

# Page segmentation 6 = single uniform block of text; engine 1 = LSTM only.
PAGE_SEG_MODE = 6
ENGINE_MODE = 1


def candidate_tessdata_dirs(explicit: Optional[str] = None) -> List[str]:
    """Directories searched for ``<lang>.traineddata``, most specific first."""
    candidates = [
        explicit,
        os.environ.get("TESSDATA_PREFIX"),
        os.path.join(os.getcwd(), "tessdata"),
        "/usr/share/tesseract-ocr/5/tessdata",
        "/usr/share/tesseract-ocr/4.00/tessdata",
        "/usr/share/tessdata",
        "/usr/local/share/tessdata",
        "/opt/homebrew/share/tessdata",
        r"C:\Program Files\Tesseract-OCR\tessdata",
        r"C:\Program Files (x86)\Tesseract-OCR\tessdata",
    ]
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        candidates.append(os.path.join(local_app_data, "Programs", "Tesseract-OCR", "tessdata"))

    seen = set()
    ordered = []
    for path in candidates:
        if path and path not in seen:
            seen.add(path)
            ordered.append(path)
    return ordered


def find_tessdata_dir(language: str, explicit: Optional[str] = None) -> str:
    searched = candidate_tessdata_dirs(explicit)
    for path in searched:
        if (Path(path) / f"{language}.traineddata").is_file():
            return path
    raise OcrSetupError(f"Could not find Tesseract data for language '{language}'", searched)


class TesseractEngine:
    """pytesseract wrapper configured once; raises OcrSetupError if unusable."""

    def __init__(self, language: str = "eng", tessdata_dir: Optional[str] = None):
        self.language = language
        self.tessdata_dir = find_tessdata_dir(language, tessdata_dir)
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise OcrSetupError(f"Tesseract executable not found: {e}") from e
        logger.info(f"Using Tesseract {version} with data path: {self.tessdata_dir}")

    @property
    def config(self) -> str:
        return (f'--tessdata-dir "{self.tessdata_dir}" '
                f"--psm {PAGE_SEG_MODE} --oem {ENGINE_MODE}")

    def recognize(self, image) -> str:
        return pytesseract.image_to_string(image, lang=self.language, config=self.config)
