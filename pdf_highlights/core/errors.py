from typing import Sequence


class HighlightExtractionError(Exception):
    """Run-terminating failure."""


class DocumentOpenError(HighlightExtractionError):
    def __init__(self, path, cause: Exception):
        super().__init__(f"Cannot open PDF '{path}': {cause}")
        self.path = path
        self.cause = cause


class OcrSetupError(HighlightExtractionError):
    def __init__(self, message: str, searched: Sequence[str] = ()):
        lines = [message]
        if searched:
            lines.append("Searched in the following locations:")
            lines.extend(f"  - {p}" for p in searched)
            lines.append("Install Tesseract OCR with the language data, "
                         "set TESSDATA_PREFIX, or pass --tessdata-dir.")
        super().__init__("\n".join(lines))
        self.searched = list(searched)
