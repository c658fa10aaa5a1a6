import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
ALLOWED_EXTENSIONS = [".pdf"]

DEFAULT_SEARCH_DIRECTORIES = [
    os.path.expanduser("~/Downloads"),
    os.path.expanduser("~/Documents"),
    os.getcwd(),
]

# Filled by configure(); mutated in place so importers see updates.
SEARCH_DIRECTORIES: List[str] = []


def _real(path: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


def _is_within(base: str, target: str) -> bool:
    base = os.path.join(os.path.realpath(base), "")
    target = os.path.realpath(target)
    return target.startswith(base) or target == base[:-1]


def configure(directories: Sequence[str], max_file_size: int = MAX_FILE_SIZE) -> List[str]:
    """Set the directories PDFs may be read from. Unusable entries are
    skipped with a warning; with none left the defaults are used."""
    global MAX_FILE_SIZE
    MAX_FILE_SIZE = int(max_file_size)

    validated: List[str] = []
    for d in directories:
        real_path = _real(d)
        if not os.path.isdir(real_path):
            logger.warning(f"Not a directory, skipped: {d} -> {real_path}")
            continue
        if not os.access(real_path, os.R_OK):
            logger.warning(f"Unreadable directory, skipped: {d} -> {real_path}")
            continue
        if real_path not in validated:
            validated.append(real_path)

    if not validated:
        if directories:
            logger.warning("No valid directories given; falling back to defaults.")
        validated = [_real(d) for d in DEFAULT_SEARCH_DIRECTORIES if os.path.isdir(_real(d))]

    SEARCH_DIRECTORIES.clear()
    SEARCH_DIRECTORIES.extend(validated)
    logger.info(f"Accessible directories: {SEARCH_DIRECTORIES}")
    return SEARCH_DIRECTORIES


def validate_and_resolve_path(file_path: str) -> Optional[Path]:
    """Absolute Path for an allowed, existing, size-limited PDF, else None."""
    real_path = _real(file_path)
    if ".." in Path(file_path).parts or not any(
        _is_within(allowed, real_path) for allowed in SEARCH_DIRECTORIES
    ):
        logger.warning(f"Path outside allowed directories: {file_path}")
        return None

    resolved = Path(real_path)
    if not resolved.is_file():
        return None
    if resolved.suffix.lower() not in ALLOWED_EXTENSIONS:
        logger.warning(f"Disallowed file extension: {file_path}")
        return None
    if resolved.stat().st_size > MAX_FILE_SIZE:
        logger.warning(f"File too large: {file_path} ({resolved.stat().st_size} bytes)")
        return None
    return resolved


def find_file(file_name: str) -> Optional[Path]:
    """Resolve an absolute path, or look the name up (exactly, then as a
    case-insensitive substring) in the configured directories."""
    if os.path.isabs(file_name) or file_name.startswith("~"):
        return validate_and_resolve_path(file_name)

    for directory in SEARCH_DIRECTORIES:
        direct = Path(directory) / file_name
        if direct.is_file():
            path = validate_and_resolve_path(str(direct))
            if path:
                return path
    needle = file_name.lower()
    for directory in SEARCH_DIRECTORIES:
        for pdf in sorted(Path(directory).glob("*.pdf")):
            if needle in pdf.name.lower():
                path = validate_and_resolve_path(str(pdf))
                if path:
                    return path

    logger.warning(f"File not found: {file_name}")
    return None


def iter_pdfs(root: str, depth: int = 0) -> Iterator[Path]:
    """PDFs under `root`, descending at most `depth` directory levels."""
    root = os.path.realpath(root)
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        rel = os.path.relpath(dirpath, root)
        level = 0 if rel == "." else rel.count(os.sep) + 1
        if level >= depth:
            dirnames[:] = []
        for name in sorted(filenames):
            if name.lower().endswith(".pdf"):
                yield Path(dirpath) / name


def list_pdf_files(directory: str = "all", depth: int = 0, limit: int = 50) -> List[dict]:
    """Per matching root: up to `limit` most recently modified PDFs."""
    depth = max(0, min(int(depth), 5))
    limit = max(1, min(int(limit), 200))
    roots = SEARCH_DIRECTORIES
    if directory != "all":
        needle = directory.lower()
        roots = [d for d in SEARCH_DIRECTORIES
                 if needle in os.path.basename(d).lower() or directory in d]

    listing = []
    for root in roots:
        files = sorted(iter_pdfs(root, depth), key=lambda p: p.stat().st_mtime, reverse=True)
        listing.append({
            "directory": root,
            "pdf_count": len(files),
            "files": [
                {
                    "name": str(p.relative_to(root)),
                    "size_mb": round(p.stat().st_size / 1024 ** 2, 2),
                }
                for p in files[:limit]
            ],
        })
    return listing
