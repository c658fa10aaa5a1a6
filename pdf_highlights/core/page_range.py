from typing import List, Optional


def _page_number(token: str, total_pages: int, selection: str) -> int:
    try:
        number = int(token)
    except ValueError:
        raise ValueError(f"Invalid page range: {selection}") from None
    if number < 1 or number > total_pages:
        raise ValueError(f"Page {number} out of range (1-{total_pages})")
    return number


def parse_page_range(total_pages: int, page_range: Optional[str]) -> List[int]:
    """Return zero-based page indices, in document order without duplicates.

    Accepts None or "all", "first", "last", "N", "S-E" (either end may be
    omitted), and comma-separated combinations such as "1,4-6".
    """
    if total_pages <= 0:
        return []
    selection = (page_range or "all").strip().lower()
    if selection == "all":
        return list(range(total_pages))

    selected = set()
    for part in (p.strip() for p in selection.split(",")):
        if not part:
            continue
        if part == "first":
            selected.add(0)
        elif part == "last":
            selected.add(total_pages - 1)
        elif "-" in part:
            start, end = (s.strip() for s in part.split("-", 1))
            first = _page_number(start, total_pages, page_range) if start else 1
            if end and not end.isdigit():
                raise ValueError(f"Invalid page range: {page_range}")
            # An end past the last page is clipped, like a slice.
            last = min(int(end), total_pages) if end else total_pages
            selected.update(range(first - 1, last))
        else:
            selected.add(_page_number(part, total_pages, page_range) - 1)
    if not selected:
        raise ValueError(f"Invalid page range: {page_range}")
    return sorted(selected)
