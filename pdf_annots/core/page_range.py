from typing import List, Optional

from pdf_annots.core.errors import PageRangeError


def _page_number(token: str, total_pages: int, spec: str) -> int:
    if token == "first":
        return 1
    if token == "last":
        return total_pages
    try:
        return int(token)
    except ValueError:
        raise PageRangeError(f"Invalid page range: {spec}") from None


def parse_page_range(total_pages: int, page_range: Optional[str]) -> List[int]:
    """Return sorted zero-based page indices for a 1-based page spec.

    Supports None (all pages), "first", "last", "N", "S-E" with open ends
    ("-E", "S-") and comma separated combinations such as "1-3,7".
    """
    if total_pages <= 0:
        return []
    if page_range is None or not str(page_range).strip():
        return list(range(total_pages))

    selected = set()
    for part in str(page_range).lower().split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            s, e = part.split("-", 1)
            start = _page_number(s.strip(), total_pages, page_range) if s.strip() else 1
            end = _page_number(e.strip(), total_pages, page_range) if e.strip() else total_pages
            if start < 1 or end < start or start > total_pages:
                raise PageRangeError(f"Invalid page range: {page_range}")
            selected.update(range(start - 1, min(end, total_pages)))
            continue
        p = _page_number(part, total_pages, page_range)
        if p < 1 or p > total_pages:
            raise PageRangeError(f"Page {p} out of range (1-{total_pages})")
        selected.add(p - 1)
    return sorted(selected)
