"""Turn matched text runs into the annotated text of an annotation.

Two candidates are built for every annotation. The primary one asks the
text extractor for whatever lies inside the matched region. The fallback
one is stitched together from the matched runs themselves. The primary is
kept unless it looks corrupted or under-segmented.
"""
import logging
import re
from typing import Callable, List, Optional, Sequence, TypeVar

from pdf_annots.core import bbox
from pdf_annots.core.matcher import BAND_SHRINK, QuadMatch
from pdf_annots.core.transform import to_display
from pdf_annots.core.types import PageGeometry, Rect, TextRun

logger = logging.getLogger(__name__)

T = TypeVar("T")

REPLACEMENT_CHARS = ("\ufffd", "\u00ef\u00bf\u00bd")  # U+FFFD and its latin-1 mojibake
FALLBACK_RATIO = 0.2
FALLBACK_SPACE_MARGIN = 0.2
TEXT_DPI = 72.0

# (page_index, rect in y-down display points, dpi) -> text
RegionText = Callable[[int, Rect, float], str]

_WHITESPACE = re.compile(r"[\n\s]+")


def condense_spaces(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def ends_with_space(joined: str, _segment=None) -> bool:
    return joined[-1:].isspace()


def join_segments(
    segments: Sequence[T],
    has_boundary: Callable[[str, T], bool] = ends_with_space,
    text_of: Callable[[T], str] = str,
) -> str:
    """Concatenate segments, adding one space where no boundary exists yet.

    `has_boundary(joined, segment)` tells whether the text joined so far
    is already separated from `segment`; empty segments are skipped.
    """
    joined = ""
    for segment in segments:
        text = text_of(segment)
        if not text:
            continue
        if joined and not has_boundary(joined, segment):
            joined += " "
        joined += text
    return joined


def fallback_segment(page_text: str, runs: Sequence[TextRun]) -> str:
    """Rebuild the text of matched runs, keeping the page's word breaks."""

    def glued(_joined: str, run: TextRun) -> bool:
        if run.offset <= 0 or run.offset > len(page_text):
            return True
        return page_text[run.offset - 1] not in (" ", "\n")

    return join_segments(sorted(runs, key=lambda r: r.offset), glued, lambda r: r.text)


def replacement_ratio(text: str) -> float:
    if not text:
        return 0.0
    missing = sum(text.count(c) for c in REPLACEMENT_CHARS)
    return missing / len(text)


def should_use_fallback(
    primary: str,
    fallback: str,
    ratio_limit: float = FALLBACK_RATIO,
    space_margin: float = FALLBACK_SPACE_MARGIN,
) -> bool:
    """Heuristic choice between the extractor's text and the rebuilt text.

    The fallback wins when the primary has too many unrenderable characters,
    or when it has noticeably fewer word breaks than the fallback.
    """
    fallback = condense_spaces(fallback)
    if not fallback:
        return False
    primary = condense_spaces(primary)
    if not primary:
        return True
    if replacement_ratio(primary) > ratio_limit:
        return True
    return fallback.count(" ") > primary.count(" ") * (1 + space_margin)


def primary_query_rect(bounds: Rect, geometry: PageGeometry, band_shrink: float = BAND_SHRINK) -> Rect:
    """Region handed to the text extractor, in y-down display points."""
    banded = bbox.shrink_vertical(bounds, band_shrink)
    display = bbox.normalize(to_display(banded, geometry))
    return bbox.flip_y(display, geometry.display_height)


def resolve_text(
    matches: Sequence[QuadMatch],
    page_text: str,
    geometry: PageGeometry,
    page_index: int,
    region_text: RegionText,
    band_shrink: float = BAND_SHRINK,
    ratio_limit: float = FALLBACK_RATIO,
    space_margin: float = FALLBACK_SPACE_MARGIN,
) -> Optional[str]:
    """Pick and clean the text for all quadrilaterals of one annotation."""
    primary: List[str] = []
    fallback: List[str] = []
    for match in matches:
        if match.bounds is None:
            continue
        rect = primary_query_rect(match.bounds, geometry, band_shrink)
        primary.append(region_text(page_index, rect, TEXT_DPI) or "")
        fallback.append(fallback_segment(page_text, match.runs))

    primary_text = join_segments(primary)
    fallback_text = join_segments(fallback)
    if should_use_fallback(primary_text, fallback_text, ratio_limit, space_margin):
        logger.debug(f"Page {page_index + 1}: using rebuilt text over extractor text {primary_text!r}")
        chosen = fallback_text
    else:
        chosen = primary_text
    return condense_spaces(chosen) or None
