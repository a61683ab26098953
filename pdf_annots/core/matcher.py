"""Match annotation quadrilaterals against the page's text runs."""
import logging
from typing import List, NamedTuple, Optional, Sequence

from pdf_annots.core import bbox
from pdf_annots.core.types import Rect, TextRun

logger = logging.getLogger(__name__)

# Highlight boxes are usually taller than the glyphs they cover; a run has
# to reach the middle 40% of the box to count, which keeps neighbouring
# lines out.
BAND_SHRINK = 0.6
# Fraction of a run's own area that has to fall inside the annotation box.
OVERLAP_THRESHOLD = 0.5


class QuadMatch(NamedTuple):
    bounds: Optional[Rect]
    runs: List[TextRun]

    @property
    def first_offset(self) -> Optional[int]:
        return self.runs[0].offset if self.runs else None


def quad_rects(points: Optional[Sequence[float]]) -> List[Rect]:
    """Split a QuadPoints array into one bounding box per group of 4 points.

    Trailing values that do not complete a quadrilateral are ignored.
    """
    if not points:
        return []
    try:
        coords = [float(v) for v in points]
    except (TypeError, ValueError):
        logger.debug("Unreadable QuadPoints; treating as empty")
        return []
    rects: List[Rect] = []
    for i in range(0, len(coords) // 8 * 8, 8):
        quad = coords[i:i + 8]
        rects.append(bbox.from_points(list(zip(quad[0::2], quad[1::2]))))
    return rects


def scale_band(rect: Rect, factor: float = BAND_SHRINK) -> Rect:
    return bbox.shrink_vertical(rect, factor)


def overlaps_enough(annot: Rect, run: Rect, threshold: float = OVERLAP_THRESHOLD) -> bool:
    """Whether at least `threshold` of the run's area lies inside `annot`."""
    run_area = bbox.area(run)
    if run_area <= 0:
        return False
    inter = bbox.intersection(annot, run)
    if inter is None:
        return False
    return bbox.area(inter) / run_area >= threshold


def match_runs(
    annot: Rect,
    band: Rect,
    runs: Sequence[TextRun],
    threshold: float = OVERLAP_THRESHOLD,
) -> List[TextRun]:
    """Runs that touch the middle band and lie mostly inside the annotation."""
    matched = [
        run for run in runs
        if not bbox.is_empty(run.bbox)
        and bbox.intersects(band, run.bbox)
        and overlaps_enough(annot, run.bbox, threshold)
    ]
    matched.sort(key=lambda r: r.offset)
    return matched


def match_quad(
    quad: Rect,
    runs: Sequence[TextRun],
    band_shrink: float = BAND_SHRINK,
    threshold: float = OVERLAP_THRESHOLD,
) -> QuadMatch:
    matched = match_runs(quad, scale_band(quad, band_shrink), runs, threshold)
    if not matched:
        return QuadMatch(None, [])
    return QuadMatch(bbox.union_boxes(r.bbox for r in matched), matched)


def match_annotation(
    quads: Sequence[Rect],
    runs: Sequence[TextRun],
    band_shrink: float = BAND_SHRINK,
    threshold: float = OVERLAP_THRESHOLD,
) -> Optional[List[QuadMatch]]:
    """Match every quadrilateral of one annotation, in order.

    Returns None when any quadrilateral is degenerate; the annotation then
    carries no text at all.
    """
    results: List[QuadMatch] = []
    for quad in quads:
        if bbox.is_empty(quad):
            logger.debug(f"Degenerate quadrilateral {quad}; skipping text")
            return None
        results.append(match_quad(quad, runs, band_shrink, threshold))
    return results
