from typing import Iterable, List, Optional, Sequence

from pdf_annots.core.types import Rect

# --- Rectangle helpers (x0, y0, x1, y1) ---


def normalize(values: Sequence[float]) -> Rect:
    """Order the corners of a 4-number box so that x0 <= x1 and y0 <= y1."""
    x0, y0, x1, y1 = (float(v) for v in values[:4])
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


def from_points(points: Sequence[Sequence[float]]) -> Rect:
    xs = [float(p[0]) for p in points]
    ys = [float(p[1]) for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def width(r: Rect) -> float:
    return r[2] - r[0]


def height(r: Rect) -> float:
    return r[3] - r[1]


def area(r: Rect) -> float:
    return max(width(r), 0.0) * max(height(r), 0.0)


def is_valid(r: Rect) -> bool:
    return r[0] <= r[2] and r[1] <= r[3]


def is_empty(r: Rect) -> bool:
    """True for inverted boxes and for boxes with zero width or height."""
    return not is_valid(r) or width(r) == 0 or height(r) == 0


def intersects(a: Rect, b: Rect) -> bool:
    return not (b[2] <= a[0] or b[0] >= a[2] or b[3] <= a[1] or b[1] >= a[3])


def intersection(a: Rect, b: Rect) -> Optional[Rect]:
    r = (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))
    return r if not is_empty(r) else None


def union_boxes(boxes: Iterable[Rect]) -> Rect:
    boxes = list(boxes)
    x0 = min(b[0] for b in boxes)
    y0 = min(b[1] for b in boxes)
    x1 = max(b[2] for b in boxes)
    y1 = max(b[3] for b in boxes)
    return (x0, y0, x1, y1)


def shrink_vertical(r: Rect, factor: float) -> Rect:
    """Drop `factor` of the height, half from the top and half from the bottom."""
    diff = height(r) * factor / 2
    return (r[0], r[1] + diff, r[2], r[3] - diff)


def shrink_horizontal(r: Rect, factor: float) -> Rect:
    diff = width(r) * factor / 2
    return (r[0] + diff, r[1], r[2] - diff, r[3])


def flip_y(r: Rect, page_height: float) -> Rect:
    """Convert a y-up box into a y-down box (origin top-left) and re-order."""
    return normalize((r[0], page_height - r[1], r[2], page_height - r[3]))


def scale(r: Rect, factor: float) -> List[int]:
    return [int(round(v * factor)) for v in r]
