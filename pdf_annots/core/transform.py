"""Page coordinate transforms.

Annotation rectangles live in native PDF user space: y up, relative to the
MediaBox, with /Rotate not applied. Text extraction and rendering work in
display space: the page turned upright, with its origin at the lower-left
corner of the visible CropBox.
"""
import logging
from typing import Optional, Sequence

from pdf_annots.core import bbox
from pdf_annots.core.errors import BoxNotFound
from pdf_annots.core.types import PageGeometry, Rect

logger = logging.getLogger(__name__)

RIGHT_ANGLES = (0, 90, 180, 270)


def normalize_rotation(angle: Optional[int]) -> int:
    if angle is None:
        return 0
    angle = int(angle) % 360
    if angle not in RIGHT_ANGLES:
        logger.warning(f"Ignoring non right-angle page rotation: {angle}")
        return 0
    return angle


def inverse_angle(angle: int) -> int:
    return (360 - angle) % 360


def make_geometry(
    media_box: Sequence[float],
    crop_box: Optional[Sequence[float]] = None,
    rotation: Optional[int] = None,
) -> PageGeometry:
    """Build a PageGeometry; CropBox defaults to and is clipped by the MediaBox."""
    media = bbox.normalize(media_box)
    crop = media
    if crop_box is not None:
        crop = bbox.intersection(media, bbox.normalize(crop_box)) or media
    return PageGeometry(media_box=media, crop_box=crop, rotation=normalize_rotation(rotation))


def rotate_rect(rect: Rect, angle: int, width: float, height: float) -> Rect:
    """Turn a box on a width x height page by `angle` degrees clockwise."""
    x1, y1, x2, y2 = rect
    if angle == 90:
        return (y1, width - x2, y2, width - x1)
    if angle == 180:
        return (width - x2, height - y2, width - x1, height - y1)
    if angle == 270:
        return (height - y2, x1, height - y1, x2)
    return rect


def _rotated_size(geometry: PageGeometry):
    if geometry.swaps_axes:
        return geometry.media_height, geometry.media_width
    return geometry.media_width, geometry.media_height


def crop_offset(geometry: PageGeometry) -> Rect:
    """The CropBox expressed in rotated MediaBox space."""
    mx, my = geometry.media_box[0], geometry.media_box[1]
    crop = geometry.crop_box
    local = (crop[0] - mx, crop[1] - my, crop[2] - mx, crop[3] - my)
    return rotate_rect(local, geometry.rotation, geometry.media_width, geometry.media_height)


def to_display(rect: Sequence[float], geometry: PageGeometry) -> Rect:
    x0, y0, x1, y1 = (float(v) for v in rect[:4])
    mx, my = geometry.media_box[0], geometry.media_box[1]
    local = (x0 - mx, y0 - my, x1 - mx, y1 - my)
    rotated = rotate_rect(local, geometry.rotation, geometry.media_width, geometry.media_height)
    off = crop_offset(geometry)
    return (rotated[0] - off[0], rotated[1] - off[1], rotated[2] - off[0], rotated[3] - off[1])


def _unrotate(rotated: Rect, geometry: PageGeometry) -> Rect:
    width, height = _rotated_size(geometry)
    local = rotate_rect(rotated, inverse_angle(geometry.rotation), width, height)
    mx, my = geometry.media_box[0], geometry.media_box[1]
    return (local[0] + mx, local[1] + my, local[2] + mx, local[3] + my)


def from_display(rect: Sequence[float], geometry: PageGeometry) -> Rect:
    """Inverse of to_display."""
    off = crop_offset(geometry)
    return _unrotate((rect[0] + off[0], rect[1] + off[1], rect[2] + off[0], rect[3] + off[1]), geometry)


def from_media_top_down(rect: Sequence[float], geometry: PageGeometry) -> Rect:
    """Map a pdfplumber (x0, top, x1, bottom) box back into native page space."""
    _, height = _rotated_size(geometry)
    x0, top, x1, bottom = (float(v) for v in rect[:4])
    return _unrotate((x0, height - bottom, x1, height - top), geometry)


def to_media_top_down(rect: Rect, geometry: PageGeometry) -> Rect:
    """Map a y-down display box to a y-down box over the whole rotated MediaBox.

    This is the space pdfplumber reports words and chars in.
    """
    off = crop_offset(geometry)
    _, rotated_height = _rotated_size(geometry)
    shift_y = rotated_height - off[3]
    return (rect[0] + off[0], rect[1] + shift_y, rect[2] + off[0], rect[3] + shift_y)


def find_inherited_box(node, key: str = "/MediaBox"):
    """Return `key` from a page-tree node or its nearest ancestor that has it."""
    seen = set()
    while node is not None:
        if id(node) in seen:
            break
        seen.add(id(node))
        value = node.get(key)
        if value is not None:
            return value.get_object() if hasattr(value, "get_object") else value
        parent = node.get("/Parent")
        node = parent.get_object() if hasattr(parent, "get_object") else parent
    raise BoxNotFound(key)
