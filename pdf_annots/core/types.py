from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, TypedDict

Rect = Tuple[float, float, float, float]  # (x0, y0, x1, y1)


class AnnotationType(str, Enum):
    HIGHLIGHT = "highlight"
    STRIKE = "strike"
    UNDERLINE = "underline"
    TEXT = "text"
    RECTANGLE = "rectangle"  # classification of /Square, used in ids
    IMAGE = "image"          # emitted type of a rectangle record
    UNSUPPORTED = "unsupported"


class AnnotationRecord(TypedDict, total=False):
    annotatedText: str
    color: str           # "#rrggbb"
    colorCategory: str
    comment: str
    date: str            # RFC3339
    id: str
    imagePath: str
    ocrText: str
    page: int            # 1-based
    pageLabel: str
    type: str
    x: float
    y: float


class RawAnnotation(NamedTuple):
    """An annotation as read from the page's /Annots array."""
    subtype: str
    color: Optional[List[float]] = None
    quad_points: Optional[List[float]] = None
    rect: Optional[List[float]] = None
    contents: Optional[str] = None
    modified: Optional[str] = None


class TextRun(NamedTuple):
    bbox: Rect       # native page space, y up
    offset: int      # index into PageText.text
    text: str


class PageText(NamedTuple):
    text: str
    runs: Tuple[TextRun, ...]


class PageGeometry(NamedTuple):
    media_box: Rect
    crop_box: Rect
    rotation: int = 0

    @property
    def media_width(self) -> float:
        return self.media_box[2] - self.media_box[0]

    @property
    def media_height(self) -> float:
        return self.media_box[3] - self.media_box[1]

    @property
    def swaps_axes(self) -> bool:
        return self.rotation in (90, 270)

    @property
    def display_width(self) -> float:
        w = self.crop_box[2] - self.crop_box[0]
        h = self.crop_box[3] - self.crop_box[1]
        return h if self.swaps_axes else w

    @property
    def display_height(self) -> float:
        w = self.crop_box[2] - self.crop_box[0]
        h = self.crop_box[3] - self.crop_box[1]
        return w if self.swaps_axes else h
