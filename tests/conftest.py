import random
import threading
import time
from typing import Dict, List, Optional

import pytest

from pdf_annots.core.labels import LabelRange
from pdf_annots.core.transform import make_geometry
from pdf_annots.core.types import PageGeometry, PageText, RawAnnotation, TextRun


class FakeImage:
    """Just enough of a PIL image for cropping and bookkeeping."""

    def __init__(self, size, label="page"):
        self.size = size
        self.label = label

    def crop(self, box):
        return FakeImage((box[2] - box[0], box[3] - box[1]), label=f"{self.label}{box}")


class FakeImaging:
    def __init__(self, ocr_text="recognised  text\n", fail_check=None):
        self.written: List[tuple] = []
        self.crops: List[tuple] = []
        self.ocr_calls = 0
        self.ocr_text = ocr_text
        self.fail_check = fail_check
        self.checked = False
        self._lock = threading.Lock()

    def check_ocr(self):
        self.checked = True
        if self.fail_check is not None:
            raise self.fail_check

    def crop(self, image, box):
        with self._lock:
            self.crops.append((image.label, box))
        return image.crop(box)

    def write(self, image, path, fmt="jpg", quality=90):
        with self._lock:
            self.written.append((path, fmt, quality, image.size))

    def ocr(self, image):
        with self._lock:
            self.ocr_calls += 1
        return self.ocr_text


class FakeDocument:
    """In-memory document collaborator.

    `pages` maps page index to a dict with optional keys: annotations,
    geometry, text, region (callable), fail (exception raised by page_text).
    """

    def __init__(self, pages: Dict[int, dict], num_pages: Optional[int] = None, labels=None, jitter=0.0):
        self.pages = pages
        self.num_pages = num_pages if num_pages is not None else (max(pages) + 1 if pages else 0)
        self.labels = labels or []
        self.jitter = jitter
        self.rendered: List[tuple] = []
        self.region_queries: List[tuple] = []
        self.text_calls: List[int] = []
        self._lock = threading.Lock()

    def _page(self, index) -> dict:
        return self.pages.get(index, {})

    def page_count(self) -> int:
        return self.num_pages

    def page_labels(self) -> List[LabelRange]:
        return self.labels

    def page_geometry(self, index) -> PageGeometry:
        return self._page(index).get("geometry") or make_geometry((0, 0, 600, 800))

    def annotations(self, index) -> List[RawAnnotation]:
        return list(self._page(index).get("annotations", []))

    def page_text(self, index) -> PageText:
        with self._lock:
            self.text_calls.append(index)
        if "fail" in self._page(index):
            raise self._page(index)["fail"]
        return self._page(index).get("text", PageText("", ()))

    def region_text(self, index, rect, dpi=72.0) -> str:
        if self.jitter:
            time.sleep(random.uniform(0, self.jitter))
        with self._lock:
            self.region_queries.append((index, rect, dpi))
        region = self._page(index).get("region")
        return region(rect) if region else ""

    def render(self, index, dpi):
        with self._lock:
            self.rendered.append((index, dpi))
        geometry = self.page_geometry(index)
        factor = dpi / 72.0
        return FakeImage((int(geometry.display_width * factor), int(geometry.display_height * factor)), f"p{index}@{dpi}")


def quad(x0, y0, x1, y1):
    """QuadPoints for one axis-aligned box, in the usual UL, UR, LL, LR order."""
    return [x0, y1, x1, y1, x0, y0, x1, y0]


def hello_world_text() -> PageText:
    return PageText(
        "hello world\nsecond line",
        (
            TextRun((10, 100, 40, 112), 0, "hello"),
            TextRun((45, 100, 80, 112), 6, "world"),
            TextRun((10, 80, 45, 92), 12, "second"),
            TextRun((50, 80, 70, 92), 19, "line"),
        ),
    )


@pytest.fixture
def geometry():
    return make_geometry((0, 0, 600, 800))


@pytest.fixture
def page_text():
    return hello_world_text()


HELLO_CONTENT = b"BT /F1 12 Tf 100 700 Td (hello world) Tj 0 -20 Td (second line) Tj ET"
HELLO_HIGHLIGHT = (
    b"<< /Type /Annot /Subtype /Highlight /Rect [98 696 160 712] "
    b"/QuadPoints [98 712 160 712 98 696 160 696] /C [1 1 0] >>"
)


def write_pdf(path, content=HELLO_CONTENT, annots=(HELLO_HIGHLIGHT,), rotate=0, crop_box=None):
    """Write a one-page 600 x 800 PDF drawing `content` in Helvetica."""
    boxes = b"/MediaBox [0 0 600 800] /Rotate %d" % rotate
    if crop_box is not None:
        boxes += b" /CropBox [%s]" % " ".join(str(v) for v in crop_box).encode()
    annot_refs = b" ".join(b"%d 0 R" % (6 + i) for i in range(len(annots)))
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R " + boxes
        + b" /Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R /Annots [" + annot_refs + b"] >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        *annots,
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    with open(path, "wb") as f:
        f.write(bytes(out))
    return path
