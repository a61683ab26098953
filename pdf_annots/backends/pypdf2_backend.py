from typing import Iterator, List, Optional
import logging
import PyPDF2

from pdf_annots.core.errors import BoxNotFound, DecryptionFailed
from pdf_annots.core.labels import LabelRange
from pdf_annots.core.transform import find_inherited_box, make_geometry
from pdf_annots.core.types import PageGeometry, RawAnnotation

logger = logging.getLogger(__name__)


def _resolve(obj):
    return obj.get_object() if hasattr(obj, "get_object") else obj


def _floats(obj) -> Optional[List[float]]:
    """A PDF number array as floats, or None when absent or malformed."""
    obj = _resolve(obj)
    if not isinstance(obj, list):
        return None
    try:
        return [float(_resolve(v)) for v in obj]
    except (TypeError, ValueError):
        return None


def _text(obj) -> Optional[str]:
    obj = _resolve(obj)
    if obj is None:
        return None
    return str(obj)


def _get_popup_contents(obj) -> Optional[str]:
    popup = obj.get("/Popup")
    if popup is None:
        return None
    return _text(_resolve(popup).get("/Contents"))


def read_annotation(obj) -> RawAnnotation:
    obj = _resolve(obj)
    contents = _text(obj.get("/Contents"))
    if not contents:
        contents = _get_popup_contents(obj)
    return RawAnnotation(
        subtype=str(obj.get("/Subtype", "")).lstrip("/"),
        color=_floats(obj.get("/C")),
        quad_points=_floats(obj.get("/QuadPoints")),
        rect=_floats(obj.get("/Rect")),
        contents=contents,
        modified=_text(obj.get("/M")) or _text(obj.get("/CreationDate")),
    )


def open_reader(stream) -> PyPDF2.PdfReader:
    """Open a reader, unlocking encrypted files with the empty password."""
    reader = PyPDF2.PdfReader(stream)
    if reader.is_encrypted:
        logger.info("Document is encrypted, trying the empty password")
        try:
            result = reader.decrypt("")
        except NotImplementedError as e:
            raise DecryptionFailed(f"PDF is encrypted, unable to decrypt: {e}") from e
        if not result:
            raise DecryptionFailed("PDF is encrypted, unable to decrypt")
    return reader


def page_annotations(page) -> List[RawAnnotation]:
    if "/Annots" not in page:
        return []
    annots = _resolve(page["/Annots"]) or []
    return [read_annotation(a) for a in annots]


def page_geometry(page) -> PageGeometry:
    media = _floats(find_inherited_box(page, "/MediaBox"))
    if not media or len(media) < 4:
        raise BoxNotFound("/MediaBox")
    try:
        crop = _floats(find_inherited_box(page, "/CropBox"))
    except BoxNotFound:
        crop = None
    try:
        rotation = int(find_inherited_box(page, "/Rotate"))
    except BoxNotFound:
        rotation = 0
    return make_geometry(media, crop if crop and len(crop) >= 4 else None, rotation)


def _number_tree(node) -> Iterator:
    """Yield (key, value) pairs of a number tree, following /Kids."""
    node = _resolve(node)
    if node is None:
        return
    nums = _resolve(node.get("/Nums"))
    if nums:
        for i in range(0, len(nums) - 1, 2):
            yield _resolve(nums[i]), _resolve(nums[i + 1])
    for kid in _resolve(node.get("/Kids")) or []:
        yield from _number_tree(kid)


def page_label_ranges(reader: PyPDF2.PdfReader) -> List[LabelRange]:
    root = _resolve(reader.trailer["/Root"])
    tree = root.get("/PageLabels")
    if tree is None:
        return []
    ranges: List[LabelRange] = []
    for start, entry in _number_tree(tree):
        if not isinstance(entry, dict):
            continue
        try:
            index = int(start)
        except (TypeError, ValueError):
            continue
        style = entry.get("/S")
        ranges.append(LabelRange(
            start=index,
            style=str(style).lstrip("/") if style is not None else None,
            prefix=_text(entry.get("/P")) or "",
            first=int(_resolve(entry.get("/St", 1))),
        ))
    return ranges
