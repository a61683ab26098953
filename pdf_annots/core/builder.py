"""Build one output record per PDF annotation."""
import logging
import os
import unicodedata
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from pdf_annots.core import bbox
from pdf_annots.core.color import color_category, color_hex
from pdf_annots.core.config import ExtractionConfig
from pdf_annots.core.dates import format_date, parse_pdf_date
from pdf_annots.core.ids import IdRegistry
from pdf_annots.core.matcher import match_annotation, quad_rects
from pdf_annots.core.text_resolver import RegionText, condense_spaces, resolve_text
from pdf_annots.core.transform import to_display
from pdf_annots.core.types import (
    AnnotationRecord,
    AnnotationType,
    PageGeometry,
    PageText,
    RawAnnotation,
    Rect,
)

logger = logging.getLogger(__name__)


class SubtypeSpec(NamedTuple):
    kind: AnnotationType
    has_quads: bool = False
    is_image: bool = False


SUBTYPES: Dict[str, SubtypeSpec] = {
    "Highlight": SubtypeSpec(AnnotationType.HIGHLIGHT, has_quads=True),
    "StrikeOut": SubtypeSpec(AnnotationType.STRIKE, has_quads=True),
    "Underline": SubtypeSpec(AnnotationType.UNDERLINE, has_quads=True),
    "Square": SubtypeSpec(AnnotationType.RECTANGLE, is_image=True),
    "Text": SubtypeSpec(AnnotationType.TEXT),
}


def classify(subtype: str) -> AnnotationType:
    spec = SUBTYPES.get(str(subtype).lstrip("/"))
    return spec.kind if spec else AnnotationType.UNSUPPORTED


def strip_control(text: Optional[str]) -> str:
    """Drop control characters and U+FFFD from user-authored text."""
    if not text:
        return ""
    return "".join(
        c for c in str(text)
        if c != "\ufffd" and unicodedata.category(c) != "Cc"
    )


def anchor(rect: Optional[Sequence[float]]) -> Tuple[float, float]:
    if not rect or len(rect) < 4:
        return 0.0, 0.0
    try:
        x1, y1, x2, y2 = (float(v) for v in rect[:4])
    except (TypeError, ValueError):
        return 0.0, 0.0
    return round(min(x1, x2), 2), round(min(y1, y2), 2)


class PageContext(NamedTuple):
    """Per-page state shared read-only by every annotation task of the page.

    `registry` is the one mutable member and guards itself.
    """
    page_index: int
    page_label: str
    geometry: PageGeometry
    page_text: PageText
    region_text: RegionText
    registry: IdRegistry
    config: ExtractionConfig
    imaging: Any = None
    page_image: Any = None
    ocr_image: Any = None


def image_path(config: ExtractionConfig, page: int, display: Rect) -> str:
    name = f"{config.image_base_name}-{page}-x{int(display[0])}-y{int(display[1])}.{config.image_format}"
    return os.path.join(config.image_output_path, name)


def pixel_box(display: Rect, geometry: PageGeometry, size: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """Pixel crop box (left, upper, right, lower) for a bitmap of the page."""
    img_w, img_h = size
    factor = img_w / geometry.display_width
    left, upper, right, lower = bbox.scale(bbox.flip_y(display, geometry.display_height), factor)
    return (
        min(max(left, 0), img_w),
        min(max(upper, 0), img_h),
        min(max(right, 0), img_w),
        min(max(lower, 0), img_h),
    )


def _image_fields(raw: RawAnnotation, ctx: PageContext) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    if not raw.rect or len(raw.rect) < 4:
        return fields
    display = bbox.normalize(to_display(bbox.normalize(raw.rect), ctx.geometry))
    page = ctx.page_index + 1

    if ctx.page_image is not None:
        path = image_path(ctx.config, page, display)
        cropped = ctx.imaging.crop(ctx.page_image, pixel_box(display, ctx.geometry, ctx.page_image.size))
        ctx.imaging.write(cropped, path, ctx.config.image_format, ctx.config.image_quality)
        fields["imagePath"] = path

    if ctx.ocr_image is not None:
        cropped = ctx.imaging.crop(ctx.ocr_image, pixel_box(display, ctx.geometry, ctx.ocr_image.size))
        text = condense_spaces(ctx.imaging.ocr(cropped))
        if text:
            fields["ocrText"] = text
    return fields


def _annotated_text(raw: RawAnnotation, ctx: PageContext) -> Optional[str]:
    cfg = ctx.config
    matches = match_annotation(
        quad_rects(raw.quad_points),
        ctx.page_text.runs,
        cfg.band_shrink,
        cfg.overlap_threshold,
    )
    if not matches:
        return None
    return resolve_text(
        matches,
        ctx.page_text.text,
        ctx.geometry,
        ctx.page_index,
        ctx.region_text,
        cfg.band_shrink,
        cfg.fallback_ratio,
        cfg.fallback_space_margin,
    )


def build_annotation(raw: RawAnnotation, ctx: PageContext) -> Optional[AnnotationRecord]:
    """Build the record for `raw`, or None when it is filtered out."""
    spec = SUBTYPES.get(str(raw.subtype).lstrip("/"))
    if spec is None:
        return None

    date = parse_pdf_date(raw.modified)
    cutoff = ctx.config.ignore_before
    if date is not None and cutoff is not None and date < cutoff:
        logger.debug(f"Page {ctx.page_index + 1}: skipping {spec.kind.value} from {date.isoformat()}")
        return None

    x, y = anchor(raw.rect)
    page = ctx.page_index + 1
    annot_id = ctx.registry.assign(spec.kind.value, page, x, y)

    record: AnnotationRecord = {
        "id": annot_id,
        "page": page,
        "pageLabel": ctx.page_label,
        "type": AnnotationType.IMAGE.value if spec.is_image else spec.kind.value,
        "x": x,
        "y": y,
    }
    optional: Dict[str, Optional[str]] = {
        "color": color_hex(raw.color),
        "colorCategory": color_category(raw.color),
        "comment": strip_control(raw.contents),
        "date": format_date(date) if date is not None else None,
    }

    if spec.is_image:
        optional.update(_image_fields(raw, ctx))
    elif spec.has_quads:
        optional["annotatedText"] = _annotated_text(raw, ctx)

    for key, value in optional.items():
        if value:
            record[key] = value
    return record
