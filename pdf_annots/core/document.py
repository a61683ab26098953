"""Drive extraction over every page and annotation of a document.

`source` is the document collaborator. It must provide:

    page_count() -> int
    page_labels() -> List[LabelRange]
    page_geometry(index) -> PageGeometry
    annotations(index) -> List[RawAnnotation]
    page_text(index) -> PageText
    region_text(index, rect, dpi) -> str
    render(index, dpi) -> PIL.Image.Image

`imaging` crops, writes and OCRs bitmaps (see backends/imaging.py).
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from pdf_annots.core.builder import PageContext, SUBTYPES, build_annotation, classify
from pdf_annots.core.config import ExtractionConfig
from pdf_annots.core.ids import IdRegistry
from pdf_annots.core.labels import label_for, page_label_map
from pdf_annots.core.page_range import parse_page_range
from pdf_annots.core.types import AnnotationRecord, AnnotationType, PageText

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY_TEXT = PageText("", ())


def run_tier(tasks: Sequence[Callable[[], T]], max_workers: Optional[int] = None) -> List[Optional[T]]:
    """Run tasks concurrently and return their results in task order.

    Every task runs to completion; afterwards the first error observed is
    raised.
    """
    results: List[Optional[T]] = [None] * len(tasks)
    if not tasks:
        return results
    first_error: Optional[BaseException] = None
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(task): i for i, task in enumerate(tasks)}
        for future in as_completed(futures):
            try:
                results[futures[future]] = future.result()
            except Exception as e:
                logger.debug(f"Task {futures[future]} failed: {e}")
                if first_error is None:
                    first_error = e
    if first_error is not None:
        raise first_error
    return results


def extract_page(
    source,
    page_index: int,
    config: ExtractionConfig,
    labels: Optional[Dict[int, str]] = None,
    imaging=None,
    annotations_lock: Optional[threading.Lock] = None,
) -> List[AnnotationRecord]:
    lock = annotations_lock or threading.Lock()
    with lock:
        raw = source.annotations(page_index)

    supported = [a for a in raw if a is not None and classify(a.subtype) != AnnotationType.UNSUPPORTED]
    if not supported:
        return []

    kinds = {SUBTYPES[str(a.subtype).lstrip("/")] for a in supported}
    has_images = any(k.is_image for k in kinds)
    has_markup = any(k.has_quads for k in kinds)

    page_image = ocr_image = None
    if has_images and imaging is not None:
        if config.needs_page_image:
            page_image = source.render(page_index, config.image_dpi)
        if config.attempt_ocr:
            ocr_image = source.render(page_index, config.ocr_dpi)

    ctx = PageContext(
        page_index=page_index,
        page_label=label_for(labels, page_index),
        geometry=source.page_geometry(page_index),
        page_text=source.page_text(page_index) if has_markup else _EMPTY_TEXT,
        region_text=source.region_text,
        registry=IdRegistry(),
        config=config,
        imaging=imaging,
        page_image=page_image,
        ocr_image=ocr_image,
    )
    slots = run_tier([partial(build_annotation, a, ctx) for a in supported], config.max_workers)
    records = [r for r in slots if r is not None]
    logger.info(f"Page {page_index + 1}: {len(records)} of {len(raw)} annotations extracted")
    return records


def extract_document(source, config: ExtractionConfig, imaging=None) -> List[AnnotationRecord]:
    """Extract every supported annotation, ordered by page then /Annots order."""
    if config.attempt_ocr:
        if imaging is None:
            raise ValueError("OCR requested without an imaging backend")
        imaging.check_ocr()

    total = source.page_count()
    indices = parse_page_range(total, config.page_range)
    labels = page_label_map(total, source.page_labels())
    lock = threading.Lock()

    tasks = [
        partial(extract_page, source, i, config, labels, imaging, lock)
        for i in indices
    ]
    pages = run_tier(tasks, config.max_workers)
    out: List[AnnotationRecord] = []
    for records in pages:
        if records:
            out.extend(records)
    logger.info(f"Extracted {len(out)} annotations from {len(indices)} of {total} pages")
    return out
