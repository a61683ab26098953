import logging
import threading
from pathlib import Path
from typing import Dict, List

import pdfplumber

from pdf_annots.backends import pdfplumber_backend, pypdf2_backend
from pdf_annots.backends.imaging import ImageTools
from pdf_annots.core.config import ExtractionConfig
from pdf_annots.core.document import extract_document
from pdf_annots.core.labels import LabelRange
from pdf_annots.core.types import AnnotationRecord, PageGeometry, PageText, RawAnnotation, Rect

logger = logging.getLogger(__name__)


class PdfDocument:
    """One open PDF, read through PyPDF2 (objects) and pdfplumber (text, pixels).

    Neither library is safe for concurrent use of a shared handle, so every
    call into them is serialized on one lock. Results handed out are
    immutable and can be shared between threads.
    """

    def __init__(self, pdf_path: Path):
        self.path = Path(pdf_path)
        self._lock = threading.RLock()
        self._file = open(self.path, "rb")
        try:
            self._reader = pypdf2_backend.open_reader(self._file)
            self._plumber = pdfplumber.open(self.path, password="" if self._reader.is_encrypted else None)
        except Exception:
            self._file.close()
            raise
        self._geometry: Dict[int, PageGeometry] = {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        with self._lock:
            self._plumber.close()
            self._file.close()

    def page_count(self) -> int:
        with self._lock:
            return len(self._reader.pages)

    def page_labels(self) -> List[LabelRange]:
        with self._lock:
            return pypdf2_backend.page_label_ranges(self._reader)

    def page_geometry(self, index: int) -> PageGeometry:
        with self._lock:
            if index not in self._geometry:
                self._geometry[index] = pypdf2_backend.page_geometry(self._reader.pages[index])
            return self._geometry[index]

    def annotations(self, index: int) -> List[RawAnnotation]:
        with self._lock:
            return pypdf2_backend.page_annotations(self._reader.pages[index])

    def page_text(self, index: int) -> PageText:
        geometry = self.page_geometry(index)
        with self._lock:
            return pdfplumber_backend.page_text(self._plumber.pages[index], geometry)

    def region_text(self, index: int, rect: Rect, dpi: float = 72.0) -> str:
        geometry = self.page_geometry(index)
        with self._lock:
            return pdfplumber_backend.region_text(self._plumber.pages[index], geometry, rect, dpi)

    def render(self, index: int, dpi: int):
        with self._lock:
            logger.debug(f"Rendering page {index + 1} at {dpi} DPI")
            return pdfplumber_backend.render(self._plumber.pages[index], dpi)


def extract_annotations(pdf_path: Path, config: ExtractionConfig) -> List[AnnotationRecord]:
    """Open `pdf_path` and extract its annotations with real backends."""
    try:
        with PdfDocument(pdf_path) as doc:
            return extract_document(doc, config, ImageTools.from_config(config))
    except Exception as e:
        logger.error(f"Annotation extraction failed for {pdf_path}: {e}")
        raise
