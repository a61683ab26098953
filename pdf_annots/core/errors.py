class AnnotationError(Exception):
    """Base class for failures raised while extracting annotations."""


class BoxNotFound(AnnotationError):
    """No page box of the requested kind on the page or any ancestor."""

    def __init__(self, key: str):
        super().__init__(f"{key} not found on page or any parent node")
        self.key = key


class CropUnsupported(AnnotationError):
    """The bitmap cannot produce sub-region views."""


class DecryptionFailed(AnnotationError):
    pass


class OCRUnavailable(AnnotationError):
    """tesseract is missing or lacks a requested language."""


class PageRangeError(AnnotationError, ValueError):
    pass
