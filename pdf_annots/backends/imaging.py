import logging
import os
from typing import List, Optional, Tuple

import pytesseract
from PIL import Image

from pdf_annots.core.errors import CropUnsupported, OCRUnavailable

logger = logging.getLogger(__name__)


class ImageTools:
    """Crop, save and OCR page bitmaps (Pillow + pytesseract)."""

    def __init__(
        self,
        tesseract_path: str = "tesseract",
        lang: str = "eng",
        tessdata_dir: Optional[str] = None,
        dpi: int = 300,
    ):
        self.tesseract_path = tesseract_path
        self.lang = lang
        self.tessdata_dir = tessdata_dir
        self.dpi = dpi

    @classmethod
    def from_config(cls, config) -> "ImageTools":
        return cls(config.tesseract_path, config.ocr_lang, config.tessdata_dir, config.ocr_dpi)

    def _tess_config(self, with_dpi: bool = True) -> str:
        parts: List[str] = []
        if with_dpi:
            parts.append(f"--dpi {self.dpi}")
        if self.tessdata_dir:
            parts.append(f'--tessdata-dir "{self.tessdata_dir}"')
        return " ".join(parts)

    def check_ocr(self) -> None:
        """Fail early when tesseract or one of the languages is missing."""
        pytesseract.pytesseract.tesseract_cmd = self.tesseract_path
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise OCRUnavailable(f"{self.tesseract_path} not found") from e
        logger.info(f"Tesseract OCR version: {version}")

        available = set(pytesseract.get_languages(config=self._tess_config(with_dpi=False)))
        missing = [code for code in self.lang.split("+") if code not in available]
        if missing:
            raise OCRUnavailable(f"{self.lang} not a valid tesseract language string (missing: {', '.join(missing)})")

    def crop(self, image, box: Tuple[int, int, int, int]):
        if not hasattr(image, "crop"):
            raise CropUnsupported(f"{type(image).__name__} does not support cropping")
        return image.crop(box)

    def write(self, image: Image.Image, path: str, fmt: str = "jpg", quality: int = 90) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if fmt == "jpg":
            image.convert("RGB").save(path, "JPEG", quality=quality)
        else:
            image.save(path, "PNG")
        logger.debug(f"Wrote {path}")

    def ocr(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(image, lang=self.lang, config=self._tess_config())
