"""
Tests for cropping, writing and OCR of page bitmaps.

Run with: python -m pytest tests/test_imaging.py -v
"""

import pytest
import pytesseract
from PIL import Image

from pdf_annots.backends.imaging import ImageTools
from pdf_annots.core.errors import CropUnsupported, OCRUnavailable


@pytest.fixture
def tools(monkeypatch):
    monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")
    return ImageTools(lang="eng+deu", tessdata_dir="/opt/tessdata", dpi=300)


class TestWrite:
    @pytest.mark.parametrize("fmt,expected", [("jpg", "JPEG"), ("png", "PNG")])
    def test_written_file_reopens(self, tmp_path, fmt, expected):
        """An RGBA crop is saved in the requested format, creating the directory."""
        image = Image.new("RGBA", (20, 10), (255, 0, 0, 128))
        path = tmp_path / "out" / f"memo-1.{fmt}"
        ImageTools().write(image, str(path), fmt=fmt, quality=80)
        with Image.open(path) as saved:
            assert saved.format == expected
            assert saved.size == (20, 10)


class TestCrop:
    def test_crop_real_image(self):
        image = Image.new("RGB", (100, 50))
        assert ImageTools().crop(image, (10, 5, 40, 25)).size == (30, 20)

    def test_object_without_crop(self):
        with pytest.raises(CropUnsupported):
            ImageTools().crop(object(), (0, 0, 1, 1))


class TestCheckOcr:
    def test_missing_binary(self, tools, monkeypatch):
        def not_found():
            raise pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(pytesseract, "get_tesseract_version", not_found)
        with pytest.raises(OCRUnavailable, match="not found"):
            tools.check_ocr()

    def test_missing_language(self, tools, monkeypatch):
        seen = {}

        def languages(config=""):
            seen["config"] = config
            return ["eng", "osd"]

        monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
        monkeypatch.setattr(pytesseract, "get_languages", languages)
        with pytest.raises(OCRUnavailable, match="deu"):
            tools.check_ocr()
        assert seen["config"] == '--tessdata-dir "/opt/tessdata"'

    def test_all_languages_present(self, tools, monkeypatch):
        monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
        monkeypatch.setattr(pytesseract, "get_languages", lambda config="": ["deu", "eng"])
        tools.check_ocr()
        assert pytesseract.pytesseract.tesseract_cmd == "tesseract"


class TestOcr:
    def test_passes_language_and_config(self, tools, monkeypatch):
        calls = []

        def image_to_string(image, lang=None, config=""):
            calls.append((image.size, lang, config))
            return "text\n"

        monkeypatch.setattr(pytesseract, "image_to_string", image_to_string)
        assert tools.ocr(Image.new("L", (8, 8))) == "text\n"
        assert calls == [((8, 8), "eng+deu", '--dpi 300 --tessdata-dir "/opt/tessdata"')]
