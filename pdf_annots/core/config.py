import argparse
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pdf_annots.core.dates import parse_cutoff
from pdf_annots.core.matcher import BAND_SHRINK, OVERLAP_THRESHOLD
from pdf_annots.core.text_resolver import FALLBACK_RATIO, FALLBACK_SPACE_MARGIN

VERSION = "0.1.0"
IMAGE_FORMATS = ("jpg", "png")


@dataclass(frozen=True)
class ExtractionConfig:
    """Options for one extraction run, passed down explicitly."""

    ignore_before: Optional[datetime] = None
    write_images: bool = True
    image_output_path: str = ""
    image_base_name: str = "annot"
    image_format: str = "jpg"
    image_dpi: int = 120
    image_quality: int = 90
    attempt_ocr: bool = False
    ocr_lang: str = "eng"
    ocr_dpi: int = 300
    tesseract_path: str = "tesseract"
    tessdata_dir: Optional[str] = None
    page_range: Optional[str] = None
    max_workers: Optional[int] = None
    band_shrink: float = BAND_SHRINK
    overlap_threshold: float = OVERLAP_THRESHOLD
    fallback_ratio: float = FALLBACK_RATIO
    fallback_space_margin: float = FALLBACK_SPACE_MARGIN

    def __post_init__(self):
        if self.image_format not in IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format: {self.image_format}")

    @property
    def skip_images(self) -> bool:
        """No image files can be produced without both a directory and a name."""
        return not self.image_output_path or not self.image_base_name

    @property
    def needs_page_image(self) -> bool:
        return self.write_images and not self.skip_images


def _cutoff(value: str) -> datetime:
    try:
        return parse_cutoff(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 date: {value}") from None


def parse_arguments(argv=None):
    """Parse CLI arguments for the `extract` and `serve` commands."""
    parser = argparse.ArgumentParser(
        prog="pdf-annots",
        description="Extract highlights, notes and image regions from a PDF as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "\nExamples:\n"
            "  python main.py extract paper.pdf\n"
            "  python main.py extract paper.pdf -o ~/notes/img -f png -e -l eng+deu\n"
            "  python main.py serve ~/Downloads ~/Documents\n"
        ),
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ext = sub.add_parser("extract", help="Print the annotations of a PDF as one JSON line")
    ext.add_argument("input", help="Path to input PDF")
    ext.add_argument("-b", "--ignore-before", type=_cutoff, help="Ignore annotations added before this ISO 8601 date")
    ext.add_argument("-w", "--no-write", action="store_true", help="Do not save images to disk")
    ext.add_argument("-o", "--image-output-path", default="", help="Output path of image annotations")
    ext.add_argument("-n", "--image-base-name", default="annot", help="Base name of saved images")
    ext.add_argument("-f", "--image-format", choices=IMAGE_FORMATS, default="jpg", help="Image format")
    ext.add_argument("-d", "--image-dpi", type=int, default=120, help="Image DPI")
    ext.add_argument("-q", "--image-quality", type=int, default=90, help="Image quality. Only applies to jpg images")
    ext.add_argument("-e", "--attempt-ocr", action="store_true", help="Attempt to extract text from images with tesseract")
    ext.add_argument("-l", "--ocr-lang", default="eng", help="OCR language(s), eg. 'eng+deu'")
    ext.add_argument("--tesseract-path", default="tesseract", help="Path to the tesseract executable")
    ext.add_argument("--tess-data-dir", default=None, help="Path to the tesseract data folder")
    ext.add_argument("--pages", default=None, help="Pages to read: 'first', 'last', 'N', 'S-E' or a comma list")
    ext.add_argument("--workers", type=int, default=None, help="Worker threads per tier")

    srv = sub.add_parser("serve", help="Run the MCP server over stdio")
    srv.add_argument("directories", nargs="*", help="Accessible directories for PDFs")
    srv.add_argument("--allow-dir", action="append", dest="allowed_dirs", help="Add an allowed directory (repeatable)")
    srv.add_argument("--max-file-size", type=int, default=100 * 1024 * 1024, help="Maximum file size in bytes (default: 100MB)")

    return parser.parse_args(argv)


def config_from_args(args) -> ExtractionConfig:
    return ExtractionConfig(
        ignore_before=args.ignore_before,
        write_images=not args.no_write,
        image_output_path=args.image_output_path or "",
        image_base_name=args.image_base_name or "",
        image_format=args.image_format,
        image_dpi=args.image_dpi,
        image_quality=args.image_quality,
        attempt_ocr=args.attempt_ocr,
        ocr_lang=args.ocr_lang,
        tesseract_path=args.tesseract_path,
        tessdata_dir=args.tess_data_dir,
        page_range=args.pages,
        max_workers=args.workers,
    )
