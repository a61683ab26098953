"""
Tests for command line parsing and the extract command.

Run with: python -m pytest tests/test_cli.py -v
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest
from PyPDF2 import PdfWriter

import main
from pdf_annots.core.config import ExtractionConfig, config_from_args, parse_arguments
from pdf_annots.core.paths import SearchRoots
from pdf_annots.tools.mcp_tools import create_server


@pytest.fixture
def blank_pdf(tmp_path):
    path = tmp_path / "blank.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=300)
    with open(path, "wb") as f:
        writer.write(f)
    return path


class TestArguments:
    def test_defaults(self):
        config = config_from_args(parse_arguments(["extract", "in.pdf"]))
        assert config == ExtractionConfig()
        assert config.skip_images
        assert not config.needs_page_image

    def test_all_options(self):
        args = parse_arguments([
            "--log-level", "DEBUG", "extract", "in.pdf",
            "-b", "2023-06-01T00:00:00Z", "-w", "-o", "out", "-n", "memo", "-f", "png",
            "-d", "150", "-q", "70", "-e", "-l", "eng+deu", "--tess-data-dir", "/data",
            "--pages", "2-4", "--workers", "4",
        ])
        config = config_from_args(args)
        assert args.log_level == "DEBUG"
        assert config.ignore_before == datetime(2023, 6, 1, tzinfo=timezone.utc)
        assert not config.write_images
        assert config.image_output_path == "out"
        assert config.image_base_name == "memo"
        assert config.image_format == "png"
        assert (config.image_dpi, config.image_quality) == (150, 70)
        assert config.attempt_ocr
        assert config.ocr_lang == "eng+deu"
        assert config.tessdata_dir == "/data"
        assert config.page_range == "2-4"
        assert config.max_workers == 4
        assert config.skip_images is False
        assert not config.needs_page_image

    def test_bad_date_is_rejected(self):
        with pytest.raises(SystemExit):
            parse_arguments(["extract", "in.pdf", "-b", "last tuesday"])

    def test_bad_format_is_rejected(self):
        with pytest.raises(SystemExit):
            parse_arguments(["extract", "in.pdf", "-f", "gif"])

    def test_config_rejects_unknown_format(self):
        with pytest.raises(ValueError):
            ExtractionConfig(image_format="bmp")


class TestMain:
    def test_extract_prints_one_json_line(self, blank_pdf, capsys):
        assert main.main(["extract", str(blank_pdf)]) == 0
        out = capsys.readouterr().out
        assert out == "[]\n"
        assert json.loads(out) == []

    def test_missing_file_reports_error(self, tmp_path, capsys):
        assert main.main(["extract", str(tmp_path / "nope.pdf")]) == 1
        assert capsys.readouterr().err.startswith("Error: ")

    def test_serve_needs_a_directory(self, capsys):
        assert main.main(["serve"]) == 1
        assert "accessible directory" in capsys.readouterr().err


class TestServer:
    def test_tools_are_registered(self, blank_pdf):
        server = create_server(SearchRoots([str(blank_pdf.parent)]))
        tools = asyncio.run(server.list_tools())
        assert sorted(t.name for t in tools) == [
            "extract_annotations",
            "get_page_labels",
            "list_pdf_files",
            "show_accessible_directories",
        ]
