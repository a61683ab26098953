"""
Tests for PDF date parsing and formatting.

Run with: python -m pytest tests/test_dates.py -v
"""

from datetime import datetime, timezone

import pytest

from pdf_annots.core.dates import format_date, parse_cutoff, parse_pdf_date


class TestPdfDates:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("D:20230115103000+01'00'", "2023-01-15T10:30:00+01:00"),
            ("D:20230115103000-05'00'", "2023-01-15T10:30:00-05:00"),
            ("D:20230115103000Z", "2023-01-15T10:30:00Z"),
            ("D:20230115103000Z00'00'", "2023-01-15T10:30:00Z"),
            ("D:20230115103000+0530", "2023-01-15T10:30:00+05:30"),
            ("D:20230115103000", "2023-01-15T10:30:00Z"),
            ("20230115", "2023-01-15T00:00:00Z"),
            ("D:2023", "2023-01-01T00:00:00Z"),
        ],
    )
    def test_round_trip_to_rfc3339(self, raw, expected):
        assert format_date(parse_pdf_date(raw)) == expected

    @pytest.mark.parametrize("raw", [None, "", "garbage", "D:20231301000000Z", "D:20230132"])
    def test_unreadable(self, raw):
        assert parse_pdf_date(raw) is None

    def test_offset_is_kept(self):
        parsed = parse_pdf_date("D:20230115103000+01'00'")
        assert parsed == datetime(2023, 1, 15, 9, 30, tzinfo=timezone.utc)


class TestCutoff:
    def test_zulu(self):
        assert parse_cutoff("2023-01-15T00:00:00Z") == datetime(2023, 1, 15, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_cutoff("2023-01-15").tzinfo == timezone.utc

    def test_offset(self):
        assert parse_cutoff("2023-01-15T10:00:00+02:00") == datetime(2023, 1, 15, 8, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_cutoff("yesterday")
