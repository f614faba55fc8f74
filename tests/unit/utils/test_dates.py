"""Tests for date normalization."""

import re

import pytest

from app.utils.dates import normalize_date

STRICT_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TestNormalizeDate:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-03-15", "2024-03-15"),
            ("2024-03-15 UTC", "2024-03-15"),
            ("2024-03-15-2024-04-01", "2024-03-15"),
            ("2024-03-15.", "2024-03-15"),
            ("  2024-03-15  ", "2024-03-15"),
            ("around 2024-03-15 in Lahore", "2024-03-15"),
            ("1900-01-01", "1900-01-01"),
            ("2100-12-31", "2100-12-31"),
        ],
    )
    def test_accepts_and_normalizes(self, raw, expected):
        assert normalize_date(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "not a date",
            "2024-13-40",
            "2024-00-10",
            "2024-05-00",
            "1899-12-31",
            "2101-01-01",
            "15/03/2024",
            "March 2024",
            "",
            "   ",
        ],
    )
    def test_rejects_invalid(self, raw):
        assert normalize_date(raw) is None

    @pytest.mark.parametrize("raw", [None, 20240315, ["2024-03-15"], {"date": "2024-03-15"}])
    def test_non_string_input_is_invalid(self, raw):
        assert normalize_date(raw) is None

    def test_day_31_accepted_for_any_month(self):
        # Component ranges only; calendar checks happen at insert time
        assert normalize_date("2024-02-31") == "2024-02-31"

    def test_rejection_logs_warning(self, caplog):
        with caplog.at_level("WARNING"):
            assert normalize_date("sometime last year") is None
        assert "Invalid date format" in caplog.text

    @pytest.mark.parametrize(
        "raw",
        [
            "2024-03-15T10:00:00Z",
            "9999-99-99",
            "2024-3-5",
            "0000-00-00 UTC",
            "2024-03-15 Asia/Karachi",
            "between 2024-13-01 and 2024-02-02",
            "...",
            "2024-03-15-2024-13-99",
        ],
    )
    def test_output_is_always_strict_or_none(self, raw):
        result = normalize_date(raw)
        if result is not None:
            assert STRICT_DATE.match(result)
            year, month, day = (int(part) for part in result.split("-"))
            assert 1900 <= year <= 2100
            assert 1 <= month <= 12
            assert 1 <= day <= 31
