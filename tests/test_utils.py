from datetime import date, datetime

import pytest

from classbank.utils import cell_text, clean_phone, format_date, is_empty, is_number, norm_text, parse_float, try_parse_date


class TestNormText:
    def test_invisible_marks_and_spaces(self):
        raw = chr(0xFEFF) + "שם" + chr(0xA0) + chr(0x200F) + "התלמיד  "
        assert norm_text(raw) == "שם התלמיד"

    def test_dashes(self):
        assert norm_text("מתמטיקה " + chr(0x2013) + " כהן") == "מתמטיקה - כהן"

    def test_case_is_kept(self):
        assert norm_text("Home Phone") == "Home Phone"


class TestCells:
    @pytest.mark.parametrize("v", [None, "", "   ", float("nan")])
    def test_empty(self, v):
        assert is_empty(v)
        assert cell_text(v) == ""

    def test_numbers(self):
        assert is_number(3)
        assert is_number(2.5)
        assert not is_number(True)
        assert not is_number("3")
        assert not is_number(float("nan"))

    def test_integral_float_text(self):
        assert cell_text(501234567.0) == "501234567"
        assert cell_text(2.5) == "2.5"

    @pytest.mark.parametrize("v,expected", [
        (42, 42.0),
        ("42", 42.0),
        ("42 נק'", 42.0),
        (" -3.5x", -3.5),
        ("לא ידוע", None),
        (None, None),
        (True, None),
    ])
    def test_parse_float(self, v, expected):
        assert parse_float(v) == expected

    def test_clean_phone(self):
        assert clean_phone("+972 (50) 123-4567") == "+972501234567"
        assert clean_phone(501234567.0) == "501234567"


class TestDates:
    def test_day_first(self):
        assert try_parse_date("5.3.2024") == date(2024, 3, 5)
        assert try_parse_date("05/03/2024") == date(2024, 3, 5)

    def test_iso(self):
        assert try_parse_date("2024-03-05") == date(2024, 3, 5)

    def test_datetime_cell(self):
        assert try_parse_date(datetime(2024, 3, 5, 10, 30)) == date(2024, 3, 5)

    def test_not_a_date(self):
        assert try_parse_date("מחר") is None
        assert try_parse_date("32.13.2024") is None

    def test_format(self):
        assert format_date(date(2024, 3, 5)) == "5.3.2024"
