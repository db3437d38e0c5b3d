"""
Tests for French display formatting.
"""
from datetime import date
from decimal import Decimal

import pytest

from src.invoicing.formatting import (
    date_formatted,
    default_formatted,
    finance_formatted,
    percent_formatted,
    period_formatted,
)

NNBSP = "\u202f"
NBSP = "\u00a0"


class TestPercent:
    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.2"), "20 %"),
        (Decimal("0.055"), "6 %"),
        (Decimal("0"), "0 %"),
        (Decimal("1"), "100 %"),
    ])
    def test_whole_percent(self, value, expected):
        assert percent_formatted(value) == expected


class TestDefault:
    @pytest.mark.parametrize("value,expected", [
        (Decimal("3"), "3"),
        (Decimal("3.0"), "3"),
        (Decimal("3.5"), "3,5"),
        (Decimal("0.25"), "0,25"),
        (Decimal("2.005"), "2,01"),
        (Decimal("3.001"), "3"),
        (Decimal("1000"), f"1{NNBSP}000"),
        (Decimal("1234.567"), f"1{NNBSP}234,57"),
        (7, "7"),
    ])
    def test_formats(self, value, expected):
        assert default_formatted(value) == expected


class TestFinance:
    @pytest.mark.parametrize("value,expected", [
        (Decimal("0"), f"0,00{NBSP}€"),
        (Decimal("240"), f"240,00{NBSP}€"),
        (Decimal("1234.5"), f"1{NNBSP}234,50{NBSP}€"),
        (Decimal("1234567.891"), f"1{NNBSP}234{NNBSP}567,89{NBSP}€"),
        (Decimal("0.005"), f"0,01{NBSP}€"),
    ])
    def test_formats(self, value, expected):
        assert finance_formatted(value) == expected


class TestDates:
    def test_date(self):
        assert date_formatted(date(2024, 2, 5)) == "05/02/2024"

    def test_missing_date(self):
        assert date_formatted(None) == ""

    def test_period_with_end(self):
        assert period_formatted(date(2024, 1, 1), date(2024, 1, 31)) == "01/01/2024 au 31/01/2024"

    def test_period_without_end(self):
        assert period_formatted(date(2024, 1, 1), None) == "01/01/2024"


class TestLargeAmounts:
    def test_finance_many_digits(self):
        value = Decimal("1219326311370217952249651455.433622292332114")
        groups = ["1", "219", "326", "311", "370", "217", "952", "249", "651", "455"]
        assert finance_formatted(value) == NNBSP.join(groups) + ",43" + NBSP + "€"

    def test_default_many_digits(self):
        value = Decimal("99999999999999999999999999999.995")
        assert default_formatted(value).startswith("100" + NNBSP + "000")
        assert default_formatted(value).endswith("000")
