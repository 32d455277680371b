from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from extraction.effects import ValueMap
from extraction.errors import ValueFormatError
from extraction.matching import Match
from extraction.values import GERMAN, ValueCodec, minor_to_decimal, parse_currency_code, reciprocal


def test_parse_amount_german_grouping() -> None:
    assert GERMAN.parse_amount("1.234,56") == 123456
    assert GERMAN.parse_amount("0,08") == 8
    assert GERMAN.parse_amount("2.500") == 250000


def test_parse_amount_rounds_half_up_to_the_cent() -> None:
    assert GERMAN.parse_amount("0,005") == 1
    assert GERMAN.parse_amount("1,234") == 123


@pytest.mark.parametrize("minor", [0, 8, 123456, 100000000, 5657])
def test_format_then_parse_returns_same_minor_units(minor: int) -> None:
    assert GERMAN.parse_amount(GERMAN.format_amount(minor)) == minor


def test_format_amount() -> None:
    assert GERMAN.format_amount(123456) == "1.234,56"
    assert GERMAN.format_amount(8) == "0,08"
    assert GERMAN.format_amount(-150000) == "-1.500,00"


@pytest.mark.parametrize("raw", ["", "abc", "1,234.56", "12,3,4", "1.23,00"])
def test_malformed_amounts_raise(raw: str) -> None:
    with pytest.raises(ValueError):
        GERMAN.parse_amount(raw)


def test_other_locale_codec() -> None:
    english = ValueCodec(decimal_separator=".", grouping_separator=",")
    assert english.parse_amount("1,234.56") == 123456
    assert english.format_amount(123456) == "1,234.56"


def test_parse_shares_keeps_fraction() -> None:
    assert GERMAN.parse_shares("29,2893") == Decimal("29.2893")
    assert GERMAN.format_decimal(Decimal("20.00")) == "20"
    assert GERMAN.format_decimal(Decimal("2.2394")) == "2,2394"


def test_parse_exchange_rate_rejects_zero() -> None:
    assert GERMAN.parse_exchange_rate("1,1959") == Decimal("1.1959")
    with pytest.raises(ValueError):
        GERMAN.parse_exchange_rate("0,0000")


def test_parse_date_with_and_without_time() -> None:
    assert GERMAN.parse_date("25.11.2015") == datetime(2015, 11, 25)
    assert GERMAN.parse_date("25.11.2015", "11:02:54") == datetime(2015, 11, 25, 11, 2, 54)
    assert GERMAN.parse_date("05.07.18") == datetime(2018, 7, 5)

    with pytest.raises(ValueError):
        GERMAN.parse_date("31.02.2021")
    with pytest.raises(ValueError):
        GERMAN.parse_date("25.11.2015", "25h")


def test_currency_codes() -> None:
    assert parse_currency_code(" EUR ") == "EUR"
    with pytest.raises(ValueError):
        parse_currency_code("eur")
    with pytest.raises(ValueError):
        parse_currency_code("Die")
    with pytest.raises(ValueError):
        parse_currency_code("EURO")
    with pytest.raises(ValueError):
        parse_currency_code(None)


def test_reciprocal_has_ten_digits() -> None:
    assert reciprocal(Decimal("2")) == Decimal("0.5000000000")
    assert reciprocal(Decimal("3")) == Decimal("0.3333333333")


def test_minor_to_decimal() -> None:
    assert minor_to_decimal(5657) == Decimal("56.57")


def test_value_map_reports_field_and_line() -> None:
    match = Match(values={"amount": "12,3,4"}, origins={"amount": 7}, first=7, last=7)
    values = ValueMap({"currency": "EUR"}, match)

    with pytest.raises(ValueFormatError) as excinfo:
        values.convert("amount", GERMAN.parse_amount)

    err = excinfo.value
    assert isinstance(err, ValueError)
    assert err.field == "amount"
    assert err.value == "12,3,4"
    assert err.line == 7


def test_value_map_captures_win_over_context() -> None:
    match = Match(values={"currency": "CHF"}, origins={"currency": 3}, first=3, last=3)
    values = ValueMap({"currency": "EUR", "year": "2021"}, match)

    assert values["currency"] == "CHF"
    assert values["year"] == "2021"
    assert values.line_of("year") is None

    with pytest.raises(ValueFormatError):
        values.require("missing")
