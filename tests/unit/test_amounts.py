import datetime as dt
from decimal import Decimal

import pytest

from receiptbot.utils.amounts import parse_amount, parse_iso_date


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("฿1,234.50", Decimal("1234.50")),
        ("12,50", Decimal("12.50")),
        ("45 บาท", Decimal("45")),
        ("THB 99", Decimal("99")),
        (15, Decimal("15")),
        (12.5, Decimal("12.5")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "abc", ""])
def test_parse_amount_rejects_non_amounts(raw):
    assert parse_amount(raw) is None


def test_parse_iso_date():
    assert parse_iso_date("2024-03-15T10:00:00") == dt.date(2024, 3, 15)
    assert parse_iso_date(dt.datetime(2024, 3, 15, 9, 30)) == dt.date(2024, 3, 15)
    assert parse_iso_date("2024-02-30") is None
    assert parse_iso_date("15/03/2024") is None
