import datetime as dt
from decimal import Decimal

import pytest

from receiptbot.extractors.rule_based_extractor import (
    RuleBasedExtractor,
    extract_date,
    extract_loose_amounts,
    extract_merchant,
    extract_total,
)
from receiptbot.models.schema import UNSPECIFIED_MERCHANT, ProviderSource


def test_thai_receipt_is_parsed_into_items_and_total(thai_receipt_text, today):
    draft = RuleBasedExtractor(today=today).extract(thai_receipt_text)

    assert draft.merchant == "ร้าน 7-Eleven"
    assert draft.total == Decimal("40")
    assert [(item.name, item.price) for item in draft.items] == [
        ("น้ำดื่ม", Decimal("15")),
        ("ขนม", Decimal("25")),
    ]
    assert draft.items[0].category == "beverage"
    assert all(item.quantity == 1 for item in draft.items)
    assert draft.date == today()
    assert draft.confidence == 0.6
    assert draft.source_provider is ProviderSource.RULE_BASED


def test_extraction_is_deterministic(thai_receipt_text, today):
    extractor = RuleBasedExtractor(today=today)
    assert extractor.extract(thai_receipt_text) == extractor.extract(thai_receipt_text)


def test_total_is_recomputed_from_items_when_missing(today):
    draft = RuleBasedExtractor(today=today).extract("Shop ABC\ncoffee 45\ntea 35")

    assert draft.total == Decimal("80")
    assert [item.category for item in draft.items] == ["beverage", "beverage"]


def test_date_lines_are_not_read_as_items(today):
    text = "Cafe Amazon\nวันที่ 15/03/2024 12:30\nlatte 65 บาท\nรวม 65 บาท"
    draft = RuleBasedExtractor(today=today).extract(text)

    assert draft.date == dt.date(2024, 3, 15)
    assert [item.name for item in draft.items] == ["latte"]


def test_loose_amounts_become_anonymous_items(today):
    text = "Some Shop\nabc 12 xyz\nfoo 30 bar\nรวม 42"
    draft = RuleBasedExtractor(today=today).extract(text)

    assert draft.total == Decimal("42")
    assert [(item.name, item.price, item.category) for item in draft.items] == [
        ("item 1", Decimal("12"), "other"),
        ("item 2", Decimal("30"), "other"),
    ]


def test_garbage_text_still_yields_a_structurally_valid_draft(today):
    draft = RuleBasedExtractor(today=today).extract("@@@@ #### !!!! ????")

    assert draft.merchant == UNSPECIFIED_MERCHANT
    assert draft.total == Decimal("0")
    assert draft.items == ()
    assert draft.date == today()


def test_decimal_comma_and_thousands_separator_prices(today):
    draft = RuleBasedExtractor(today=today).extract("Power Mall\nขนม 12,50\nTV 1,299.00")

    assert [item.price for item in draft.items] == [Decimal("12.50"), Decimal("1299.00")]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("วันที่ 15/03/2024", dt.date(2024, 3, 15)),
        ("date 05-11-23", dt.date(2023, 11, 5)),
        ("15.03.2567", dt.date(2024, 3, 15)),
        ("31/02/2024 then 01/03/2024", dt.date(2024, 3, 1)),
        ("no date here", None),
    ],
)
def test_extract_date(text, expected):
    assert extract_date(text) == expected


def test_merchant_skips_numeric_and_short_lines():
    assert extract_merchant(["12345", "AB", "Lotus's Express"]) == "Lotus's Express"
    assert extract_merchant(["123", "4567"]) == UNSPECIFIED_MERCHANT


def test_extract_total_is_case_insensitive():
    assert extract_total("Sub TOTAL: 1,250.75") == Decimal("1250.75")
    assert extract_total("nothing to see") == Decimal("0")


def test_loose_amounts_skip_the_total():
    items = extract_loose_amounts("10 20 30", Decimal("30"))
    assert [item.price for item in items] == [Decimal("10"), Decimal("20")]


if __name__ == "__main__":
    pytest.main([__file__])
