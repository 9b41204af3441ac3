"""Deterministic receipt parser used when the external analysis providers fail.

Fields are extracted by independent pattern functions, applied in this order:
merchant, date, total, items, then total reconciliation.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from decimal import Decimal
from typing import Callable, List, Optional

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.models.schema import (
    DEFAULT_CATEGORY,
    UNSPECIFIED_MERCHANT,
    ExpenseDraft,
    LineItem,
    ProviderSource,
)
from receiptbot.utils.amounts import build_date, parse_amount

logger = logging.getLogger(__name__)

RULE_BASED_CONFIDENCE = 0.6
TWO_DIGIT_YEAR_PREFIX = 2000
BUDDHIST_ERA_OFFSET = 543

NUMBER_PATTERN = r"(?<![\d.,:/])(?:\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d{1,6}(?:[.,]\d{1,2})?)(?![\d/:])"

MERCHANT_LETTER_RE = re.compile(r"[ก-๙a-zA-Z]")
DIGITS_ONLY_RE = re.compile(r"^\d+$")
DATE_RE = re.compile(r"(?<!\d)(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})(?!\d)")
TOTAL_RE = re.compile(r"(?:รวม|total|sum).*?(" + NUMBER_PATTERN + r")", re.IGNORECASE)
NON_ITEM_KEYWORDS_RE = re.compile(r"รวม|total|sum|tax|vat|ภาษี", re.IGNORECASE)
LINE_ITEM_RE = re.compile(
    r"^(?P<name>.+?)\s+(?P<price>" + NUMBER_PATTERN + r")(?:\s*(?:บาท|฿|THB))?\s*$",
    re.IGNORECASE,
)
NUMBER_RE = re.compile(NUMBER_PATTERN)


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def extract_merchant(lines: List[str]) -> str:
    """First line with a letter that is not purely numeric and longer than 3 chars."""
    for line in lines:
        if MERCHANT_LETTER_RE.search(line) and not DIGITS_ONLY_RE.match(line) and len(line) > 3:
            return line
    return UNSPECIFIED_MERCHANT


def extract_date(text: str) -> Optional[dt.date]:
    """First day/month/year match that forms a real calendar date."""
    for match in DATE_RE.finditer(text):
        day, month, year_str = match.groups()
        year = int(year_str)
        if len(year_str) == 2:
            year += TWO_DIGIT_YEAR_PREFIX
        elif year >= 2400:
            year -= BUDDHIST_ERA_OFFSET
        parsed = build_date(int(day), int(month), year)
        if parsed is not None:
            return parsed
    return None


def extract_total(text: str) -> Decimal:
    match = TOTAL_RE.search(text)
    if not match:
        return Decimal("0")
    return parse_amount(match.group(1)) or Decimal("0")


def extract_line_items(lines: List[str], classifier: CategoryClassifier) -> List[LineItem]:
    items: List[LineItem] = []
    for line in lines:
        if NON_ITEM_KEYWORDS_RE.search(line) or DATE_RE.search(line):
            continue
        match = LINE_ITEM_RE.match(line)
        if not match:
            continue
        name = match.group("name").strip()
        price = parse_amount(match.group("price"))
        if price is None or price <= 0 or len(name) <= 1:
            continue
        items.append(LineItem(name=name, price=price, quantity=1, category=classifier.classify(name)))
    return items


def extract_loose_amounts(text: str, total: Decimal) -> List[LineItem]:
    """Treat every number other than the total as an anonymous item."""
    items: List[LineItem] = []
    for index, match in enumerate(NUMBER_RE.finditer(text), start=1):
        price = parse_amount(match.group(0))
        if price is None or price <= 0 or price == total:
            continue
        items.append(LineItem(name=f"item {index}", price=price, quantity=1, category=DEFAULT_CATEGORY))
    return items


class RuleBasedExtractor:
    """Pattern-heuristic analysis provider. Always available, never calls out."""

    name = ProviderSource.RULE_BASED.value

    def __init__(
        self,
        classifier: Optional[CategoryClassifier] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.classifier = classifier or CategoryClassifier()
        self.today = today

    def is_available(self) -> bool:
        return True

    def analyze(self, text: str) -> ExpenseDraft:
        return self.extract(text)

    def extract(self, text: str) -> ExpenseDraft:
        lines = split_lines(text)

        merchant = extract_merchant(lines)
        receipt_date = extract_date(text) or self.today()
        total = extract_total(text)

        items = extract_line_items(lines, self.classifier)
        if not items:
            items = extract_loose_amounts(text, total)

        if total == 0:
            total = sum((item.price for item in items), Decimal("0"))

        logger.info(f"Rule-based extraction: merchant={merchant!r}, total={total}, items={len(items)}")

        return ExpenseDraft(
            merchant=merchant,
            date=receipt_date,
            total=total,
            items=tuple(items),
            confidence=RULE_BASED_CONFIDENCE,
            source_provider=ProviderSource.RULE_BASED,
        )


__all__ = [
    "RuleBasedExtractor",
    "extract_merchant",
    "extract_date",
    "extract_total",
    "extract_line_items",
    "extract_loose_amounts",
]
