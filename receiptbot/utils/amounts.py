from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

CURRENCY_MARKERS = ("฿", "บาท", "THB", "thb", "$")

_THOUSANDS_RE = re.compile(r"^-?\d{1,3}(?:,\d{3})+(?:\.\d+)?$")
_DECIMAL_COMMA_RE = re.compile(r"^-?\d+,\d{1,2}$")
_ISO_DATE_RE = re.compile(r"(?P<y>\d{4})-(?P<m>\d{1,2})-(?P<d>\d{1,2})")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a money amount into a Decimal.

    Handles:
    - Baht markers: ฿, บาท, THB
    - Thousands separators: 1,234.50
    - Decimal comma: 12,50
    - Already numeric values (int, float, Decimal)

    Returns None if value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    s = str(value).strip()
    for marker in CURRENCY_MARKERS:
        s = s.replace(marker, "")
    s = s.replace(" ", "")

    if _THOUSANDS_RE.match(s):
        s = s.replace(",", "")
    elif _DECIMAL_COMMA_RE.match(s):
        s = s.replace(",", ".")
    else:
        s = s.replace(",", "")

    s = re.sub(r"[^0-9.\-]", "", s)
    if s in ("", "-", "."):
        return None

    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def build_date(day: int, month: int, year: int) -> Optional[dt.date]:
    """Return a calendar date, or None when the parts do not form one."""
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def parse_iso_date(value: Any) -> Optional[dt.date]:
    """Parse YYYY-MM-DD (optionally followed by a time part) into a date."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value

    match = _ISO_DATE_RE.search(str(value))
    if not match:
        return None
    return build_date(int(match.group("d")), int(match.group("m")), int(match.group("y")))
