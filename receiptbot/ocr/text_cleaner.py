"""Normalization and receipt-likeness checks for raw OCR text."""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

RECEIPT_KEYWORDS = (
    "รวม", "total", "บาท", "฿", "ใบเสร็จ", "receipt",
    "tax", "vat", "ภาษี", "เงินสด", "cash", "card",
    "เครดิต", "change", "ทอน",
)
PRICE_RE = re.compile(r"\d{1,6}(?:[,.]\d{2})?")


class ReceiptTextCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    reason: Optional[str] = None
    confidence: float = 0.0
    found_keywords: List[str] = Field(default_factory=list)


def clean_ocr_text(text: Optional[str]) -> str:
    """Unify line endings and whitespace while keeping the line structure."""
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[^\S\n]+", " ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def check_receipt_text(text: Optional[str], min_length: int = 20) -> ReceiptTextCheck:
    """Advisory check: does this text look like it came from a receipt?"""
    if not text or len(text.strip()) < min_length:
        return ReceiptTextCheck(is_valid=False, reason="text too short")

    lowered = text.lower()
    found = [keyword for keyword in RECEIPT_KEYWORDS if keyword.lower() in lowered]
    if len(found) < 2:
        return ReceiptTextCheck(is_valid=False, reason="no receipt keywords found", found_keywords=found)

    if not PRICE_RE.search(text):
        return ReceiptTextCheck(is_valid=False, reason="no price-like numbers found", found_keywords=found)

    return ReceiptTextCheck(
        is_valid=True,
        confidence=min(0.9, len(found) * 0.2 + 0.3),
        found_keywords=found,
    )
