from __future__ import annotations

import datetime as dt
import json
import re
from typing import Any, Dict, Sequence

from pydantic import ValidationError

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.exceptions import ProviderResponseError
from receiptbot.models.schema import ExpenseDraft, ProviderSource

CODE_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

SYSTEM_PROMPT = "You are an expert at reading Thai and English shop receipts. Reply with JSON only."


def build_receipt_prompt(ocr_text: str, categories: Sequence[str]) -> str:
    """Prompt asking a language model to turn OCR text into the draft JSON shape."""
    category_list = ", ".join(f'"{label}"' for label in categories)
    return (
        "Analyse the following receipt text and convert it to JSON.\n\n"
        f"{ocr_text}\n\n"
        "Return ONLY a JSON object in this shape:\n"
        "{\n"
        '  "merchant": "shop name",\n'
        '  "date": "YYYY-MM-DD",\n'
        '  "total": total amount as a number,\n'
        '  "items": [\n'
        '    {"name": "item name", "price": price as a number, "quantity": quantity as an integer, "category": "category"}\n'
        "  ]\n"
        "}\n\n"
        f"Use one of these categories: {category_list}\n"
    )


def parse_json_reply(content: str) -> Dict[str, Any]:
    """Decode a model reply, tolerating Markdown code fences around the JSON."""
    cleaned = CODE_FENCE_RE.sub("", (content or "").strip()).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ProviderResponseError(f"Invalid JSON in model reply: {exc}") from exc
    if not isinstance(data, dict):
        raise ProviderResponseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def draft_from_reply(
    content: str,
    *,
    source: ProviderSource,
    confidence: float,
    today: dt.date,
    classifier: CategoryClassifier,
) -> ExpenseDraft:
    payload = parse_json_reply(content)
    try:
        return ExpenseDraft.from_payload(
            payload,
            source=source,
            confidence=confidence,
            today=today,
            classify=classifier.classify,
            known_categories=classifier.labels,
        )
    except ValidationError as exc:
        raise ProviderResponseError(f"{source.value} reply does not describe a receipt: {exc}") from exc


__all__ = ["SYSTEM_PROMPT", "build_receipt_prompt", "parse_json_reply", "draft_from_reply"]
