from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Collection, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from receiptbot.utils.amounts import parse_amount, parse_iso_date

DEFAULT_CATEGORY = "other"
UNSPECIFIED_MERCHANT = "unspecified"


class ProviderSource(str, Enum):
    """Which collaborator produced an OCR result or a draft."""

    OCR_SPACE = "ocr.space"
    GOOGLE_VISION = "google-vision"
    OPENAI = "openai"
    GEMINI = "gemini"
    RULE_BASED = "rule-based"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RawImage:
    data: bytes
    media_type: str = "image/jpeg"

    @property
    def size(self) -> int:
        return len(self.data)


class OcrResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source_provider: ProviderSource
    error: Optional[str] = Field(
        default=None,
        description="Diagnostic message, only set on the terminal fallback result.",
    )

    @classmethod
    def fallback(cls, error: str = "all OCR methods failed") -> "OcrResult":
        return cls(text="", confidence=0.0, source_provider=ProviderSource.FALLBACK, error=error)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    category: str = DEFAULT_CATEGORY

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("item name must not be blank")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> Any:
        if isinstance(value, str):
            parsed = parse_amount(value)
            if parsed is None:
                raise ValueError(f"unparseable price: {value!r}")
            return parsed
        return value

    @field_serializer("price", when_used="json")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class ExpenseDraft(BaseModel):
    """Structured expense record. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    merchant: str
    date: dt.date
    total: Decimal = Field(ge=0)
    items: Tuple[LineItem, ...]
    confidence: float = Field(ge=0.0, le=1.0)
    source_provider: ProviderSource
    error: Optional[str] = None

    @field_validator("total", mode="before")
    @classmethod
    def coerce_total(cls, value: Any) -> Any:
        if value is None:
            return Decimal("0")
        if isinstance(value, str):
            parsed = parse_amount(value)
            if parsed is None:
                raise ValueError(f"unparseable total: {value!r}")
            return parsed
        return value

    @field_serializer("total", when_used="json")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @classmethod
    def terminal_fallback(cls, today: dt.date, error: str = "all analysis methods failed") -> "ExpenseDraft":
        """The always-valid draft returned when every analysis attempt is exhausted."""
        return cls(
            merchant=UNSPECIFIED_MERCHANT,
            date=today,
            total=Decimal("0"),
            items=(
                LineItem(name="unreadable item", price=Decimal("0"), quantity=1, category=DEFAULT_CATEGORY),
            ),
            confidence=0.1,
            source_provider=ProviderSource.FALLBACK,
            error=error,
        )

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        *,
        source: ProviderSource,
        confidence: float,
        today: dt.date,
        classify: Callable[[str], str],
        known_categories: Collection[str] = (),
    ) -> "ExpenseDraft":
        """Build a draft from a provider's JSON object.

        Missing or invalid dates default to ``today``; a null total becomes 0;
        items without a recognised category are classified locally. Missing
        merchant, total, items, or item fields raise pydantic's ValidationError.
        """
        data: Dict[str, Any] = dict(payload)
        data["date"] = parse_iso_date(data.get("date")) or today

        raw_items = data.get("items")
        if isinstance(raw_items, list):
            items: List[Any] = []
            for raw_item in raw_items:
                if isinstance(raw_item, Mapping):
                    raw_item = dict(raw_item)
                    category = raw_item.get("category")
                    name = raw_item.get("name")
                    if not category or (known_categories and category not in known_categories):
                        raw_item["category"] = classify(str(name or ""))
                items.append(raw_item)
            data["items"] = items

        data["source_provider"] = source
        data["confidence"] = confidence
        data.pop("error", None)
        return cls.model_validate(data)


class ValidationOutcome(BaseModel):
    accepted: bool
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
