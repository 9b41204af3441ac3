"""Models package for the receipt pipeline.

RawImage and OcrResult carry the image and extracted text; ExpenseDraft and
LineItem are the structured output; ValidationOutcome is the validator verdict.
"""

from receiptbot.models.schema import (
    DEFAULT_CATEGORY,
    UNSPECIFIED_MERCHANT,
    ExpenseDraft,
    LineItem,
    OcrResult,
    ProviderSource,
    RawImage,
    ValidationOutcome,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "UNSPECIFIED_MERCHANT",
    "ExpenseDraft",
    "LineItem",
    "OcrResult",
    "ProviderSource",
    "RawImage",
    "ValidationOutcome",
]
