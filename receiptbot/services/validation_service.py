"""ResultValidator: structural gate plus advisory consistency checks for drafts.

Structural checks decide acceptance. The total/item-sum comparison is
advisory only: it appends a warning and never rejects a candidate.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, List

from receiptbot.models.schema import ValidationOutcome

logger = logging.getLogger(__name__)

TOTAL_MISMATCH_WARNING = "total mismatch"


class ResultValidator:
    """Validate a candidate ExpenseDraft before a chain accepts it.

    The validator reads attributes defensively so that drafts built without
    model validation (for example via ``model_construct``) are judged on what
    they actually contain.
    """

    def __init__(self, mismatch_tolerance: float = 0.2) -> None:
        self.mismatch_tolerance = Decimal(str(mismatch_tolerance))

    def validate(self, draft: Any) -> ValidationOutcome:
        errors: List[str] = []
        warnings: List[str] = []

        if draft is None:
            return ValidationOutcome(accepted=False, errors=["missing_draft"])

        merchant = getattr(draft, "merchant", None)
        if merchant is None or (isinstance(merchant, str) and merchant.strip() == ""):
            errors.append("missing_merchant")
        if getattr(draft, "date", None) is None:
            errors.append("missing_date")
        total = getattr(draft, "total", None)
        if total is None:
            errors.append("missing_total")

        items = getattr(draft, "items", None)
        if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
            errors.append("items_not_sequence")
            items = ()

        for index, item in enumerate(items):
            name = getattr(item, "name", None)
            if not name or (isinstance(name, str) and not name.strip()):
                errors.append(f"item_{index}_missing_name")
            if getattr(item, "price", None) is None:
                errors.append(f"item_{index}_missing_price")
            if getattr(item, "quantity", None) is None:
                errors.append(f"item_{index}_missing_quantity")

        if errors:
            logger.info(f"Draft rejected: {errors}")
            return ValidationOutcome(accepted=False, warnings=warnings, errors=errors)

        if self._total_mismatch(total, items):
            logger.warning(
                "Total amount mismatch with items total",
                extra={"total": str(total), "source": str(getattr(draft, "source_provider", ""))},
            )
            warnings.append(TOTAL_MISMATCH_WARNING)

        return ValidationOutcome(accepted=True, warnings=warnings, errors=errors)

    def _total_mismatch(self, total: Any, items: Sequence[Any]) -> bool:
        try:
            total_value = Decimal(str(total))
            items_total = sum(
                (Decimal(str(item.price)) * Decimal(str(item.quantity)) for item in items),
                Decimal("0"),
            )
        except (InvalidOperation, TypeError, ValueError):
            return False

        if total_value <= 0:
            return False
        return abs(total_value - items_total) > total_value * self.mismatch_tolerance


__all__ = ["ResultValidator", "TOTAL_MISMATCH_WARNING"]
