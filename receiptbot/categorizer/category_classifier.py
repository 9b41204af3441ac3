from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

if TYPE_CHECKING:
    from receiptbot.models.schema import LineItem

# Declaration order is match priority: the first category with a hit wins.
DEFAULT_CATEGORY_KEYWORDS: Dict[str, Sequence[str]] = {
    "food": (
        "ข้าว", "แกง", "ผัด", "ต้ม", "ยำ", "ลาบ", "น้ำพริก", "ปลา", "ไก่", "หมู", "เนื้อ", "ไข่",
        "pizza", "burger", "sandwich",
    ),
    "beverage": (
        "น้ำ", "กาแฟ", "ชา", "นม", "เบียร์", "โซดา", "น้ำผลไม้",
        "coffee", "tea", "milk", "beer", "coke", "pepsi",
    ),
    "household": ("สบู่", "ยาสีฟัน", "แชมพู", "กระดาษ", "soap", "shampoo", "tissue"),
    "clothing": ("เสื้อ", "กางเกง", "กระโปรง", "รองเท้า", "shirt", "pants", "shoes"),
    "medicine": ("ยา", "วิตามิน", "medicine", "vitamin", "paracetamol"),
    "cosmetics": ("ครีม", "โลชั่น", "ลิปสติก", "cream", "lotion", "lipstick"),
}


class CategoryClassifier:
    """Simple keyword-based classifier for receipt line items."""

    def __init__(
        self,
        keyword_map: Optional[Dict[str, Sequence[str]]] = None,
        default_category: str = "other",
    ) -> None:
        self.keyword_map = keyword_map or DEFAULT_CATEGORY_KEYWORDS
        self.default_category = default_category

    @property
    def labels(self) -> List[str]:
        labels = list(self.keyword_map)
        if self.default_category not in labels:
            labels.append(self.default_category)
        return labels

    def classify(self, name: str) -> str:
        haystack = (name or "").lower()
        for category, keywords in self.keyword_map.items():
            for keyword in keywords:
                if keyword and keyword.lower() in haystack:
                    return category
        return self.default_category

    def summarize(self, items: Iterable["LineItem"]) -> Dict[str, Decimal]:
        """Aggregate spend per category, in first-seen order."""
        summary: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for item in items:
            summary[item.category or self.default_category] += item.price * item.quantity
        return dict(summary)
