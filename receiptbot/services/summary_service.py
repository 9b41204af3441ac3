"""Human-readable expense summaries handed to the messaging collaborator."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.models.schema import UNSPECIFIED_MERCHANT, ExpenseDraft

UNSPECIFIED_MERCHANT_TH = "ไม่ระบุ"


def format_currency(amount: Decimal) -> str:
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"฿{quantized:,.2f}"


def format_expense_summary(draft: ExpenseDraft, classifier: Optional[CategoryClassifier] = None) -> str:
    """Render the confirmation message sent after a receipt is recorded."""
    classifier = classifier or CategoryClassifier()
    merchant = draft.merchant if draft.merchant and draft.merchant != UNSPECIFIED_MERCHANT else UNSPECIFIED_MERCHANT_TH

    lines = [
        "📋 บันทึกค่าใช้จ่ายสำเร็จ",
        "",
        f"🏪 ร้าน: {merchant}",
        f"📅 วันที่: {draft.date.isoformat()}",
        f"💰 ยอดรวม: {format_currency(draft.total)}",
        "",
        "📝 รายการสินค้า:",
    ]
    for index, item in enumerate(draft.items, start=1):
        quantity = f" x{item.quantity}" if item.quantity > 1 else ""
        lines.append(f"{index}. {item.name}{quantity} - {format_currency(item.price)}")

    breakdown = classifier.summarize(draft.items)
    if len(breakdown) > 1:
        lines.append("")
        lines.append("📈 หมวดหมู่:")
        for category, amount in breakdown.items():
            lines.append(f"- {category}: {format_currency(amount)}")

    if draft.error:
        lines.append("")
        lines.append("⚠️ ไม่สามารถอ่านใบเสร็จได้ครบถ้วน กรุณาตรวจสอบอีกครั้ง")

    return "\n".join(lines)
