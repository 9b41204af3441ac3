import datetime as dt
from decimal import Decimal

from receiptbot.models.schema import ExpenseDraft, LineItem, ProviderSource
from receiptbot.services.summary_service import format_currency, format_expense_summary


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "฿1,234.50"
    assert format_currency(Decimal("0")) == "฿0.00"


def test_summary_lists_items_and_categories(openai_draft):
    summary = format_expense_summary(openai_draft)

    assert summary.splitlines()[0] == "📋 บันทึกค่าใช้จ่ายสำเร็จ"
    assert "🏪 ร้าน: Tops Market" in summary
    assert "📅 วันที่: 2024-03-15" in summary
    assert "💰 ยอดรวม: ฿120.00" in summary
    assert "1. coffee - ฿60.00" in summary
    assert "📈 หมวดหมู่:" in summary
    assert "- beverage: ฿60.00" in summary


def test_single_category_summary_has_no_breakdown():
    draft = ExpenseDraft(
        merchant="Cafe Amazon",
        date=dt.date(2024, 3, 15),
        total=Decimal("130"),
        items=(LineItem(name="latte", price=Decimal("65"), quantity=2, category="beverage"),),
        confidence=0.6,
        source_provider=ProviderSource.RULE_BASED,
    )

    summary = format_expense_summary(draft)

    assert "1. latte x2 - ฿65.00" in summary
    assert "📈" not in summary


def test_fallback_draft_summary_warns_user():
    summary = format_expense_summary(ExpenseDraft.terminal_fallback(dt.date(2024, 3, 20)))

    assert "🏪 ร้าน: ไม่ระบุ" in summary
    assert "⚠️" in summary
