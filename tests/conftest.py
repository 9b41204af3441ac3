"""Pytest configuration and shared fixtures for receipt pipeline tests.

- Pipeline logs go to a per-test temporary directory
- Stub OCR and analysis providers (no network calls)
- A fixed "today" so date defaults are deterministic
"""

import datetime as dt
import io
from decimal import Decimal
from typing import List, Optional

import pytest
from PIL import Image

from receiptbot.models.schema import ExpenseDraft, LineItem, OcrResult, ProviderSource

FIXED_TODAY = dt.date(2024, 3, 20)

THAI_RECEIPT_TEXT = "ร้าน 7-Eleven\nน้ำดื่ม 15 บาท\nขนม 25 บาท\nรวม 40 บาท"


class StubOCRProvider:
    """OCR provider returning canned text, or raising ``error``."""

    def __init__(self, name: str, text: str = "", available: bool = True, error: Optional[Exception] = None):
        self.name = name
        self.text = text
        self.available = available
        self.error = error
        self.calls: List[bytes] = []

    def is_available(self) -> bool:
        return self.available

    def extract(self, image_data: bytes) -> OcrResult:
        self.calls.append(image_data)
        if self.error is not None:
            raise self.error
        return OcrResult(text=self.text, confidence=0.7, source_provider=ProviderSource.OCR_SPACE)


class StubAnalysisProvider:
    """Analysis provider returning a canned draft, or raising ``error``."""

    def __init__(self, name: str, draft=None, available: bool = True, error: Optional[Exception] = None):
        self.name = name
        self.draft = draft
        self.available = available
        self.error = error
        self.calls: List[str] = []

    def is_available(self) -> bool:
        return self.available

    def analyze(self, text: str):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.draft


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    """Keep pipeline JSON logs out of the repository."""
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("RECEIPTBOT_LOG_DIR", str(log_dir))
    return log_dir


@pytest.fixture
def today():
    return lambda: FIXED_TODAY


@pytest.fixture
def thai_receipt_text() -> str:
    return THAI_RECEIPT_TEXT


@pytest.fixture
def openai_draft() -> ExpenseDraft:
    return ExpenseDraft(
        merchant="Tops Market",
        date=dt.date(2024, 3, 15),
        total=Decimal("120.00"),
        items=(
            LineItem(name="coffee", price=Decimal("60.00"), quantity=1, category="beverage"),
            LineItem(name="sandwich", price=Decimal("60.00"), quantity=1, category="food"),
        ),
        confidence=0.9,
        source_provider=ProviderSource.OPENAI,
    )


@pytest.fixture
def receipt_image_bytes() -> bytes:
    """A small, valid PNG standing in for a receipt photo."""
    buffer = io.BytesIO()
    Image.new("RGB", (1600, 800), color=(240, 240, 240)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def stub_ocr():
    return StubOCRProvider


@pytest.fixture
def stub_analyzer():
    return StubAnalysisProvider
