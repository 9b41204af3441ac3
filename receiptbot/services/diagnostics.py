"""Provider reachability checks (smoke tests), not part of the pipeline contract."""

from __future__ import annotations

import io
import logging
from typing import List, Optional

from PIL import Image
from pydantic import BaseModel

from receiptbot.pipeline.analysis_chain import AnalysisProviderChain
from receiptbot.pipeline.ocr_chain import OCRProviderChain

logger = logging.getLogger(__name__)

SAMPLE_RECEIPT_TEXT = """
ร้าน 7-eleven
วันที่ 15/03/2024
น้ำดื่ม 15 บาท
ขนมปัง 25 บาท
รวม 40 บาท
"""


class ProviderCheck(BaseModel):
    kind: str
    name: str
    available: bool
    ok: bool
    detail: Optional[str] = None


def blank_test_image(width: int = 400, height: int = 200) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(255, 255, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


class ProviderDiagnostics:
    """Call every configured provider once with fixed inputs and report."""

    def __init__(self, ocr_chain: OCRProviderChain, analysis_chain: AnalysisProviderChain) -> None:
        self.ocr_chain = ocr_chain
        self.analysis_chain = analysis_chain

    def run(self) -> List[ProviderCheck]:
        checks: List[ProviderCheck] = []
        image = blank_test_image()

        for provider in self.ocr_chain.providers:
            checks.append(self._check("ocr", provider, lambda p=provider: p.extract(image)))

        for provider in self.analysis_chain.ordered_providers:
            checks.append(self._check("analysis", provider, lambda p=provider: p.analyze(SAMPLE_RECEIPT_TEXT)))

        logger.info(f"Provider diagnostics: {sum(check.ok for check in checks)}/{len(checks)} working")
        return checks

    @staticmethod
    def _check(kind: str, provider, call) -> ProviderCheck:
        if not provider.is_available():
            return ProviderCheck(kind=kind, name=provider.name, available=False, ok=False, detail="not configured")
        try:
            result = call()
        except Exception as exc:
            logger.warning(f"❌ {provider.name} failed: {exc}")
            return ProviderCheck(kind=kind, name=provider.name, available=True, ok=False, detail=str(exc))
        source = getattr(result, "source_provider", None)
        detail = source.value if source is not None else None
        logger.info(f"✅ {provider.name} is working")
        return ProviderCheck(kind=kind, name=provider.name, available=True, ok=True, detail=detail)
