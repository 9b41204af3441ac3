"""Receipt interpretation pipeline: one image in, one ExpenseDraft out.

Flow: raw image -> ImagePreprocessor -> OCRProviderChain -> clean_ocr_text ->
AnalysisProviderChain. The finished draft is handed by value to the
persistence and messaging collaborators only after it is complete.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field

from receiptbot.models.schema import ExpenseDraft, OcrResult, RawImage
from receiptbot.ocr.preprocess import ImagePreprocessor
from receiptbot.ocr.text_cleaner import ReceiptTextCheck, check_receipt_text, clean_ocr_text
from receiptbot.pipeline.analysis_chain import AnalysisProviderChain
from receiptbot.pipeline.ocr_chain import OCRProviderChain
from receiptbot.utils.logging_utils import log_pipeline_event

logger = logging.getLogger(__name__)


class ExpenseRepository(Protocol):
    """Persistence collaborator. Returns the stored record identifier."""

    def save(self, draft: ExpenseDraft, user_id: str, raw_text: str) -> str: ...


class ExpenseNotifier(Protocol):
    """Messaging collaborator. Renders and delivers a summary to the user."""

    def notify(self, user_id: str, draft: ExpenseDraft) -> None: ...


class PipelineResult(BaseModel):
    draft: ExpenseDraft
    ocr: OcrResult
    receipt_check: ReceiptTextCheck
    analysis_state: str
    warnings: List[str] = Field(default_factory=list)
    record_id: Optional[str] = None
    processing_time_ms: int = 0


class ReceiptPipeline:
    """Run one receipt image through preprocessing, OCR and analysis.

    All collaborators are injected; the pipeline holds no per-invocation state,
    so one instance can serve concurrent invocations.
    """

    def __init__(
        self,
        preprocessor: ImagePreprocessor,
        ocr_chain: OCRProviderChain,
        analysis_chain: AnalysisProviderChain,
        repository: Optional[ExpenseRepository] = None,
        notifier: Optional[ExpenseNotifier] = None,
        log_dir: Optional[str] = None,
    ) -> None:
        self.preprocessor = preprocessor
        self.ocr_chain = ocr_chain
        self.analysis_chain = analysis_chain
        self.repository = repository
        self.notifier = notifier
        self.log_dir = log_dir

    def process(self, image: RawImage) -> PipelineResult:
        """Interpret a receipt image.

        Raises:
            InsufficientInputError: OCR produced too little text to analyse.
        """
        started = time.perf_counter()
        logger.info(f"Processing receipt image ({image.size} bytes, {image.media_type})")

        prepared = self.preprocessor.process(image.data)
        ocr_result = self.ocr_chain.extract(prepared)
        text = clean_ocr_text(ocr_result.text)

        receipt_check = check_receipt_text(text)
        if not receipt_check.is_valid:
            logger.warning(f"OCR text does not look like a receipt: {receipt_check.reason}")

        outcome = self.analysis_chain.analyze_with_trace(text)
        elapsed = int((time.perf_counter() - started) * 1000)

        log_pipeline_event(
            {
                "event_type": "receipt_processed",
                "ocr_provider": ocr_result.source_provider.value,
                "analysis_provider": outcome.draft.source_provider.value,
                "analysis_state": outcome.state.value,
                "item_count": len(outcome.draft.items),
                "warnings": outcome.warnings,
                "processing_time_ms": elapsed,
            },
            log_dir=self.log_dir,
        )

        return PipelineResult(
            draft=outcome.draft,
            ocr=ocr_result,
            receipt_check=receipt_check,
            analysis_state=outcome.state.value,
            warnings=outcome.warnings,
            processing_time_ms=elapsed,
        )

    def process_and_store(self, image: RawImage, user_id: str) -> PipelineResult:
        """Interpret a receipt, persist the draft, then notify the user."""
        result = self.process(image)

        record_id = None
        if self.repository is not None:
            record_id = self.repository.save(result.draft, user_id, result.ocr.text)
            logger.info(f"Expense draft stored as {record_id} for user {user_id}")

        if self.notifier is not None:
            self.notifier.notify(user_id, result.draft)

        return result.model_copy(update={"record_id": record_id})
