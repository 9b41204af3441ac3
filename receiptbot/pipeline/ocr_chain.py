#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
OCR provider chain
Tries text-extraction providers in priority order and keeps the first usable text
"""

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from receiptbot.models.schema import OcrResult
from receiptbot.pipeline.attempts import Attempt, first_success, run_in_order
from receiptbot.utils.logging_utils import log_attempt_event

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 10


class OCRProvider(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def extract(self, image_data: bytes) -> OcrResult: ...


class OCRProviderChain:
    """Sequential OCR fallback: first provider with more than ``min_text_length`` characters wins"""

    def __init__(
        self,
        providers: Sequence[OCRProvider],
        min_text_length: int = MIN_TEXT_LENGTH,
        log_dir: Optional[str] = None,
    ):
        self.providers = list(providers)
        self.min_text_length = min_text_length
        self.log_dir = log_dir
        logger.info(f"OCR chain order: {[provider.name for provider in self.providers]}")

    def _accept(self, result: OcrResult) -> Tuple[bool, Optional[str]]:
        if not isinstance(result, OcrResult):
            return False, f"malformed result ({type(result).__name__})"
        length = len((result.text or "").strip())
        if length > self.min_text_length:
            return True, None
        return False, f"insufficient text ({length} characters)"

    def extract_with_trace(self, image_data: bytes) -> Tuple[OcrResult, List[Attempt[OcrResult]]]:
        winner, trail = first_success(
            run_in_order(self.providers, lambda provider: provider.extract(image_data)),
            self._accept,
        )

        for item in trail:
            log_attempt_event({"stage": "ocr", **item.summary()}, log_dir=self.log_dir)

        if winner is not None:
            logger.info(f"OCR successful with {winner.provider}")
            return winner.value, trail

        logger.error("All OCR engines failed to produce usable text")
        return OcrResult.fallback(), trail

    def extract(self, image_data: bytes) -> OcrResult:
        """
        Extract receipt text from a preprocessed image

        Never raises: provider failures fall through to the next provider and,
        finally, to an empty fallback result.
        """
        result, _ = self.extract_with_trace(image_data)
        return result
