"""
Google Gemini receipt analysis
Calls the generateContent REST endpoint with requests
"""

import datetime as dt
import logging
from typing import Callable, Optional

import requests

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.exceptions import ProviderResponseError, ProviderUnavailableError
from receiptbot.extractors.response_parser import SYSTEM_PROMPT, build_receipt_prompt, draft_from_reply
from receiptbot.models.schema import ExpenseDraft, ProviderSource

logger = logging.getLogger(__name__)

GEMINI_CONFIDENCE = 0.85
GEMINI_URL_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiReceiptAnalyzer:
    """Gemini analysis provider"""

    name = ProviderSource.GEMINI.value

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        classifier: Optional[CategoryClassifier] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.classifier = classifier or CategoryClassifier()
        self.today = today

        if not self.api_key:
            logger.warning("Gemini API key not found")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def analyze(self, text: str) -> ExpenseDraft:
        """
        Analyse OCR text with Gemini

        Args:
            text: cleaned OCR text

        Returns:
            ExpenseDraft built from the model's JSON reply
        """
        if not self.is_available():
            raise ProviderUnavailableError("Gemini API key not configured")

        prompt = f"{SYSTEM_PROMPT}\n\n{build_receipt_prompt(text, self.classifier.labels)}"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.1, "maxOutputTokens": 1000},
        }

        response = requests.post(
            GEMINI_URL_TEMPLATE.format(model=self.model),
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()

        try:
            result = response.json()
            content = result["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseError(f"Unexpected Gemini response shape: {exc}") from exc

        logger.info(f"Gemini analysis returned {len(content)} characters")
        return draft_from_reply(
            content,
            source=ProviderSource.GEMINI,
            confidence=GEMINI_CONFIDENCE,
            today=self.today(),
            classifier=self.classifier,
        )
