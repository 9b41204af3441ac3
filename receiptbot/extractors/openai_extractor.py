# openai_extractor.py
"""Structured receipt analysis with an OpenAI chat model."""

import datetime as dt
import logging
from typing import Any, Callable, Optional

from openai import OpenAI

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.exceptions import ProviderResponseError, ProviderUnavailableError
from receiptbot.extractors.response_parser import SYSTEM_PROMPT, build_receipt_prompt, draft_from_reply
from receiptbot.models.schema import ExpenseDraft, ProviderSource

logger = logging.getLogger(__name__)

OPENAI_CONFIDENCE = 0.9


class OpenAIReceiptAnalyzer:
    """Send OCR text to OpenAI and read back the receipt as JSON."""

    name = ProviderSource.OPENAI.value

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        classifier: Optional[CategoryClassifier] = None,
        today: Callable[[], dt.date] = dt.date.today,
        client: Any = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.classifier = classifier or CategoryClassifier()
        self.today = today
        self._client = client

        if not self.api_key and client is None:
            logger.warning("OpenAI API key not found")

    def is_available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self):
        if self._client is None:
            # One attempt per provider; the chain moves on instead of retrying.
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def analyze(self, text: str) -> ExpenseDraft:
        if not self.is_available():
            raise ProviderUnavailableError("OpenAI API key not configured")

        response = self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_receipt_prompt(text, self.classifier.labels)},
            ],
            max_tokens=1000,
            temperature=0.1,
            timeout=self.timeout,
        )

        try:
            content = response.choices[0].message.content or ""
        except (AttributeError, IndexError) as exc:
            raise ProviderResponseError(f"Unexpected OpenAI response shape: {exc}") from exc

        logger.info(f"OpenAI analysis returned {len(content)} characters")
        return draft_from_reply(
            content,
            source=ProviderSource.OPENAI,
            confidence=OPENAI_CONFIDENCE,
            today=self.today(),
            classifier=self.classifier,
        )
