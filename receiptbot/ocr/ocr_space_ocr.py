#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
OCR.space API integration for receipt OCR
Free tier: 25,000 requests/month
"""

import base64
import io
import logging
from typing import Any, Dict, Optional

import requests
from PIL import Image

from receiptbot.config import DEFAULT_OCR_SPACE_URL
from receiptbot.exceptions import ProviderResponseError, ProviderUnavailableError
from receiptbot.models.schema import OcrResult, ProviderSource

logger = logging.getLogger(__name__)

MAX_UPLOAD_KB = 1000


class OCRSpaceOCR:
    """
    OCR.space API integration
    Free tier: 25,000 requests/month
    """

    name = ProviderSource.OCR_SPACE.value

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_OCR_SPACE_URL,
        language: str = "tha",
        timeout: float = 30.0,
    ):
        """
        Initialize OCR.space OCR engine

        Args:
            api_key: OCR.space API key
            base_url: parse endpoint
            language: OCR.space language code (tha = Thai)
            timeout: request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url
        self.language = language
        self.timeout = timeout

        if not self.api_key:
            logger.warning("⚠️ OCR.space API key not found. Set OCR_SPACE_API_KEY environment variable.")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _encode_payload(self, image_data: bytes) -> str:
        """
        Base64-encode the image as a data URI, shrinking it under the 1MB API limit
        """
        mime = "image/png" if image_data[:8] == b"\x89PNG\r\n\x1a\n" else "image/jpeg"
        size_kb = len(image_data) / 1024

        if size_kb > MAX_UPLOAD_KB:
            logger.warning(f"⚠️ Image too large for OCR.space ({size_kb:.1f} KB), compressing")
            with Image.open(io.BytesIO(image_data)) as image:
                image = image.convert("L")
                width, height = image.size
                if max(width, height) > 1600:
                    ratio = 1600 / max(width, height)
                    image = image.resize((int(width * ratio), int(height * ratio)), Image.Resampling.LANCZOS)
                buffer = io.BytesIO()
                image.save(buffer, format="JPEG", quality=70, optimize=True)
            image_data = buffer.getvalue()
            mime = "image/jpeg"
            logger.info(f"📊 After compression: {len(image_data) / 1024:.1f} KB")

        image_base64 = base64.b64encode(image_data).decode("utf-8")
        return f"data:{mime};base64,{image_base64}"

    def extract(self, image_data: bytes) -> OcrResult:
        """
        Extract text from image using OCR.space API

        Args:
            image_data: preprocessed image bytes

        Returns:
            OcrResult with the parsed text
        """
        if not self.is_available():
            raise ProviderUnavailableError("OCR.space API key not configured")

        payload = {
            "apikey": self.api_key,
            "base64Image": self._encode_payload(image_data),
            "language": self.language,
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
            "OCREngine": "2",  # Engine 2 is better for receipts
            "isTable": "true",  # Better for receipt structure
        }

        logger.info("🔍 Sending image to OCR.space API...")
        response = requests.post(self.base_url, data=payload, timeout=self.timeout)
        response.raise_for_status()

        try:
            result: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise ProviderResponseError(f"Failed to parse OCR.space response: {exc}") from exc

        if result.get("IsErroredOnProcessing"):
            error_message = result.get("ErrorMessage") or ["Unknown error"]
            if isinstance(error_message, list):
                error_message = error_message[0] if error_message else "Unknown error"
            raise ProviderResponseError(f"OCR.space API error: {error_message}")

        parsed_results = result.get("ParsedResults") or []
        if not parsed_results:
            logger.warning("⚠️ No text found in OCR.space response")
            return OcrResult(text="", confidence=0.0, source_provider=ProviderSource.OCR_SPACE)

        first = parsed_results[0] or {}
        text = first.get("ParsedText") or ""
        has_overlay = bool((first.get("TextOverlay") or {}).get("HasOverlay"))

        logger.info(f"✅ OCR.space extracted {len(text)} characters")
        return OcrResult(
            text=text,
            confidence=0.8 if has_overlay else 0.6,
            source_provider=ProviderSource.OCR_SPACE,
        )
