#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Google Cloud Vision API OCR Engine
Backup text extraction for Thai/English receipts
"""

import logging
import os
from typing import Any, Optional

from google.cloud import vision
from google.oauth2 import service_account

from receiptbot.exceptions import ProviderResponseError, ProviderUnavailableError
from receiptbot.models.schema import OcrResult, ProviderSource

logger = logging.getLogger(__name__)

CREDENTIAL_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
LANGUAGE_HINTS = ["th", "en"]


class GoogleVisionOCR:
    """Google Cloud Vision API OCR Engine"""

    name = ProviderSource.GOOGLE_VISION.value

    def __init__(
        self,
        api_key: Optional[str] = None,
        credentials_path: Optional[str] = None,
        timeout: float = 30.0,
        client: Any = None,
    ):
        self.api_key = api_key
        self.credentials_path = credentials_path
        self.timeout = timeout
        self.client = client
        self._credential_source = None

    def is_available(self) -> bool:
        """Check if Google Vision has something to authenticate with"""
        return self.client is not None or bool(self.api_key) or bool(self.credentials_path)

    def _load_credentials(self) -> Optional[service_account.Credentials]:
        """Load service account credentials from file."""
        if self.credentials_path and os.path.exists(self.credentials_path):
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_path, scopes=CREDENTIAL_SCOPES
            )
            self._credential_source = self.credentials_path
            return creds

        # Fall back to default credentials (ADC)
        self._credential_source = "default-application-credentials"
        return None

    def _get_client(self):
        if self.client is not None:
            return self.client

        if self.api_key:
            self.client = vision.ImageAnnotatorClient(client_options={"api_key": self.api_key})
            self._credential_source = "api-key"
        else:
            credentials = self._load_credentials()
            if credentials is not None:
                self.client = vision.ImageAnnotatorClient(credentials=credentials)
            else:
                self.client = vision.ImageAnnotatorClient()
        logger.info(f"Google Vision client initialized using {self._credential_source}")
        return self.client

    def extract(self, image_data: bytes) -> OcrResult:
        """
        Extract text from image using Google Cloud Vision API

        Args:
            image_data: preprocessed image bytes

        Returns:
            OcrResult with the full detected text
        """
        if not self.is_available():
            raise ProviderUnavailableError("Google Vision API key not configured")

        response = self._get_client().text_detection(
            image=vision.Image(content=image_data),
            image_context=vision.ImageContext(language_hints=LANGUAGE_HINTS),
            timeout=self.timeout,
        )

        if response.error.message:
            raise ProviderResponseError(f"Google Vision API error: {response.error.message}")

        annotations = list(response.text_annotations)
        if not annotations:
            raise ProviderResponseError("No text detected")

        full_text = annotations[0].description or ""
        logger.info(f"Google Vision extracted {len(full_text)} characters")
        return OcrResult(text=full_text, confidence=0.9, source_provider=ProviderSource.GOOGLE_VISION)
