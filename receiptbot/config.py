"""Environment-backed settings for the receipt pipeline."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from receiptbot.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_OCR_SPACE_URL = "https://api.ocr.space/parse/image"


class Settings(BaseModel):
    ocr_space_api_key: str = Field(
        default="helloworld",
        description="OCR.space API key; the public demo key works for light use.",
    )
    ocr_space_url: str = DEFAULT_OCR_SPACE_URL
    ocr_space_language: str = "tha"
    google_vision_api_key: Optional[str] = None
    google_application_credentials: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    provider_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Upper bound for every external provider call.",
    )
    ocr_min_text_length: int = Field(
        default=10,
        ge=0,
        description="OCR text must be longer than this (after trimming) to be accepted.",
    )
    analysis_min_text_length: int = Field(
        default=10,
        ge=0,
        description="Text shorter than this (after trimming) is rejected before analysis.",
    )
    preprocess_max_width: int = Field(default=1200, gt=0)
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables (and a .env file if present)."""
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ

        def _get(name: str) -> Optional[str]:
            value = environ.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        raw = {
            "ocr_space_api_key": _get("OCR_SPACE_API_KEY"),
            "ocr_space_url": _get("OCR_SPACE_URL"),
            "ocr_space_language": _get("OCR_SPACE_LANGUAGE"),
            "google_vision_api_key": _get("GOOGLE_VISION_API_KEY"),
            "google_application_credentials": _get("GOOGLE_APPLICATION_CREDENTIALS"),
            "openai_api_key": _get("OPENAI_API_KEY"),
            "openai_model": _get("OPENAI_MODEL"),
            "gemini_api_key": _get("GEMINI_API_KEY"),
            "gemini_model": _get("GEMINI_MODEL"),
            "provider_timeout_seconds": _get("PROVIDER_TIMEOUT_SECONDS"),
            "ocr_min_text_length": _get("OCR_MIN_TEXT_LENGTH"),
            "analysis_min_text_length": _get("ANALYSIS_MIN_TEXT_LENGTH"),
            "preprocess_max_width": _get("PREPROCESS_MAX_WIDTH"),
            "log_dir": _get("RECEIPTBOT_LOG_DIR"),
        }
        values = {key: value for key, value in raw.items() if value is not None}

        try:
            settings = cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid receipt pipeline configuration: {exc}") from exc

        configured = [
            name
            for name, value in (
                ("ocr_space", settings.ocr_space_api_key),
                ("google_vision", settings.google_vision_api_key or settings.google_application_credentials),
                ("openai", settings.openai_api_key),
                ("gemini", settings.gemini_api_key),
            )
            if value
        ]
        logger.info(f"Receipt pipeline settings loaded; configured providers: {configured}")
        return settings


__all__ = ["Settings", "DEFAULT_OCR_SPACE_URL"]
