"""Wire a ReceiptPipeline from Settings."""

from __future__ import annotations

import datetime as dt
from typing import Callable, Optional

from receiptbot.categorizer.category_classifier import CategoryClassifier
from receiptbot.config import Settings
from receiptbot.extractors.gemini_extractor import GeminiReceiptAnalyzer
from receiptbot.extractors.openai_extractor import OpenAIReceiptAnalyzer
from receiptbot.extractors.rule_based_extractor import RuleBasedExtractor
from receiptbot.ocr.google_vision_ocr import GoogleVisionOCR
from receiptbot.ocr.ocr_space_ocr import OCRSpaceOCR
from receiptbot.ocr.preprocess import ImagePreprocessor
from receiptbot.pipeline.analysis_chain import AnalysisProviderChain
from receiptbot.pipeline.ocr_chain import OCRProviderChain
from receiptbot.pipeline.receipt_pipeline import ExpenseNotifier, ExpenseRepository, ReceiptPipeline
from receiptbot.services.validation_service import ResultValidator


def build_ocr_chain(settings: Settings) -> OCRProviderChain:
    providers = [
        OCRSpaceOCR(
            api_key=settings.ocr_space_api_key,
            base_url=settings.ocr_space_url,
            language=settings.ocr_space_language,
            timeout=settings.provider_timeout_seconds,
        ),
        GoogleVisionOCR(
            api_key=settings.google_vision_api_key,
            credentials_path=settings.google_application_credentials,
            timeout=settings.provider_timeout_seconds,
        ),
    ]
    return OCRProviderChain(providers, min_text_length=settings.ocr_min_text_length, log_dir=settings.log_dir)


def build_analysis_chain(
    settings: Settings,
    classifier: Optional[CategoryClassifier] = None,
    today: Callable[[], dt.date] = dt.date.today,
) -> AnalysisProviderChain:
    classifier = classifier or CategoryClassifier()
    providers = [
        OpenAIReceiptAnalyzer(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.provider_timeout_seconds,
            classifier=classifier,
            today=today,
        ),
        GeminiReceiptAnalyzer(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.provider_timeout_seconds,
            classifier=classifier,
            today=today,
        ),
    ]
    return AnalysisProviderChain(
        providers,
        rule_based=RuleBasedExtractor(classifier=classifier, today=today),
        validator=ResultValidator(),
        min_text_length=settings.analysis_min_text_length,
        today=today,
        log_dir=settings.log_dir,
    )


def build_pipeline(
    settings: Optional[Settings] = None,
    repository: Optional[ExpenseRepository] = None,
    notifier: Optional[ExpenseNotifier] = None,
) -> ReceiptPipeline:
    settings = settings or Settings.from_env()
    return ReceiptPipeline(
        preprocessor=ImagePreprocessor(max_width=settings.preprocess_max_width),
        ocr_chain=build_ocr_chain(settings),
        analysis_chain=build_analysis_chain(settings),
        repository=repository,
        notifier=notifier,
        log_dir=settings.log_dir,
    )
