import datetime as dt
from decimal import Decimal

import pytest

from receiptbot.exceptions import InsufficientInputError, ProviderResponseError
from receiptbot.extractors.rule_based_extractor import RuleBasedExtractor
from receiptbot.models.schema import UNSPECIFIED_MERCHANT, ExpenseDraft, ProviderSource
from receiptbot.pipeline.analysis_chain import AnalysisProviderChain, ChainState
from receiptbot.services.validation_service import TOTAL_MISMATCH_WARNING


def _chain(providers, today, rule_based=None):
    return AnalysisProviderChain(
        providers,
        rule_based=rule_based or RuleBasedExtractor(today=today),
        today=today,
    )


def test_short_text_is_rejected_before_any_provider(stub_analyzer, today):
    provider = stub_analyzer("openai")
    rule_based = stub_analyzer("rule-based")

    with pytest.raises(InsufficientInputError) as excinfo:
        _chain([provider], today, rule_based=rule_based).analyze("hi".ljust(5))

    assert excinfo.value.text_length == 2
    assert provider.calls == []
    assert rule_based.calls == []


def test_ten_characters_is_enough(today):
    draft = _chain([], today).analyze("abcdefghij")
    assert draft.source_provider is ProviderSource.RULE_BASED


def test_external_provider_result_is_used(stub_analyzer, openai_draft, today, thai_receipt_text):
    openai = stub_analyzer("openai", draft=openai_draft)
    gemini = stub_analyzer("gemini", draft=openai_draft)

    outcome = _chain([openai, gemini], today).analyze_with_trace(thai_receipt_text)

    assert outcome.draft == openai_draft
    assert outcome.state is ChainState.VALIDATED
    assert outcome.warnings == []
    assert gemini.calls == []


def test_failures_fall_through_to_rule_based(stub_analyzer, today, thai_receipt_text):
    openai = stub_analyzer("openai", error=ProviderResponseError("Invalid JSON in model reply"))
    gemini = stub_analyzer("gemini", available=False)

    outcome = _chain([openai, gemini], today).analyze_with_trace(thai_receipt_text)

    assert outcome.draft.source_provider is ProviderSource.RULE_BASED
    assert outcome.draft.total == Decimal("40")
    assert gemini.calls == []
    assert [attempt.provider for attempt in outcome.attempts] == ["openai", "gemini", "rule-based"]


def test_structurally_invalid_candidate_is_rejected(stub_analyzer, today, thai_receipt_text):
    broken = ExpenseDraft.model_construct(
        merchant="",
        date=dt.date(2024, 3, 1),
        total=Decimal("40"),
        items=(),
        confidence=0.9,
        source_provider=ProviderSource.OPENAI,
    )
    openai = stub_analyzer("openai", draft=broken)

    outcome = _chain([openai], today).analyze_with_trace(thai_receipt_text)

    assert outcome.draft.source_provider is ProviderSource.RULE_BASED
    assert "missing_merchant" in outcome.attempts[0].error


def test_total_mismatch_is_reported_as_warning(stub_analyzer, openai_draft, today, thai_receipt_text):
    inflated = openai_draft.model_copy(update={"total": Decimal("500")})

    outcome = _chain([stub_analyzer("openai", draft=inflated)], today).analyze_with_trace(thai_receipt_text)

    assert outcome.state is ChainState.VALIDATED
    assert outcome.draft.total == Decimal("500")
    assert outcome.warnings == [TOTAL_MISMATCH_WARNING]


def test_exhausted_chain_returns_terminal_fallback(stub_analyzer, today, thai_receipt_text):
    rule_based = stub_analyzer("rule-based", error=RuntimeError("boom"))

    outcome = _chain([stub_analyzer("openai", available=False)], today, rule_based=rule_based).analyze_with_trace(
        thai_receipt_text
    )

    draft = outcome.draft
    assert outcome.state is ChainState.EXHAUSTED_FALLBACK
    assert draft.merchant == UNSPECIFIED_MERCHANT
    assert draft.date == today()
    assert draft.total == Decimal("0")
    assert len(draft.items) == 1
    assert draft.items[0].category == "other"
    assert draft.confidence == 0.1
    assert draft.source_provider is ProviderSource.FALLBACK
    assert draft.error == "all analysis methods failed"


def test_garbage_text_still_produces_a_valid_draft(today):
    outcome = _chain([], today).analyze_with_trace("%%%% ^^^^ &&&& ****")

    assert outcome.state is ChainState.VALIDATED
    assert outcome.draft.merchant == UNSPECIFIED_MERCHANT


def test_malformed_rule_based_draft_ends_in_terminal_fallback(stub_analyzer, today, thai_receipt_text):
    malformed = ExpenseDraft.model_construct(merchant=None, items=None, source_provider=ProviderSource.RULE_BASED)
    rule_based = stub_analyzer("rule-based", draft=malformed)

    outcome = _chain([], today, rule_based=rule_based).analyze_with_trace(thai_receipt_text)

    assert outcome.state is ChainState.EXHAUSTED_FALLBACK
    assert outcome.draft.confidence == 0.1
    assert outcome.draft.error
    assert outcome.attempts[-1].error.startswith("validation failed: missing_merchant")
