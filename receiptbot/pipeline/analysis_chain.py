"""Analysis provider chain: external models first, rule-based parsing last.

State machine per invocation::

    NOT_ATTEMPTED -> TRYING(i) -> VALIDATED
                     TRYING(i) -> EXHAUSTED_FALLBACK

``EXHAUSTED_FALLBACK`` still returns a structurally valid placeholder draft.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from receiptbot.exceptions import InsufficientInputError
from receiptbot.extractors.rule_based_extractor import RuleBasedExtractor
from receiptbot.models.schema import ExpenseDraft
from receiptbot.pipeline.attempts import Attempt, first_success, run_in_order
from receiptbot.services.validation_service import ResultValidator
from receiptbot.utils.logging_utils import log_attempt_event

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 10


class AnalysisProvider(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def analyze(self, text: str) -> ExpenseDraft: ...


class ChainState(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    TRYING = "trying"
    VALIDATED = "validated"
    EXHAUSTED_FALLBACK = "exhausted_fallback"


@dataclass(frozen=True)
class AnalysisOutcome:
    draft: ExpenseDraft
    state: ChainState
    attempts: List[Attempt[ExpenseDraft]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class AnalysisProviderChain:
    """Turn cleaned OCR text into a validated ExpenseDraft."""

    def __init__(
        self,
        providers: Sequence[AnalysisProvider],
        rule_based: Optional[AnalysisProvider] = None,
        validator: Optional[ResultValidator] = None,
        min_text_length: int = MIN_TEXT_LENGTH,
        today: Callable[[], dt.date] = dt.date.today,
        log_dir: Optional[str] = None,
    ) -> None:
        self.providers = list(providers)
        self.rule_based = rule_based or RuleBasedExtractor(today=today)
        self.validator = validator or ResultValidator()
        self.min_text_length = min_text_length
        self.today = today
        self.log_dir = log_dir

    @property
    def ordered_providers(self) -> List[AnalysisProvider]:
        return [*self.providers, self.rule_based]

    def analyze(self, text: str) -> ExpenseDraft:
        return self.analyze_with_trace(text).draft

    def analyze_with_trace(self, text: str) -> AnalysisOutcome:
        stripped_length = len((text or "").strip())
        if stripped_length < self.min_text_length:
            raise InsufficientInputError(stripped_length, self.min_text_length)

        accepted_warnings: List[str] = []

        def _accept(candidate: ExpenseDraft) -> Tuple[bool, Optional[str]]:
            try:
                outcome = self.validator.validate(candidate)
            except Exception as exc:
                logger.warning(f"Validator failed on candidate: {exc}")
                return False, f"validation error: {exc}"
            if not outcome.accepted:
                return False, "validation failed: " + ", ".join(outcome.errors)
            accepted_warnings.extend(outcome.warnings)
            return True, None

        def _call(provider: AnalysisProvider) -> ExpenseDraft:
            logger.debug(f"Analysis chain {ChainState.TRYING.value}: {provider.name}")
            return provider.analyze(text)

        winner, trail = first_success(run_in_order(self.ordered_providers, _call), _accept)

        for item in trail:
            log_attempt_event({"stage": "analysis", **item.summary()}, log_dir=self.log_dir)

        if winner is not None:
            logger.info(f"Analysis successful with {winner.provider}")
            return AnalysisOutcome(
                draft=winner.value,
                state=ChainState.VALIDATED,
                attempts=trail,
                warnings=accepted_warnings,
            )

        logger.error("All analysis methods failed, returning placeholder draft")
        return AnalysisOutcome(
            draft=ExpenseDraft.terminal_fallback(self.today()),
            state=ChainState.EXHAUSTED_FALLBACK,
            attempts=trail,
        )
