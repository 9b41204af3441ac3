"""Per-attempt results and the first-success combinator used by both chains."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Iterator, List, Optional, Protocol, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Provider(Protocol[T_co]):
    name: str

    def is_available(self) -> bool: ...


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """Outcome of one provider call: either a value or an error message."""

    provider: str
    value: Optional[T] = None
    error: Optional[str] = None
    elapsed_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def summary(self) -> dict:
        return {
            "provider": self.provider,
            "succeeded": self.succeeded,
            "error": self.error,
            "elapsed_ms": self.elapsed_ms,
        }


def attempt(provider: str, call: Callable[[], T]) -> Attempt[T]:
    """Run one provider call, turning any failure into a failed Attempt."""
    started = time.perf_counter()
    try:
        value = call()
    except Exception as exc:
        elapsed = int((time.perf_counter() - started) * 1000)
        logger.warning(f"{provider} failed, trying next: {type(exc).__name__}: {exc}")
        return Attempt(provider=provider, error=f"{type(exc).__name__}: {exc}", elapsed_ms=elapsed)
    elapsed = int((time.perf_counter() - started) * 1000)
    return Attempt(provider=provider, value=value, elapsed_ms=elapsed)


def run_in_order(providers: Iterable[Provider], call: Callable[[Provider], T]) -> Iterator[Attempt[T]]:
    """Lazily attempt each provider in order; unavailable ones fail without a call."""
    for provider in providers:
        if not provider.is_available():
            logger.info(f"{provider.name} not configured, skipping")
            yield Attempt(provider=provider.name, error="provider not configured")
            continue
        yield attempt(provider.name, lambda: call(provider))


def first_success(
    attempts: Iterable[Attempt[T]],
    accept: Callable[[T], Tuple[bool, Optional[str]]],
) -> Tuple[Optional[Attempt[T]], List[Attempt[T]]]:
    """Return the first successful attempt whose value is accepted, plus the trail.

    ``accept`` returns ``(accepted, reason)``; a rejected value is recorded in
    the trail as a failed attempt carrying ``reason``. Attempts are consumed
    lazily, so nothing after the winner is ever run.
    """
    trail: List[Attempt[T]] = []
    for item in attempts:
        if not item.succeeded:
            trail.append(item)
            continue
        accepted, reason = accept(item.value)
        if accepted:
            trail.append(item)
            return item, trail
        trail.append(
            Attempt(provider=item.provider, value=item.value, error=reason or "rejected", elapsed_ms=item.elapsed_ms)
        )
    return None, trail
