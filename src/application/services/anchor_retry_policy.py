"""Retry decisions for ledger anchor submissions.

Ledger errors are categorized to decide between another attempt and
permanent failure:

- RETRY: Transient errors that may succeed later (timeout, rate limit,
  network, unknown)
- FAIL: The ledger rejected the hash, or max attempts are exhausted

Agent Runtime failures never pass through this policy; they are not
retried automatically.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

from src.config.pipeline_config import DEFAULT_LEDGER_ANCHOR_CONFIG, LedgerAnchorConfig
from src.domain.errors.ledger import LedgerError


class LedgerErrorCategory(Enum):
    """Categories of errors raised while submitting an anchor."""

    # Transient - may succeed on retry
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"

    # Permanent - the ledger will never accept this submission
    REJECTED = "rejected"

    # Unknown - retried, logged for investigation
    UNKNOWN = "unknown"


class AnchorAction(Enum):
    """Action to take after a failed attempt."""

    RETRY = "retry"
    FAIL = "fail"


@dataclass(frozen=True)
class AnchorRetryDecision:
    """Decision about a failed submission attempt.

    Attributes:
        action: Retry or fail permanently.
        category: The error category.
        retry_delay_seconds: Delay before the next attempt (RETRY only).
    """

    action: AnchorAction
    category: LedgerErrorCategory
    retry_delay_seconds: float = 0.0

    @property
    def is_terminal(self) -> bool:
        """Check if this decision ends anchoring for the record."""
        return self.action is AnchorAction.FAIL


def categorize_ledger_error(error: BaseException) -> LedgerErrorCategory:
    """Determine the category of a submission error.

    Args:
        error: The exception raised by the submission attempt.

    Returns:
        LedgerErrorCategory for the error.
    """
    if isinstance(error, asyncio.TimeoutError):
        return LedgerErrorCategory.TIMEOUT
    if isinstance(error, LedgerError) and not error.retryable:
        return LedgerErrorCategory.REJECTED

    error_name = type(error).__name__.lower()
    error_msg = str(error).lower()

    if "timeout" in error_name or "timeout" in error_msg:
        return LedgerErrorCategory.TIMEOUT
    if "ratelimit" in error_name or "rate limit" in error_msg or "429" in error_msg:
        return LedgerErrorCategory.RATE_LIMIT
    if any(p in error_name for p in ["connection", "network", "socket"]):
        return LedgerErrorCategory.NETWORK
    return LedgerErrorCategory.UNKNOWN


class AnchorRetryPolicy:
    """Bounded exponential backoff for ledger submissions.

    Usage:
        policy = AnchorRetryPolicy(config)

        try:
            tx_hash = await ledger.submit(anchor_hash)
        except Exception as e:
            decision = policy.decide(e, attempt=current_attempt)
            if decision.action is AnchorAction.RETRY:
                await asyncio.sleep(decision.retry_delay_seconds)
    """

    def __init__(self, config: LedgerAnchorConfig = DEFAULT_LEDGER_ANCHOR_CONFIG) -> None:
        self._config = config

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    def decide(self, error: BaseException, attempt: int) -> AnchorRetryDecision:
        """Decide what to do after a failed attempt.

        Args:
            error: The exception that occurred.
            attempt: Attempt number that failed (1-based).

        Returns:
            AnchorRetryDecision with action and delay.
        """
        category = categorize_ledger_error(error)
        if category is LedgerErrorCategory.REJECTED or attempt >= self._config.max_attempts:
            return AnchorRetryDecision(action=AnchorAction.FAIL, category=category)
        return AnchorRetryDecision(
            action=AnchorAction.RETRY,
            category=category,
            retry_delay_seconds=self._config.delay_for(attempt),
        )
