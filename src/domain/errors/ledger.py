"""Ledger anchoring errors.

LedgerError is absorbed by the audit recorder's retry loop. It is only
observable through BlockchainRecord.status and never reaches the caller
of the business operation that produced the anchored activity.
"""

from __future__ import annotations

from src.domain.exceptions import PipelineError


class LedgerError(PipelineError):
    """Raised by ledger adapters when a hash submission fails.

    Attributes:
        retryable: Whether a later attempt may succeed.
    """

    def __init__(self, message: str, retryable: bool = True) -> None:
        """Initialize ledger error.

        Args:
            message: Human-readable description.
            retryable: False when the ledger rejected the hash permanently.
        """
        self.retryable = retryable
        super().__init__(message)
