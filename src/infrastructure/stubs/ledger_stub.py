"""Simulated in-memory ledger.

Accepts anchor hashes and returns deterministic transaction hashes.
Failures can be injected to exercise the recorder's retry path.

WARNING: This stub is for development/testing only.
"""

from __future__ import annotations

import asyncio
import hashlib

from structlog import get_logger

from src.application.ports.ledger import LedgerProtocol
from src.domain.errors.ledger import LedgerError

logger = get_logger()


class LedgerStub(LedgerProtocol):
    """Simulated ledger for development.

    WARNING: NOT FOR PRODUCTION USE.

    Attributes:
        _fail_times: Number of upcoming submissions that raise a
            retryable LedgerError.
        _reject: When True every submission is rejected permanently.
        _hang: When True submissions never complete.
        _transactions: anchor hash -> transaction hash of accepted hashes.
    """

    def __init__(self, latency_ms: int = 0, fail_times: int = 0) -> None:
        self._latency_ms = latency_ms
        self._fail_times = fail_times
        self._reject = False
        self._hang = False
        self._attempts = 0
        self._transactions: dict[str, str] = {}

    async def submit(self, anchor_hash: str) -> str:
        """Stub: record the hash and return its transaction hash.

        Raises:
            LedgerError: If a failure is configured.
        """
        self._attempts += 1
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000.0)
        if self._hang:
            await asyncio.sleep(3600)
        if self._reject:
            raise LedgerError(f"Stub: hash {anchor_hash} rejected", retryable=False)
        if self._fail_times > 0:
            self._fail_times -= 1
            raise LedgerError("Stub: ledger temporarily unavailable", retryable=True)

        # Resubmitting a hash returns the same transaction
        transaction_hash = self._transactions.get(anchor_hash)
        if transaction_hash is None:
            digest = hashlib.sha256(
                f"{anchor_hash}:{len(self._transactions)}".encode("utf-8")
            ).hexdigest()
            transaction_hash = f"0x{digest}"
            self._transactions[anchor_hash] = transaction_hash
        logger.debug("ledger_stub_submitted", hash=anchor_hash, tx=transaction_hash)
        return transaction_hash

    # Test helper methods

    def set_fail_times(self, count: int) -> None:
        """Test helper: Fail the next `count` submissions (retryable)."""
        self._fail_times = count

    def set_reject(self, reject: bool) -> None:
        """Test helper: Reject every submission permanently."""
        self._reject = reject

    def set_hang(self, hang: bool) -> None:
        """Test helper: Make submissions hang until timed out."""
        self._hang = hang

    def get_attempt_count(self) -> int:
        """Test helper: Number of submit() calls so far."""
        return self._attempts

    def get_transactions(self) -> dict[str, str]:
        """Test helper: Accepted hashes and their transactions."""
        return dict(self._transactions)
