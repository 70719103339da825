"""Ledger port definition.

The ledger is an external tamper-evidence service that accepts a hash
and returns the transaction that carries it. Submissions are idempotent
on the ledger side: submitting the same hash twice is harmless.
"""

from __future__ import annotations

from typing import Protocol


class LedgerProtocol(Protocol):
    """Protocol for anchoring hashes on a ledger."""

    async def submit(self, anchor_hash: str) -> str:
        """Submit an anchor hash.

        Args:
            anchor_hash: Hex SHA-256 anchor hash.

        Returns:
            The ledger transaction hash.

        Raises:
            LedgerError: If the submission fails. `retryable` tells the
                caller whether another attempt may succeed.
        """
        ...
