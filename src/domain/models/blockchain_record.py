"""Blockchain record domain model (ledger anchoring).

A BlockchainRecord is a tamper-evidence anchor: the hash of one audit
activity plus the ledger transaction that carries it.

Lifecycle:
    PENDING -> CONFIRMED (ledger returned a transaction hash)
    PENDING -> FAILED (retries exhausted or permanent rejection)

CONFIRMED and FAILED are terminal. A record transitions exactly once
and never regresses to PENDING.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from src.domain.errors.audit import ImmutableRecordError
from src.domain.errors.validation import ValidationError


class BlockchainStatus(str, Enum):
    """Anchoring status of a BlockchainRecord."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if the record can no longer change."""
        return self is not BlockchainStatus.PENDING


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class BlockchainRecord:
    """Ledger anchor for one audit activity.

    Attributes:
        id: UUID of the record.
        activity_id: The anchored activity.
        entity_id: Entity the activity describes.
        entity_type: Type of that entity.
        hash: Hex SHA-256 anchor hash.
        status: Anchoring status.
        transaction_hash: Ledger transaction (set once confirmed).
        attempts: Number of submission attempts made so far.
        created_at: When the record was queued (UTC).
        confirmed_at: When the record reached CONFIRMED (UTC).
    """

    id: UUID
    activity_id: UUID
    entity_id: int | None
    entity_type: str
    hash: str
    status: BlockchainStatus = field(default=BlockchainStatus.PENDING)
    transaction_hash: str | None = field(default=None)
    attempts: int = field(default=0)
    created_at: datetime = field(default_factory=_utc_now)
    confirmed_at: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate the record invariants."""
        if len(self.hash) != 64:
            raise ValidationError("Anchor hash must be 64 hex characters", field="hash")
        if self.status is BlockchainStatus.CONFIRMED and not self.transaction_hash:
            raise ValidationError(
                "Confirmed records need a transaction hash", field="transaction_hash"
            )

    def confirm(self, transaction_hash: str, attempts: int) -> BlockchainRecord:
        """Transition PENDING -> CONFIRMED.

        Raises:
            ImmutableRecordError: If the record is already terminal.
            ValidationError: If transaction_hash is empty.
        """
        self._ensure_pending()
        return dataclasses.replace(
            self,
            status=BlockchainStatus.CONFIRMED,
            transaction_hash=transaction_hash,
            attempts=attempts,
            confirmed_at=_utc_now(),
        )

    def fail(self, attempts: int) -> BlockchainRecord:
        """Transition PENDING -> FAILED.

        Raises:
            ImmutableRecordError: If the record is already terminal.
        """
        self._ensure_pending()
        return dataclasses.replace(self, status=BlockchainStatus.FAILED, attempts=attempts)

    def _ensure_pending(self) -> None:
        if self.status.is_terminal():
            raise ImmutableRecordError(
                f"Blockchain record {self.id} is already {self.status.value}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict."""
        return {
            "id": str(self.id),
            "activityId": str(self.activity_id),
            "entityId": self.entity_id,
            "entityType": self.entity_type,
            "hash": self.hash,
            "status": self.status.value,
            "transactionHash": self.transaction_hash,
            "attempts": self.attempts,
            "createdAt": self.created_at.isoformat(),
            "confirmedAt": self.confirmed_at.isoformat() if self.confirmed_at else None,
        }
