"""Blockchain record repository stub implementation.

In-memory implementation of BlockchainRecordRepositoryProtocol that
enforces the single pending -> terminal transition.
"""

from __future__ import annotations

from uuid import UUID

from src.application.ports.blockchain_record_repository import (
    BlockchainRecordRepositoryProtocol,
)
from src.domain.errors.audit import ImmutableRecordError
from src.domain.models.blockchain_record import BlockchainRecord, BlockchainStatus


class BlockchainRecordRepositoryStub(BlockchainRecordRepositoryProtocol):
    """In-memory stub implementation of BlockchainRecordRepositoryProtocol.

    Attributes:
        _records: Dictionary mapping record id to the latest version.
        _history: Every version stored, in write order (for testing).
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._records: dict[UUID, BlockchainRecord] = {}
        self._history: list[BlockchainRecord] = []

    async def add(self, record: BlockchainRecord) -> None:
        if record.id in self._records:
            raise ImmutableRecordError(f"Blockchain record {record.id} already exists")
        self._records[record.id] = record
        self._history.append(record)

    async def update(self, record: BlockchainRecord) -> None:
        stored = self._records.get(record.id)
        if stored is None:
            raise KeyError(f"Blockchain record not found: {record.id}")
        if stored.status is not BlockchainStatus.PENDING:
            raise ImmutableRecordError(
                f"Blockchain record {record.id} is already {stored.status.value}"
            )
        self._records[record.id] = record
        self._history.append(record)

    async def get(self, record_id: UUID) -> BlockchainRecord | None:
        return self._records.get(record_id)

    async def list_for_entity(
        self, entity_type: str, entity_id: int
    ) -> list[BlockchainRecord]:
        return sorted(
            (
                r
                for r in self._records.values()
                if r.entity_type == entity_type and r.entity_id == entity_id
            ),
            key=lambda r: r.created_at,
        )

    # Test helper methods

    def get_all(self) -> list[BlockchainRecord]:
        """Test helper: Latest version of every record."""
        return list(self._records.values())

    def get_history(self) -> list[BlockchainRecord]:
        """Test helper: Every stored version in write order."""
        return list(self._history)

    def clear(self) -> None:
        """Test helper: Clear all records."""
        self._records.clear()
        self._history.clear()
