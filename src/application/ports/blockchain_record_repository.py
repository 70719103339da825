"""Blockchain record repository port.

A record is added once as pending and updated once to a terminal status.
Adapters reject any update of a record that is no longer pending.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.blockchain_record import BlockchainRecord


class BlockchainRecordRepositoryProtocol(Protocol):
    """Protocol for ledger anchor bookkeeping."""

    async def add(self, record: BlockchainRecord) -> None:
        """Store a new pending record."""
        ...

    async def update(self, record: BlockchainRecord) -> None:
        """Replace a pending record with its terminal version.

        Raises:
            ImmutableRecordError: If the stored record is already terminal.
        """
        ...

    async def get(self, record_id: UUID) -> BlockchainRecord | None:
        """Retrieve a record by id."""
        ...

    async def list_for_entity(
        self, entity_type: str, entity_id: int
    ) -> list[BlockchainRecord]:
        """List the records of one entity, oldest first."""
        ...
