"""Agent result repository port.

AgentResult rows are append-only. A processing call persists all of its
results with a single `append_many` so that a failed call leaves no
partial rows behind.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from src.domain.models.agent import AgentResult


class AgentResultRepositoryProtocol(Protocol):
    """Protocol for append-only agent result storage."""

    async def append_many(self, results: Sequence[AgentResult]) -> None:
        """Append results atomically: either all are stored or none.

        Raises:
            ImmutableRecordError: If a result id is already stored.
        """
        ...

    async def get(self, result_id: UUID) -> AgentResult | None:
        """Retrieve a result by id."""
        ...

    async def list_for_entity(
        self, entity_type: str, entity_id: int
    ) -> list[AgentResult]:
        """List the results recorded for an entity, oldest first."""
        ...
