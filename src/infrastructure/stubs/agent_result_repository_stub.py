"""Agent result repository stub implementation.

In-memory, append-only implementation of AgentResultRepositoryProtocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from src.application.ports.agent_result_repository import (
    AgentResultRepositoryProtocol,
)
from src.domain.errors.audit import ImmutableRecordError
from src.domain.models.agent import AgentResult


class AgentResultRepositoryStub(AgentResultRepositoryProtocol):
    """In-memory stub implementation of AgentResultRepositoryProtocol.

    Attributes:
        _results: Results in append order.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._results: list[AgentResult] = []
        self._ids: set[UUID] = set()

    async def append_many(self, results: Sequence[AgentResult]) -> None:
        new_ids = [result.id for result in results]
        if len(set(new_ids)) != len(new_ids) or self._ids.intersection(new_ids):
            raise ImmutableRecordError("Agent result already recorded")
        self._results.extend(results)
        self._ids.update(new_ids)

    async def get(self, result_id: UUID) -> AgentResult | None:
        for result in self._results:
            if result.id == result_id:
                return result
        return None

    async def list_for_entity(
        self, entity_type: str, entity_id: int
    ) -> list[AgentResult]:
        return [
            r
            for r in self._results
            if r.entity_type == entity_type and r.entity_id == entity_id
        ]

    # Test helper methods

    def get_all(self) -> list[AgentResult]:
        """Test helper: All stored results in append order."""
        return list(self._results)

    def clear(self) -> None:
        """Test helper: Clear all stored results."""
        self._results.clear()
        self._ids.clear()
