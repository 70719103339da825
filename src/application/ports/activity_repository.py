"""Activity repository port.

The audit trail is append-only. There is no update or delete operation;
an adapter that cannot persist an activity must raise so the recorder can
fail the business operation.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.activity import Activity


class ActivityRepositoryProtocol(Protocol):
    """Protocol for append-only audit trail storage.

    Methods:
        append: Store a new activity
        get: Retrieve an activity by id
        list_for_entity: History of one entity, oldest first
        list_recent: Latest activities across all entities, newest first
    """

    async def append(self, activity: Activity) -> None:
        """Append an activity to the audit trail.

        Raises:
            ImmutableRecordError: If an activity with this id already exists.
        """
        ...

    async def get(self, activity_id: UUID) -> Activity | None:
        """Retrieve an activity by id."""
        ...

    async def list_for_entity(
        self, related_type: str, related_id: int
    ) -> list[Activity]:
        """List the activities of one entity in append order."""
        ...

    async def list_recent(self, limit: int = 50) -> list[Activity]:
        """List the most recent activities, newest first."""
        ...
