"""Activity repository stub implementation.

In-memory, append-only audit trail. Appends can be made to fail for
testing audit-write error handling.
"""

from __future__ import annotations

from uuid import UUID

from src.application.ports.activity_repository import ActivityRepositoryProtocol
from src.domain.errors.audit import ImmutableRecordError
from src.domain.models.activity import Activity, ActivityType


class ActivityRepositoryStub(ActivityRepositoryProtocol):
    """In-memory stub implementation of ActivityRepositoryProtocol.

    Attributes:
        _activities: Activities in append order.
        _fail_types: Activity kinds whose append raises (for testing).
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._activities: list[Activity] = []
        self._by_id: dict[UUID, Activity] = {}
        self._fail_types: set[ActivityType] = set()

    async def append(self, activity: Activity) -> None:
        if activity.action_type in self._fail_types:
            raise ConnectionError(
                f"Stub: append of {activity.action_type.value} configured to fail"
            )
        if activity.id in self._by_id:
            raise ImmutableRecordError(f"Activity {activity.id} already recorded")
        self._activities.append(activity)
        self._by_id[activity.id] = activity

    async def get(self, activity_id: UUID) -> Activity | None:
        return self._by_id.get(activity_id)

    async def list_for_entity(
        self, related_type: str, related_id: int
    ) -> list[Activity]:
        return [
            a
            for a in self._activities
            if a.related_type == related_type and a.related_id == related_id
        ]

    async def list_recent(self, limit: int = 50) -> list[Activity]:
        return list(reversed(self._activities[-limit:]))

    # Test helper methods

    def get_all(self) -> list[Activity]:
        """Test helper: All activities in append order."""
        return list(self._activities)

    def of_type(self, action_type: ActivityType) -> list[Activity]:
        """Test helper: Activities of one kind in append order."""
        return [a for a in self._activities if a.action_type is action_type]

    def set_fail_types(self, action_types: set[ActivityType]) -> None:
        """Test helper: Make appends of these kinds raise."""
        self._fail_types = set(action_types)

    def replace(self, activity: Activity) -> None:
        """Test helper: Overwrite a stored activity to simulate tampering."""
        index = self._activities.index(self._by_id[activity.id])
        self._activities[index] = activity
        self._by_id[activity.id] = activity

    def clear(self) -> None:
        """Test helper: Clear the audit trail."""
        self._activities.clear()
        self._by_id.clear()
