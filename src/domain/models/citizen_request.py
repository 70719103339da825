"""Citizen request domain model and lifecycle state machine.

A CitizenRequest is one unit of citizen correspondence tracked through a
resolution lifecycle. The model is a frozen dataclass: every change
produces a new instance, and the lifecycle service persists it together
with exactly one audit Activity describing the difference.

State Machine:
    NEW -> ASSIGNED (routing applied)
    NEW | ASSIGNED -> IN_PROGRESS (agent or manual claim)
    IN_PROGRESS <-> WAITING_INFO
    IN_PROGRESS -> COMPLETED | REQUIRES_ATTENTION
    COMPLETED | REQUIRES_ATTENTION -> IN_PROGRESS (reopen)
    any state except DELETED -> DELETED (tombstone)

Consumer contract:
    Serialized field names `status`, `aiProcessed`, `aiClassification`
    and `aiSuggestion` are stable and must not change.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.domain.errors.state_transition import InvalidTransitionError
from src.domain.errors.validation import ValidationError

CITIZEN_REQUEST_ENTITY_TYPE: str = "citizen_request"


class RequestStatus(str, Enum):
    """Lifecycle state of a citizen request.

    States:
        NEW: Initial state after intake
        ASSIGNED: Routed to a department/position
        IN_PROGRESS: Claimed by an agent or an employee
        WAITING_INFO: Waiting for additional information from the citizen
        COMPLETED: Resolved (soft-terminal, may be reopened)
        REQUIRES_ATTENTION: Escalated for manual review (soft-terminal)
        DELETED: Tombstone, audit history retained (terminal)
    """

    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    WAITING_INFO = "waiting_info"
    COMPLETED = "completed"
    REQUIRES_ATTENTION = "requires_attention"
    DELETED = "deleted"

    def is_terminal(self) -> bool:
        """Check if no transition may leave this state."""
        return self is RequestStatus.DELETED

    def is_soft_terminal(self) -> bool:
        """Check if this state only leaves through an explicit reopen."""
        return self in SOFT_TERMINAL_STATES

    def valid_transitions(self) -> frozenset[RequestStatus]:
        """Get valid transitions from this state.

        Returns:
            Frozenset of states this state can transition to.
            Empty set for DELETED.
        """
        return STATE_TRANSITION_MATRIX.get(self, frozenset())


SOFT_TERMINAL_STATES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.COMPLETED, RequestStatus.REQUIRES_ATTENTION}
)

# States from which the dispatcher claims a request into IN_PROGRESS
CLAIMABLE_STATES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.NEW, RequestStatus.ASSIGNED}
)

STATE_TRANSITION_MATRIX: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.NEW: frozenset(
        {RequestStatus.ASSIGNED, RequestStatus.IN_PROGRESS, RequestStatus.DELETED}
    ),
    RequestStatus.ASSIGNED: frozenset(
        {RequestStatus.IN_PROGRESS, RequestStatus.DELETED}
    ),
    RequestStatus.IN_PROGRESS: frozenset(
        {
            RequestStatus.WAITING_INFO,
            RequestStatus.COMPLETED,
            RequestStatus.REQUIRES_ATTENTION,
            RequestStatus.DELETED,
        }
    ),
    RequestStatus.WAITING_INFO: frozenset(
        {RequestStatus.IN_PROGRESS, RequestStatus.DELETED}
    ),
    # Reopen: only IN_PROGRESS, and only on explicit caller action
    RequestStatus.COMPLETED: frozenset(
        {RequestStatus.IN_PROGRESS, RequestStatus.DELETED}
    ),
    RequestStatus.REQUIRES_ATTENTION: frozenset(
        {RequestStatus.IN_PROGRESS, RequestStatus.DELETED}
    ),
    RequestStatus.DELETED: frozenset(),
}

VALID_PRIORITIES: frozenset[str] = frozenset({"low", "medium", "high", "urgent"})

# Python attribute -> serialized consumer field name
FIELD_ALIASES: dict[str, str] = {
    "id": "id",
    "subject": "subject",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "assigned_department_id": "assignedDepartmentId",
    "assigned_position_id": "assignedPositionId",
    "ai_processed": "aiProcessed",
    "ai_classification": "aiClassification",
    "ai_suggestion": "aiSuggestion",
    "summary": "summary",
    "full_name": "fullName",
    "contact_info": "contactInfo",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

# Fields that may change through lifecycle writes. id/created_at never change;
# updated_at is bookkeeping and is not part of the audited diff.
MUTABLE_FIELDS: tuple[str, ...] = (
    "subject",
    "description",
    "status",
    "priority",
    "assigned_department_id",
    "assigned_position_id",
    "ai_processed",
    "ai_classification",
    "ai_suggestion",
    "summary",
    "full_name",
    "contact_info",
)

MAX_SUBJECT_LENGTH: int = 500
MAX_DESCRIPTION_LENGTH: int = 20_000


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def serialize_field_value(value: Any) -> Any:
    """Convert a request field value into its JSON-compatible form."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def field_from_alias(alias: str) -> str:
    """Map a serialized consumer field name back to the attribute name.

    Raises:
        ValidationError: If the alias is unknown.
    """
    for attribute, known_alias in FIELD_ALIASES.items():
        if known_alias == alias:
            return attribute
    raise ValidationError(f"Unknown citizen request field: {alias}", field=alias)


@dataclass(frozen=True)
class FieldChange:
    """One changed field in a field-level diff.

    Attributes:
        field: Attribute name of the changed field.
        old: Previous value.
        new: New value.
    """

    field: str
    old: Any
    new: Any

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the consumer field name."""
        return {
            "field": FIELD_ALIASES[self.field],
            "old": serialize_field_value(self.old),
            "new": serialize_field_value(self.new),
        }


@dataclass(frozen=True, eq=True)
class CitizenRequest:
    """A citizen request tracked through the resolution lifecycle.

    Attributes:
        id: Repository-assigned integer identifier.
        subject: Request subject line.
        description: Request body text.
        status: Current lifecycle state.
        priority: One of low, medium, high, urgent.
        assigned_department_id: Department chosen by routing (optional).
        assigned_position_id: Position chosen by routing (optional).
        ai_processed: Whether an agent has processed the request.
        ai_classification: Category assigned by the classification action.
        ai_suggestion: Draft response from the response_generation action.
        summary: Summary from the summarization action.
        full_name: Citizen name (optional).
        contact_info: Citizen contact details (optional).
        created_at: Intake timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    id: int
    subject: str
    description: str
    status: RequestStatus = field(default=RequestStatus.NEW)
    priority: str = field(default="medium")
    assigned_department_id: int | None = field(default=None)
    assigned_position_id: int | None = field(default=None)
    ai_processed: bool = field(default=False)
    ai_classification: str | None = field(default=None)
    ai_suggestion: str | None = field(default=None)
    summary: str | None = field(default=None)
    full_name: str | None = field(default=None)
    contact_info: str | None = field(default=None)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate citizen request fields."""
        if not isinstance(self.status, RequestStatus):
            raise ValidationError(
                f"Unknown request status: {self.status!r}", field="status"
            )
        if self.priority not in VALID_PRIORITIES:
            raise ValidationError(
                f"Priority must be one of {sorted(VALID_PRIORITIES)}, got {self.priority!r}",
                field="priority",
            )
        if not self.subject.strip() and not self.description.strip():
            raise ValidationError(
                "Citizen request needs a subject or a description", field="subject"
            )
        if len(self.subject) > MAX_SUBJECT_LENGTH:
            raise ValidationError(
                f"Subject exceeds maximum length of {MAX_SUBJECT_LENGTH} characters",
                field="subject",
            )
        if len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters",
                field="description",
            )

    @property
    def routing_text(self) -> str:
        """Text the routing engine matches keywords against."""
        return f"{self.subject} {self.description}"

    def with_status(self, new_status: RequestStatus) -> CitizenRequest:
        """Create new request with updated status.

        Enforces the lifecycle transition matrix. Moving to the current
        status is allowed and yields an identical request (a no-op).

        Args:
            new_status: The state to transition to.

        Returns:
            New CitizenRequest with the updated status.

        Raises:
            InvalidTransitionError: If the transition is not in the matrix.
        """
        if new_status == self.status:
            return self
        valid_transitions = self.status.valid_transitions()
        if new_status not in valid_transitions:
            raise InvalidTransitionError(
                from_state=self.status,
                to_state=new_status,
                allowed_transitions=list(valid_transitions),
            )
        return dataclasses.replace(self, status=new_status, updated_at=_utc_now())

    def with_changes(self, **changes: Any) -> CitizenRequest:
        """Create new request with non-status field changes applied.

        Args:
            **changes: Attribute names mapped to new values.

        Returns:
            New CitizenRequest. Returns self when nothing differs.

        Raises:
            ValidationError: If a field is unknown, immutable, or the
                status is changed through this method.
        """
        for name in changes:
            if name == "status":
                raise ValidationError(
                    "Status changes must go through a lifecycle transition",
                    field="status",
                )
            if name not in MUTABLE_FIELDS:
                raise ValidationError(
                    f"Field {name!r} cannot be updated", field=name
                )
        if all(getattr(self, name) == value for name, value in changes.items()):
            return self
        return dataclasses.replace(self, **changes, updated_at=_utc_now())

    def diff(self, updated: CitizenRequest) -> tuple[FieldChange, ...]:
        """Compute the field-level diff from this snapshot to `updated`.

        Only MUTABLE_FIELDS are compared, in declaration order, so the
        diff is deterministic.

        Args:
            updated: The newer snapshot of the same request.

        Returns:
            Tuple of FieldChange, empty when nothing changed.
        """
        return tuple(
            FieldChange(field=name, old=getattr(self, name), new=getattr(updated, name))
            for name in MUTABLE_FIELDS
            if getattr(self, name) != getattr(updated, name)
        )

    def apply_field_changes(
        self, changes: tuple[FieldChange, ...], at: datetime
    ) -> CitizenRequest:
        """Apply recorded field changes, used when replaying audit history.

        Args:
            changes: Changes from an entity_update activity.
            at: Timestamp of the activity.

        Returns:
            New CitizenRequest with the changes applied verbatim.
        """
        values = {change.field: change.new for change in changes}
        return dataclasses.replace(self, **values, updated_at=at)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the stable consumer field names."""
        return {
            alias: serialize_field_value(getattr(self, name))
            for name, alias in FIELD_ALIASES.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CitizenRequest:
        """Rebuild a request from `to_dict()` output.

        Raises:
            ValidationError: If a key is unknown or a value is malformed.
        """
        values: dict[str, Any] = {}
        for alias, value in data.items():
            name = field_from_alias(alias)
            if name == "status":
                try:
                    value = RequestStatus(value)
                except ValueError as exc:
                    raise ValidationError(
                        f"Unknown request status: {value!r}", field="status"
                    ) from exc
            elif name in ("created_at", "updated_at") and isinstance(value, str):
                value = datetime.fromisoformat(value)
            values[name] = value
        return cls(**values)
