"""Activity (audit trail) domain models.

An Activity is an append-only audit entry describing one state change.
Its payload is a closed tagged union: one frozen payload class per
ActivityType, so "what changed" is carried by typed attributes instead of
string-keyed metadata lookups.

Payload variants:
- EntityCreatePayload: full snapshot of a newly created entity
- EntityUpdatePayload: field-level diff of a lifecycle write
- EntityDeletePayload: tombstone marker with the previous status
- AiProcessPayload: successful agent processing of one request
- AiProcessFailedPayload: Agent Runtime failure for one request
- AiProcessReportPayload: summary of a whole batch
- StatusChangePayload: status move imported without a field diff
- BlockchainRecordPayload: outcome of a ledger anchoring attempt
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Union
from uuid import UUID

from src.domain.errors.validation import ValidationError
from src.domain.models.citizen_request import FieldChange


class ActivityType(str, Enum):
    """Closed set of audit activity kinds."""

    ENTITY_CREATE = "entity_create"
    ENTITY_UPDATE = "entity_update"
    ENTITY_DELETE = "entity_delete"
    AI_PROCESS = "ai_process"
    AI_PROCESS_FAILED = "ai_process_failed"
    AI_PROCESS_REPORT = "ai_process_report"
    STATUS_CHANGE = "status_change"
    BLOCKCHAIN_RECORD = "blockchain_record"


# Kinds that are always queued for ledger anchoring. Other kinds are
# anchored only when recorded with anchor=True.
LEDGER_SENSITIVE_TYPES: frozenset[ActivityType] = frozenset(
    {ActivityType.STATUS_CHANGE, ActivityType.ENTITY_DELETE}
)

BATCH_ENTITY_TYPE: str = "batch"


@dataclass(frozen=True)
class EntityCreatePayload:
    """Payload for entity creation.

    Attributes:
        snapshot: Serialized entity as created (consumer field names).
    """

    action_type: ClassVar[ActivityType] = ActivityType.ENTITY_CREATE

    snapshot: Mapping[str, Any]

    def __post_init__(self) -> None:
        if not isinstance(self.snapshot, MappingProxyType):
            object.__setattr__(self, "snapshot", MappingProxyType(dict(self.snapshot)))

    def to_metadata(self) -> dict[str, Any]:
        return {"snapshot": dict(self.snapshot)}


@dataclass(frozen=True)
class EntityUpdatePayload:
    """Payload for a lifecycle write.

    Lists only fields whose value actually changed.

    Attributes:
        changes: Field-level diff, never empty.
        reason: Optional free-form reason supplied by the caller.
    """

    action_type: ClassVar[ActivityType] = ActivityType.ENTITY_UPDATE

    changes: tuple[FieldChange, ...]
    reason: str | None = None

    def __post_init__(self) -> None:
        if not self.changes:
            raise ValidationError("entity_update payload needs at least one change")

    @property
    def changed_fields(self) -> tuple[str, ...]:
        """Attribute names of the changed fields."""
        return tuple(change.field for change in self.changes)

    def change_for(self, field_name: str) -> FieldChange | None:
        """Return the change of one field, if it changed."""
        for change in self.changes:
            if change.field == field_name:
                return change
        return None

    def to_metadata(self) -> dict[str, Any]:
        return {
            "changes": [change.to_dict() for change in self.changes],
            "reason": self.reason,
        }


@dataclass(frozen=True)
class EntityDeletePayload:
    """Payload for a tombstone deletion.

    Attributes:
        previous_status: Status value before deletion.
        reason: Optional deletion reason.
    """

    action_type: ClassVar[ActivityType] = ActivityType.ENTITY_DELETE

    previous_status: str
    reason: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        return {"previousStatus": self.previous_status, "reason": self.reason}


@dataclass(frozen=True)
class AiProcessPayload:
    """Payload for successful agent processing of one request.

    Attributes:
        agent_id: Agent that processed the request.
        agent_name: Agent display name.
        actions: Concrete actions that ran, in order.
        agent_result_ids: Ids of the AgentResult rows written.
        classification: Classification assigned, if any.
        confidence: Classification confidence, if reported.
    """

    action_type: ClassVar[ActivityType] = ActivityType.AI_PROCESS

    agent_id: int
    agent_name: str
    actions: tuple[str, ...]
    agent_result_ids: tuple[UUID, ...] = ()
    classification: str | None = None
    confidence: float | None = None

    def to_metadata(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "agentName": self.agent_name,
            "actions": list(self.actions),
            "agentResultIds": [str(rid) for rid in self.agent_result_ids],
            "classification": self.classification,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AiProcessFailedPayload:
    """Payload for an Agent Runtime failure on one request.

    Attributes:
        agent_id: Agent that was invoked.
        failed_action: Concrete action that failed.
        reason: Failure category (timeout, rate_limit, malformed_output, ...).
        detail: Error detail from the runtime.
    """

    action_type: ClassVar[ActivityType] = ActivityType.AI_PROCESS_FAILED

    agent_id: int
    failed_action: str
    reason: str
    detail: str = ""

    def to_metadata(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "failedAction": self.failed_action,
            "reason": self.reason,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class AiProcessReportPayload:
    """Payload summarizing one batch run.

    Attributes:
        agent_id: Agent used for the batch.
        agent_name: Agent display name.
        total: Number of request ids submitted.
        processed: Number of requests actually processed (not skipped).
        succeeded: Number of successful items.
        failed: Number of failed items.
        actions: Actions run for every processed request.
    """

    action_type: ClassVar[ActivityType] = ActivityType.AI_PROCESS_REPORT

    agent_id: int
    agent_name: str
    total: int
    processed: int
    succeeded: int
    failed: int
    actions: tuple[str, ...]

    def to_metadata(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "agentName": self.agent_name,
            "processedCount": {"success": self.succeeded, "error": self.failed},
            "total": self.total,
            "processed": self.processed,
            "actions": list(self.actions),
        }


@dataclass(frozen=True)
class StatusChangePayload:
    """Payload for a status move imported without a field diff.

    Lifecycle writes inside the pipeline record EntityUpdatePayload; this
    variant covers statuses taken over from an external system of record.

    Attributes:
        from_status: Status value before the move.
        to_status: Status value after the move.
        reason: Optional reason.
    """

    action_type: ClassVar[ActivityType] = ActivityType.STATUS_CHANGE

    from_status: str
    to_status: str
    reason: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        return {"from": self.from_status, "to": self.to_status, "reason": self.reason}


@dataclass(frozen=True)
class BlockchainRecordPayload:
    """Payload for the outcome of a ledger anchoring attempt.

    Attributes:
        record_id: BlockchainRecord id.
        anchored_activity_id: The activity whose hash was anchored.
        hash: Anchor hash (hex).
        status: Terminal status reached (confirmed or failed).
        transaction_hash: Ledger transaction, when confirmed.
        attempts: Number of submission attempts made.
    """

    action_type: ClassVar[ActivityType] = ActivityType.BLOCKCHAIN_RECORD

    record_id: UUID
    anchored_activity_id: UUID
    hash: str
    status: str
    transaction_hash: str | None
    attempts: int

    def to_metadata(self) -> dict[str, Any]:
        return {
            "recordId": str(self.record_id),
            "anchoredActivityId": str(self.anchored_activity_id),
            "hash": self.hash,
            "status": self.status,
            "transactionHash": self.transaction_hash,
            "attempts": self.attempts,
        }


ActivityPayload = Union[
    EntityCreatePayload,
    EntityUpdatePayload,
    EntityDeletePayload,
    AiProcessPayload,
    AiProcessFailedPayload,
    AiProcessReportPayload,
    StatusChangePayload,
    BlockchainRecordPayload,
]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Activity:
    """Append-only audit log entry.

    Attributes:
        id: UUID of the activity.
        related_id: Id of the entity the activity describes (None for batch reports).
        related_type: Type of that entity.
        payload: Typed payload; its class fixes the action type.
        timestamp: When the activity was recorded (UTC).
        description: Human-readable one-liner.
    """

    id: UUID
    related_id: int | None
    related_type: str
    payload: ActivityPayload
    timestamp: datetime = field(default_factory=_utc_now)
    description: str = ""

    @property
    def action_type(self) -> ActivityType:
        """The activity kind, derived from the payload variant."""
        return self.payload.action_type

    @property
    def metadata(self) -> dict[str, Any]:
        """JSON-compatible metadata of the payload."""
        return self.payload.to_metadata()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict."""
        return {
            "id": str(self.id),
            "actionType": self.action_type.value,
            "relatedId": self.related_id,
            "relatedType": self.related_type,
            "description": self.description,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }
