"""Lifecycle Controller service.

Owns every write to a citizen request. Each write is a read-modify-write
under the request's lock:

1. Load the current snapshot
2. Apply the change to a new frozen instance (validates the transition)
3. Diff against the previous snapshot; an empty diff is a no-op
4. Append exactly one activity describing the diff
5. Store the new snapshot

The activity is appended before the snapshot is stored, so a failed
audit write leaves the request untouched.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import weakref
from collections.abc import Callable, Collection, Mapping
from datetime import datetime, timezone
from typing import Any

from src.application.ports.citizen_request_repository import (
    CitizenRequestRepositoryProtocol,
)
from src.application.services.audit_trail_service import AuditTrailRecorder
from src.application.services.base import LoggingMixin
from src.domain.errors.state_transition import InvalidTransitionError
from src.domain.errors.validation import CitizenRequestNotFoundError, ValidationError
from src.domain.models.activity import (
    EntityCreatePayload,
    EntityDeletePayload,
    EntityUpdatePayload,
    StatusChangePayload,
)
from src.domain.models.citizen_request import (
    CITIZEN_REQUEST_ENTITY_TYPE,
    CitizenRequest,
    RequestStatus,
)
from src.domain.models.task_rule import RoutingDecision


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value: str | RequestStatus) -> RequestStatus:
    """Parse a status value, raising ValidationError on unknown values."""
    if isinstance(value, RequestStatus):
        return value
    try:
        return RequestStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown request status: {value!r}", field="status") from exc


class EntityLockRegistry:
    """Per-entity asyncio locks.

    Writes to the same request id are serialized; different ids never
    share a lock. Locks are held weakly and disappear once no writer
    references them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, entity_id: int) -> asyncio.Lock:
        """Return the lock of one entity, creating it on first use."""
        lock = self._locks.get(entity_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[entity_id] = lock
        return lock


class LifecycleService(LoggingMixin):
    """Lifecycle state machine and single writer of citizen requests."""

    def __init__(
        self,
        requests: CitizenRequestRepositoryProtocol,
        recorder: AuditTrailRecorder,
        locks: EntityLockRegistry | None = None,
    ) -> None:
        """Initialize the lifecycle service.

        Args:
            requests: Citizen request storage.
            recorder: Audit trail recorder.
            locks: Lock registry, shared when several services write.
        """
        self._requests = requests
        self._recorder = recorder
        self._locks = locks or EntityLockRegistry()
        self._init_logger(component="lifecycle")

    def lock_for(self, request_id: int) -> asyncio.Lock:
        """Write lock of one request.

        For callers whose read, decide and write steps must not interleave
        with other writers. While holding it, write with `lock_held=True`;
        the lock is not reentrant.
        """
        return self._locks.lock_for(request_id)

    async def get(self, request_id: int) -> CitizenRequest:
        """Load a request.

        Raises:
            CitizenRequestNotFoundError: If the id is unknown.
        """
        request = await self._requests.get(request_id)
        if request is None:
            raise CitizenRequestNotFoundError(request_id)
        return request

    async def list_by_status(
        self, status: str | RequestStatus, limit: int = 100
    ) -> list[CitizenRequest]:
        """List requests in a lifecycle state."""
        return await self._requests.list_by_status(parse_status(status), limit=limit)

    async def create(
        self,
        subject: str,
        description: str,
        *,
        priority: str = "medium",
        full_name: str | None = None,
        contact_info: str | None = None,
    ) -> CitizenRequest:
        """Create a NEW request and record its entity_create snapshot.

        Raises:
            ValidationError: If the request fields are invalid. Raised
                before an id is reserved.
        """
        now = _utc_now()
        draft = CitizenRequest(
            id=0,
            subject=subject,
            description=description,
            priority=priority,
            full_name=full_name,
            contact_info=contact_info,
            created_at=now,
            updated_at=now,
        )
        request = dataclasses.replace(draft, id=await self._requests.next_id())
        log = self._log_operation("create", request_id=request.id)

        async with self._locks.lock_for(request.id):
            await self._recorder.record(
                related_id=request.id,
                related_type=CITIZEN_REQUEST_ENTITY_TYPE,
                payload=EntityCreatePayload(snapshot=request.to_dict()),
                description=f"Citizen request created: {request.subject[:80]}",
                timestamp=now,
            )
            await self._requests.save(request)

        log.info("request_created", priority=request.priority)
        return request

    async def transition(
        self,
        request_id: int,
        to_status: str | RequestStatus,
        reason: str | None = None,
    ) -> CitizenRequest:
        """Move a request to another lifecycle state.

        Moving to the current state is a no-op. Moving to DELETED is
        handled as `delete()`.

        Raises:
            InvalidTransitionError: If the transition matrix forbids it.
            CitizenRequestNotFoundError: If the id is unknown.
        """
        target = parse_status(to_status)
        if target is RequestStatus.DELETED:
            return await self.delete(request_id, reason=reason)
        return await self._write(
            request_id,
            lambda current: current.with_status(target),
            operation="transition",
            reason=reason,
        )

    async def reopen(self, request_id: int, reason: str | None = None) -> CitizenRequest:
        """Explicitly reopen a COMPLETED or REQUIRES_ATTENTION request.

        Raises:
            InvalidTransitionError: If the request is not soft-terminal.
        """

        def reopen(current: CitizenRequest) -> CitizenRequest:
            if not current.status.is_soft_terminal():
                raise InvalidTransitionError(
                    from_state=current.status,
                    to_state=RequestStatus.IN_PROGRESS,
                    allowed_transitions=list(current.status.valid_transitions()),
                )
            return current.with_status(RequestStatus.IN_PROGRESS)

        return await self._write(
            request_id, reopen, operation="reopen", reason=reason or "reopened"
        )

    async def apply_routing(
        self, request_id: int, decision: RoutingDecision
    ) -> CitizenRequest:
        """Assign a request per a routing decision.

        A NEW request moves to ASSIGNED. Requests further along keep their
        status and only receive the assignment. An unassigned decision is
        a no-op.
        """
        if not decision.is_assigned:
            self._log_operation("apply_routing", request_id=request_id).debug(
                "routing_unassigned_noop"
            )
            return await self.get(request_id)

        def assign(current: CitizenRequest) -> CitizenRequest:
            updated = current.with_changes(
                assigned_department_id=decision.department_id,
                assigned_position_id=decision.position_id,
            )
            if updated.status is RequestStatus.NEW:
                updated = updated.with_status(RequestStatus.ASSIGNED)
            return updated

        reason = f"task rule {decision.rule_id}" if decision.rule_id is not None else None
        return await self._write(
            request_id, assign, operation="apply_routing", reason=reason
        )

    async def update_fields(self, request_id: int, **changes: Any) -> CitizenRequest:
        """Edit non-status fields of a request.

        Raises:
            ValidationError: If a field is unknown, immutable or a status.
        """
        return await self._write(
            request_id,
            lambda current: current.with_changes(**changes),
            operation="update_fields",
        )

    async def apply_changes(
        self,
        request_id: int,
        changes: Mapping[str, Any],
        target_status: RequestStatus | None = None,
        *,
        only_from: Collection[RequestStatus] | None = None,
        reason: str | None = None,
        lock_held: bool = False,
    ) -> CitizenRequest:
        """Apply field changes and an optional transition as one write.

        Produces one diff and one activity for both.

        Args:
            request_id: The request to change.
            changes: Non-status field changes.
            target_status: Status to move to, if any.
            only_from: When given, the transition is applied only if the
                current status is in this collection; otherwise the
                status is left as is.
            reason: Optional reason stored with the activity.
            lock_held: The caller already holds `lock_for(request_id)`.
        """

        def apply(current: CitizenRequest) -> CitizenRequest:
            updated = current.with_changes(**changes)
            if target_status is not None and (
                only_from is None or current.status in only_from
            ):
                updated = updated.with_status(target_status)
            return updated

        return await self._write(
            request_id,
            apply,
            operation="apply_changes",
            reason=reason,
            lock_held=lock_held,
        )

    async def delete(self, request_id: int, reason: str | None = None) -> CitizenRequest:
        """Tombstone a request. Its audit history is retained.

        Raises:
            InvalidTransitionError: If the request is already DELETED.
        """
        log = self._log_operation("delete", request_id=request_id)
        async with self._locks.lock_for(request_id):
            current = await self.get(request_id)
            if current.status is RequestStatus.DELETED:
                raise InvalidTransitionError(
                    from_state=current.status, to_state=RequestStatus.DELETED
                )
            now = _utc_now()
            deleted = dataclasses.replace(
                current, status=RequestStatus.DELETED, updated_at=now
            )
            await self._recorder.record(
                related_id=request_id,
                related_type=CITIZEN_REQUEST_ENTITY_TYPE,
                payload=EntityDeletePayload(
                    previous_status=current.status.value, reason=reason
                ),
                description="Citizen request deleted",
                timestamp=now,
            )
            await self._requests.save(deleted)

        log.info("request_deleted", previous_status=current.status.value)
        return deleted

    async def sync_external_status(
        self,
        request_id: int,
        status: str | RequestStatus,
        reason: str | None = None,
    ) -> CitizenRequest:
        """Take over a status reported by an external system of record.

        The move still has to be allowed by the transition matrix. It is
        recorded as a status_change activity instead of a field diff.

        Raises:
            InvalidTransitionError: If the transition matrix forbids it.
        """
        target = parse_status(status)
        log = self._log_operation("sync_external_status", request_id=request_id)
        async with self._locks.lock_for(request_id):
            current = await self.get(request_id)
            if target is RequestStatus.DELETED:
                raise ValidationError(
                    "External systems cannot delete requests", field="status"
                )
            updated = current.with_status(target)
            if updated is current:
                log.debug("status_sync_noop", status=target.value)
                return current
            now = _utc_now()
            updated = dataclasses.replace(updated, updated_at=now)
            await self._recorder.record(
                related_id=request_id,
                related_type=CITIZEN_REQUEST_ENTITY_TYPE,
                payload=StatusChangePayload(
                    from_status=current.status.value,
                    to_status=target.value,
                    reason=reason,
                ),
                description=f"Status synced: {current.status.value} -> {target.value}",
                timestamp=now,
            )
            await self._requests.save(updated)

        log.info(
            "status_synced", from_status=current.status.value, to_status=target.value
        )
        return updated

    async def _write(
        self,
        request_id: int,
        mutate: Callable[[CitizenRequest], CitizenRequest],
        *,
        operation: str,
        reason: str | None = None,
        lock_held: bool = False,
    ) -> CitizenRequest:
        """Serialized read-modify-write producing one entity_update activity."""
        log = self._log_operation(operation, request_id=request_id)
        guard: contextlib.AbstractAsyncContextManager[Any] = (
            contextlib.nullcontext() if lock_held else self._locks.lock_for(request_id)
        )
        async with guard:
            current = await self.get(request_id)
            updated = mutate(current)
            changes = current.diff(updated)
            if not changes:
                log.debug("write_noop")
                return current
            if current.status is RequestStatus.DELETED:
                raise ValidationError(
                    f"Citizen request {request_id} is deleted", field="status"
                )

            now = _utc_now()
            updated = dataclasses.replace(updated, updated_at=now)
            payload = EntityUpdatePayload(changes=changes, reason=reason)
            status_change = payload.change_for("status")
            await self._recorder.record(
                related_id=request_id,
                related_type=CITIZEN_REQUEST_ENTITY_TYPE,
                payload=payload,
                description=_describe_update(payload),
                anchor=status_change is not None,
                timestamp=now,
            )
            await self._requests.save(updated)

        log.info(
            "request_updated",
            changed_fields=list(payload.changed_fields),
            status=updated.status.value,
        )
        return updated


def _describe_update(payload: EntityUpdatePayload) -> str:
    status_change = payload.change_for("status")
    if status_change is not None:
        return f"Status changed: {status_change.old.value} -> {status_change.new.value}"
    return f"Updated fields: {', '.join(payload.changed_fields)}"
