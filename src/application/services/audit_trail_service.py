"""Audit Trail Recorder service.

Appends one Activity per mutating operation and anchors ledger-sensitive
activities on an external ledger.

Recording rules:
1. The activity is appended before the operation completes. A failed
   append raises AuditWriteError and fails the operation.
2. status_change and entity_delete activities are always anchored;
   any other activity is anchored when recorded with anchor=True.
3. Anchoring creates a pending BlockchainRecord and submits the hash in
   a background task. Submission errors are retried with bounded
   exponential backoff, then the record fails permanently.
4. Each anchor outcome appends one blockchain_record activity.
5. Ledger outcomes never reach the caller of the business operation.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID, uuid4

from src.application.ports.activity_repository import ActivityRepositoryProtocol
from src.application.ports.blockchain_record_repository import (
    BlockchainRecordRepositoryProtocol,
)
from src.application.ports.ledger import LedgerProtocol
from src.application.ports.pipeline_metrics import PipelineMetricsPort
from src.application.services.anchor_retry_policy import AnchorAction, AnchorRetryPolicy
from src.application.services.base import LoggingMixin, error_context
from src.config.pipeline_config import DEFAULT_LEDGER_ANCHOR_CONFIG, LedgerAnchorConfig
from src.domain.errors.audit import AuditWriteError
from src.domain.errors.validation import ValidationError
from src.domain.models.activity import (
    LEDGER_SENSITIVE_TYPES,
    Activity,
    ActivityPayload,
    BlockchainRecordPayload,
)
from src.domain.models.blockchain_record import BlockchainRecord, BlockchainStatus
from src.domain.models.citizen_request import CITIZEN_REQUEST_ENTITY_TYPE, CitizenRequest
from src.domain.services.anchor_hash import compute_activity_anchor_hash
from src.domain.services.history_replay import replay_history


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditTrailRecorder(LoggingMixin):
    """Append-only audit trail with asynchronous ledger anchoring.

    Background anchoring tasks are tracked so callers can await them
    with `drain()` at shutdown or in tests.
    """

    def __init__(
        self,
        activities: ActivityRepositoryProtocol,
        blockchain_records: BlockchainRecordRepositoryProtocol,
        ledger: LedgerProtocol,
        config: LedgerAnchorConfig = DEFAULT_LEDGER_ANCHOR_CONFIG,
        metrics: PipelineMetricsPort | None = None,
    ) -> None:
        """Initialize the recorder.

        Args:
            activities: Audit trail storage.
            blockchain_records: Ledger anchor bookkeeping.
            ledger: Ledger to submit anchor hashes to.
            config: Retry and timeout settings for anchoring.
            metrics: Optional metrics collaborator.
        """
        self._activities = activities
        self._blockchain_records = blockchain_records
        self._ledger = ledger
        self._config = config
        self._retry_policy = AnchorRetryPolicy(config)
        self._metrics = metrics
        self._pending: set[asyncio.Task[None]] = set()
        self._init_logger(component="audit")

    @property
    def pending_anchor_count(self) -> int:
        """Number of anchoring tasks still running."""
        return len(self._pending)

    async def record(
        self,
        related_id: int | None,
        related_type: str,
        payload: ActivityPayload,
        *,
        description: str = "",
        anchor: bool = False,
        timestamp: datetime | None = None,
    ) -> Activity:
        """Append one activity to the audit trail.

        Args:
            related_id: Entity the activity describes (None for batches).
            related_type: Type of that entity.
            payload: Typed payload; fixes the activity kind.
            description: Human-readable one-liner.
            anchor: Anchor this activity even if its kind is not
                ledger-sensitive.
            timestamp: Activity timestamp, defaults to now (UTC).

        Returns:
            The appended activity.

        Raises:
            AuditWriteError: If the activity cannot be stored. Anchoring
                problems, including a pending record that cannot be
                stored, are logged and never raised.
        """
        activity = Activity(
            id=uuid4(),
            related_id=related_id,
            related_type=related_type,
            payload=payload,
            timestamp=timestamp or _utc_now(),
            description=description,
        )
        log = self._log_operation(
            "record",
            activity_id=str(activity.id),
            action_type=activity.action_type.value,
            related_type=related_type,
            related_id=related_id,
        )

        try:
            await self._activities.append(activity)
        except Exception as exc:
            log.error("activity_append_failed", **error_context(exc))
            raise AuditWriteError(
                action_type=activity.action_type.value,
                related_id=related_id,
                cause=str(exc),
            ) from exc

        if self._metrics is not None:
            self._metrics.record_activity(activity.action_type.value)
        log.debug("activity_recorded")

        if anchor or activity.action_type in LEDGER_SENSITIVE_TYPES:
            await self._queue_anchor(activity)

        return activity

    async def _queue_anchor(self, activity: Activity) -> None:
        """Create the pending record and start the submission task."""
        anchor_hash = compute_activity_anchor_hash(activity)
        record = BlockchainRecord(
            id=uuid4(),
            activity_id=activity.id,
            entity_id=activity.related_id,
            entity_type=activity.related_type,
            hash=anchor_hash,
        )
        try:
            await self._blockchain_records.add(record)
        except Exception as exc:
            # The activity is already appended; the caller must still commit.
            self._log_operation(
                "queue_anchor",
                activity_id=str(activity.id),
                hash=anchor_hash,
            ).error("anchor_record_failed", **error_context(exc))
            if self._metrics is not None:
                self._metrics.record_ledger_anchor(BlockchainStatus.FAILED.value)
            return

        task = asyncio.create_task(self._anchor(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        self._log_operation(
            "queue_anchor",
            record_id=str(record.id),
            activity_id=str(activity.id),
            hash=anchor_hash,
        ).info("anchor_queued")

    async def _anchor(self, record: BlockchainRecord) -> None:
        """Submit an anchor hash until it is confirmed or fails for good.

        Runs detached from the business operation, so nothing raised
        here may escape: bookkeeping failures are logged instead.
        """
        log = self._log_operation(
            "anchor",
            record_id=str(record.id),
            activity_id=str(record.activity_id),
        )
        attempt = 0
        while True:
            attempt += 1
            try:
                transaction_hash = await asyncio.wait_for(
                    self._ledger.submit(record.hash),
                    timeout=self._config.submit_timeout_seconds,
                )
            except Exception as exc:
                decision = self._retry_policy.decide(exc, attempt)
                if decision.action is AnchorAction.RETRY:
                    log.warning(
                        "anchor_submission_retrying",
                        attempt=attempt,
                        max_attempts=self._retry_policy.max_attempts,
                        category=decision.category.value,
                        retry_delay_seconds=decision.retry_delay_seconds,
                        **error_context(exc),
                    )
                    await asyncio.sleep(decision.retry_delay_seconds)
                    continue
                log.error(
                    "anchor_submission_failed",
                    attempts=attempt,
                    category=decision.category.value,
                    **error_context(exc),
                )
                final = record.fail(attempts=attempt)
                break
            else:
                log.info(
                    "anchor_confirmed",
                    attempts=attempt,
                    transaction_hash=transaction_hash,
                )
                final = record.confirm(transaction_hash, attempts=attempt)
                break

        try:
            await self._finalize(final)
        except Exception:
            log.exception("anchor_bookkeeping_failed", status=final.status.value)

    async def _finalize(self, record: BlockchainRecord) -> None:
        """Persist the terminal record and its blockchain_record activity."""
        await self._blockchain_records.update(record)
        if self._metrics is not None:
            self._metrics.record_ledger_anchor(record.status.value)
        await self.record(
            related_id=record.entity_id,
            related_type=record.entity_type,
            payload=BlockchainRecordPayload(
                record_id=record.id,
                anchored_activity_id=record.activity_id,
                hash=record.hash,
                status=record.status.value,
                transaction_hash=record.transaction_hash,
                attempts=record.attempts,
            ),
            description=f"Ledger anchor {record.status.value}",
        )

    async def drain(self) -> None:
        """Wait until every queued anchoring task has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def get_entity_history(
        self, entity_type: str, entity_id: int
    ) -> list[Activity]:
        """Activities of one entity, oldest first."""
        return await self._activities.list_for_entity(entity_type, entity_id)

    async def get_recent(self, limit: int = 50) -> list[Activity]:
        """Latest activities across all entities, newest first."""
        if limit < 1:
            raise ValidationError(f"limit must be positive, got {limit}", field="limit")
        return await self._activities.list_recent(limit)

    async def replay(self, entity_id: int) -> CitizenRequest | None:
        """Reconstruct a citizen request from its activity history.

        Returns:
            The reconstructed request, or None without history.
        """
        history = await self._activities.list_for_entity(
            CITIZEN_REQUEST_ENTITY_TYPE, entity_id
        )
        return replay_history(history)

    async def get_record(self, record_id: UUID) -> BlockchainRecord | None:
        """Retrieve a blockchain record by id."""
        return await self._blockchain_records.get(record_id)

    async def get_records_for_entity(
        self, entity_type: str, entity_id: int
    ) -> list[BlockchainRecord]:
        """Blockchain records of one entity, oldest first."""
        return await self._blockchain_records.list_for_entity(entity_type, entity_id)

    async def verify_record(self, record_id: UUID) -> bool:
        """Check a record's hash against the activity it anchors.

        Recomputes the anchor hash from the stored activity, so a record
        whose activity was tampered with no longer verifies.

        Raises:
            ValidationError: If the record or its activity is missing.
        """
        record = await self._blockchain_records.get(record_id)
        if record is None:
            raise ValidationError(
                f"Blockchain record {record_id} not found", field="record_id"
            )
        activity = await self._activities.get(record.activity_id)
        if activity is None:
            raise ValidationError(
                f"Anchored activity {record.activity_id} not found",
                field="activity_id",
            )
        verified = compute_activity_anchor_hash(activity) == record.hash
        self._log_operation(
            "verify_record", record_id=str(record_id), verified=verified
        ).info("anchor_verified" if verified else "anchor_mismatch")
        return verified
