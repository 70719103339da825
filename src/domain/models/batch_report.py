"""Batch processing report domain models.

A batch run produces one outcome per submitted request id: success,
typed failure, or skip. The report is a fold over those outcomes in input
order. The success/failure tally is computed once from the folded results
and both `processedCount` and `summary.succeeded/failed` read that single
tally.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from src.domain.models.agent import AgentActionType


@dataclass(frozen=True)
class BatchOptions:
    """Options for a batch run.

    Attributes:
        auto_classify: Run the classification action.
        auto_respond: Run the response_generation action.
        force_reprocess: Process requests even if already ai_processed.
    """

    auto_classify: bool = False
    auto_respond: bool = False
    force_reprocess: bool = False

    def actions(self) -> tuple[AgentActionType, ...]:
        """Concrete actions selected by the options.

        Classification runs when nothing is selected.
        """
        selected: list[AgentActionType] = []
        if self.auto_classify:
            selected.append(AgentActionType.CLASSIFICATION)
        if self.auto_respond:
            selected.append(AgentActionType.RESPONSE_GENERATION)
        return tuple(selected) or (AgentActionType.CLASSIFICATION,)


@dataclass(frozen=True)
class BatchItemSuccess:
    """A request that was processed and persisted."""

    request_id: int
    actions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"requestId": self.request_id, "success": True, "actions": list(self.actions)}


@dataclass(frozen=True)
class BatchItemFailure:
    """A request whose processing failed; the batch continued.

    Attributes:
        request_id: The failed request.
        error: Error message.
        error_type: Exception class name (AgentProcessingError, ...).
    """

    request_id: int
    error: str
    error_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"requestId": self.request_id, "success": False, "error": self.error}


@dataclass(frozen=True)
class BatchItemSkipped:
    """A request skipped because it was already processed."""

    request_id: int


BatchItemOutcome = Union[BatchItemSuccess, BatchItemFailure, BatchItemSkipped]
BatchItemResult = Union[BatchItemSuccess, BatchItemFailure]


@dataclass(frozen=True)
class BatchTally:
    """The authoritative success/error count of a batch."""

    success: int = 0
    error: int = 0

    @classmethod
    def of(cls, results: Sequence[BatchItemResult]) -> BatchTally:
        """Count successes and failures of the processed results."""
        success = sum(1 for result in results if isinstance(result, BatchItemSuccess))
        return cls(success=success, error=len(results) - success)

    def to_dict(self) -> dict[str, int]:
        return {"success": self.success, "error": self.error}


@dataclass(frozen=True)
class BatchSummary:
    """Batch summary; succeeded/failed are read from the shared tally."""

    total: int
    processed: int
    tally: BatchTally
    time_stamp: datetime
    agent_id: int
    agent_name: str
    actions: tuple[str, ...]

    @property
    def succeeded(self) -> int:
        return self.tally.success

    @property
    def failed(self) -> int:
        return self.tally.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "timeStamp": self.time_stamp.isoformat(),
            "agentId": self.agent_id,
            "agentName": self.agent_name,
            "actions": ", ".join(self.actions),
        }


@dataclass(frozen=True)
class BatchReport:
    """Structured report of a batch run.

    Attributes:
        results: Processed items (skips excluded), in input order.
        skipped: Ids of requests skipped as already processed.
        tally: The single success/error count.
        summary: Batch summary sharing `tally`.
    """

    results: tuple[BatchItemResult, ...]
    skipped: tuple[int, ...]
    tally: BatchTally
    summary: BatchSummary

    @property
    def success(self) -> bool:
        """True when every submitted request is accounted for.

        Per-item failures do not make a report unsuccessful; they are
        counted in `tally`.
        """
        return self.summary.total == len(self.results) + len(self.skipped)

    @classmethod
    def fold(
        cls,
        outcomes: Sequence[BatchItemOutcome],
        agent_id: int,
        agent_name: str,
        actions: Sequence[AgentActionType],
        time_stamp: datetime | None = None,
    ) -> BatchReport:
        """Fold per-item outcomes (already in input order) into a report.

        Args:
            outcomes: One outcome per submitted request id, input order.
            agent_id: Agent used for the batch.
            agent_name: Agent display name.
            actions: Actions run for processed requests.
            time_stamp: Report timestamp, defaults to now (UTC).

        Returns:
            The batch report.
        """
        results: list[BatchItemResult] = []
        skipped: list[int] = []
        for outcome in outcomes:
            if isinstance(outcome, BatchItemSkipped):
                skipped.append(outcome.request_id)
            else:
                results.append(outcome)
        tally = BatchTally.of(results)
        summary = BatchSummary(
            total=len(outcomes),
            processed=len(results),
            tally=tally,
            time_stamp=time_stamp or datetime.now(timezone.utc),
            agent_id=agent_id,
            agent_name=agent_name,
            actions=tuple(action.value for action in actions),
        )
        return cls(
            results=tuple(results),
            skipped=tuple(skipped),
            tally=tally,
            summary=summary,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the consumer report shape."""
        return {
            "success": self.success,
            "processedCount": self.tally.to_dict(),
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary.to_dict(),
        }
