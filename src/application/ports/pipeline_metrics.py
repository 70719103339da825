"""Pipeline metrics port definition.

Lets application services report metrics without depending on the
metrics implementation. Every service accepts the port as an optional
collaborator; None disables metrics.
"""

from __future__ import annotations

from typing import Protocol


class PipelineMetricsPort(Protocol):
    """Protocol for pipeline metric recording."""

    def record_agent_invocation(
        self, action_type: str, outcome: str, duration_seconds: float
    ) -> None:
        """Record one Agent Runtime call (outcome: success or a failure reason)."""
        ...

    def record_batch_item(self, outcome: str) -> None:
        """Record one batch item outcome (success, error, skipped)."""
        ...

    def record_activity(self, action_type: str) -> None:
        """Record one appended audit activity."""
        ...

    def record_ledger_anchor(self, outcome: str) -> None:
        """Record a terminal ledger anchor outcome (confirmed, failed)."""
        ...
