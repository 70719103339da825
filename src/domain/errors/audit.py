"""Audit trail errors.

An audit write failure fails the whole operation: no mutation may exist
without its corresponding Activity.
"""

from __future__ import annotations

from src.domain.exceptions import PipelineError


class AuditWriteError(PipelineError):
    """Raised when an Activity cannot be appended to the audit trail.

    Attributes:
        action_type: The activity kind that failed to persist.
        related_id: The entity the activity describes.
        cause: Description of the underlying failure.
    """

    def __init__(self, action_type: str, related_id: int | None, cause: str) -> None:
        self.action_type = action_type
        self.related_id = related_id
        self.cause = cause
        super().__init__(
            f"Failed to append {action_type} activity for entity {related_id}: {cause}"
        )


class ImmutableRecordError(PipelineError):
    """Raised when code attempts to rewrite an append-only record."""

    pass
