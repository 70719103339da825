"""Task rule repository port.

Rules are read as an immutable snapshot per routing call; edits to the
rule set never affect an evaluation that is already running.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.task_rule import TaskRule


class TaskRuleRepositoryProtocol(Protocol):
    """Protocol for the task rule snapshot source."""

    async def snapshot(self) -> tuple[TaskRule, ...]:
        """Return the current rule set as an immutable tuple."""
        ...
