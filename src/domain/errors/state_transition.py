"""State transition errors for the citizen request lifecycle.

This module defines the error for invalid request state transitions.
A rejected transition never mutates the request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.domain.exceptions import PipelineError

if TYPE_CHECKING:
    from src.domain.models.citizen_request import RequestStatus


class InvalidTransitionError(PipelineError):
    """Raised when an invalid lifecycle transition is attempted.

    This error is raised when code attempts to move a request to a
    state not permitted by the transition matrix.

    Attributes:
        from_state: Current state of the request.
        to_state: Attempted target state.
        allowed_transitions: List of valid target states from current state.
    """

    def __init__(
        self,
        from_state: RequestStatus,
        to_state: RequestStatus,
        allowed_transitions: list[RequestStatus] | None = None,
    ) -> None:
        """Initialize invalid transition error.

        Args:
            from_state: Current request state.
            to_state: Attempted invalid target state.
            allowed_transitions: Valid states from current state (optional).
        """
        self.from_state = from_state
        self.to_state = to_state
        self.allowed_transitions = allowed_transitions or []

        allowed_str = (
            f" Valid transitions: {sorted(s.value for s in self.allowed_transitions)}"
            if self.allowed_transitions
            else ""
        )
        super().__init__(
            f"Invalid state transition: {from_state.value} -> {to_state.value}.{allowed_str}"
        )
