"""Validation errors for the correspondence pipeline.

A ValidationError is raised for malformed input and is always raised
before any side effect takes place. Not-found lookups are validation
failures as well: the caller named an entity that does not exist.
"""

from __future__ import annotations

from src.domain.exceptions import PipelineError


class ValidationError(PipelineError):
    """Raised when input is rejected before any side effect.

    Attributes:
        field: Name of the offending field, when one applies.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable description of the problem.
            field: Optional name of the offending field.
        """
        self.field = field
        super().__init__(message)


class CitizenRequestNotFoundError(ValidationError):
    """Raised when a citizen request id does not resolve to a stored request.

    Attributes:
        request_id: The id that could not be found.
    """

    def __init__(self, request_id: int) -> None:
        self.request_id = request_id
        super().__init__(f"Citizen request {request_id} not found", field="request_id")


class AgentNotFoundError(ValidationError):
    """Raised when an agent id is absent from the supplied agent roster.

    Attributes:
        agent_id: The id that could not be found.
    """

    def __init__(self, agent_id: int) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} not found", field="agent_id")


class AgentInactiveError(ValidationError):
    """Raised when a caller asks an inactive agent to process requests.

    Attributes:
        agent_id: The id of the inactive agent.
    """

    def __init__(self, agent_id: int) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} is not active", field="agent_id")
