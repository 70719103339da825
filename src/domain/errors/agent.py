"""Agent processing errors for the correspondence pipeline.

AgentProcessingError aborts the processing of a single request. Inside a
batch it is captured as that item's failure and the batch continues.
"""

from __future__ import annotations

from src.domain.exceptions import PipelineError


class AgentProcessingError(PipelineError):
    """Raised when the Agent Runtime fails for one request.

    Covers timeouts, rate limiting and malformed output. The request is
    left unmodified when this error is raised.

    Attributes:
        request_id: The request being processed.
        agent_id: The agent that was invoked.
        action_type: The action that failed (classification, ...).
        reason: Short failure category (timeout, malformed_output, ...).
    """

    def __init__(
        self,
        request_id: int,
        agent_id: int,
        action_type: str,
        reason: str,
        detail: str = "",
    ) -> None:
        """Initialize agent processing error.

        Args:
            request_id: The request being processed.
            agent_id: The agent that was invoked.
            action_type: The action that failed.
            reason: Failure category.
            detail: Optional free-form detail from the runtime.
        """
        self.request_id = request_id
        self.agent_id = agent_id
        self.action_type = action_type
        self.reason = reason
        self.detail = detail
        message = (
            f"Agent {agent_id} failed {action_type} for request {request_id}: {reason}"
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AgentRuntimeError(PipelineError):
    """Raised by Agent Runtime adapters when an invocation fails.

    Attributes:
        reason: Failure category reported to the audit trail
            (rate_limit, malformed_output, runtime_error, ...).
    """

    def __init__(self, message: str, reason: str = "runtime_error") -> None:
        self.reason = reason
        super().__init__(message)


class MalformedAgentOutputError(AgentRuntimeError):
    """Raised when agent output cannot be interpreted."""

    def __init__(self, message: str) -> None:
        super().__init__(message, reason="malformed_output")
