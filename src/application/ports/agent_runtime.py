"""Agent Runtime port definition.

Defines the abstract interface for invoking an LLM-backed agent on the
content of one citizen request. Concrete SDKs live behind this port, so
the dispatcher can be tested without real model invocations.

Failure contract:
- Adapters raise AgentRuntimeError (rate limiting, runtime faults) or
  MalformedAgentOutputError (unusable output).
- Timeouts are enforced by the caller with asyncio.wait_for.
- Adapters never retry on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from src.domain.models.agent import AgentActionType, AgentConfig

__all__ = [
    "AgentRuntimeProtocol",
    "AgentRuntimeResponse",
]


@dataclass(frozen=True, eq=True)
class AgentRuntimeResponse:
    """Output of one agent invocation.

    Which attributes are set depends on the action: classification sets
    `classification` (and usually `confidence`), summarization sets
    `summary`, response_generation sets `response_text`.

    Attributes:
        classification: Category assigned to the request.
        confidence: Classification confidence in [0, 1].
        summary: Short summary of the request.
        response_text: Draft response to the citizen.
    """

    classification: str | None = None
    confidence: float | None = None
    summary: str | None = None
    response_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the populated attributes to a JSON-compatible dict."""
        data = {
            "classification": self.classification,
            "confidence": self.confidence,
            "summary": self.summary,
            "responseText": self.response_text,
        }
        return {key: value for key, value in data.items() if value is not None}


class AgentRuntimeProtocol(Protocol):
    """Protocol for agent invocation."""

    async def invoke(
        self,
        content: str,
        action_type: AgentActionType,
        agent_config: AgentConfig,
    ) -> AgentRuntimeResponse:
        """Run one concrete action on request content.

        Args:
            content: Request content laid out for the agent.
            action_type: Concrete action (never FULL).
            agent_config: Model configuration of the agent.

        Returns:
            The agent output.

        Raises:
            AgentRuntimeError: If the invocation fails.
        """
        ...
