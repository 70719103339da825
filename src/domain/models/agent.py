"""Agent domain models.

An Agent is a configured AI processing profile. Agents are read-only input
to the dispatcher, which receives them as an immutable AgentRoster
snapshot on every call instead of consulting shared state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

from src.domain.errors.validation import ValidationError


class AgentActionType(str, Enum):
    """Action an agent performs on a request.

    FULL is a composite: it runs every concrete action in order and
    records one AgentResult per concrete action.
    """

    CLASSIFICATION = "classification"
    SUMMARIZATION = "summarization"
    RESPONSE_GENERATION = "response_generation"
    FULL = "full"

    def sub_actions(self) -> tuple[AgentActionType, ...]:
        """Expand this action into the concrete actions it runs."""
        if self is AgentActionType.FULL:
            return CONCRETE_ACTIONS
        return (self,)

    @classmethod
    def parse(cls, value: str | AgentActionType) -> AgentActionType:
        """Parse an action type, raising ValidationError on unknown values."""
        if isinstance(value, AgentActionType):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown action type: {value!r}", field="action_type"
            ) from exc


CONCRETE_ACTIONS: tuple[AgentActionType, ...] = (
    AgentActionType.CLASSIFICATION,
    AgentActionType.SUMMARIZATION,
    AgentActionType.RESPONSE_GENERATION,
)


@dataclass(frozen=True, eq=True)
class AgentConfig:
    """Runtime configuration of an agent.

    Attributes:
        model: Model identifier passed to the Agent Runtime.
        temperature: Sampling temperature.
        capabilities: Concrete actions the agent may perform. Empty means
            every action is allowed.
    """

    model: str
    temperature: float = 0.2
    capabilities: frozenset[AgentActionType] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.capabilities, frozenset):
            object.__setattr__(self, "capabilities", frozenset(self.capabilities))
        if not 0.0 <= self.temperature <= 2.0:
            raise ValidationError(
                f"temperature must be within [0, 2], got {self.temperature}",
                field="temperature",
            )

    def supports(self, action: AgentActionType) -> bool:
        """Check whether this configuration allows the action."""
        return not self.capabilities or action in self.capabilities


@dataclass(frozen=True, eq=True)
class Agent:
    """A configured AI processing profile.

    Attributes:
        id: Integer identifier.
        name: Display name, reported in batch summaries.
        type: Agent category (e.g. "citizen_requests").
        config: Model configuration.
        is_active: Inactive agents cannot process requests.
    """

    id: int
    name: str
    type: str
    config: AgentConfig
    is_active: bool = True


@dataclass(frozen=True)
class AgentRoster:
    """Immutable snapshot of the agents available for one call."""

    agents: tuple[Agent, ...] = ()

    @classmethod
    def of(cls, agents: Iterable[Agent]) -> AgentRoster:
        """Create a roster snapshot from any iterable of agents."""
        return cls(agents=tuple(agents))

    def get(self, agent_id: int) -> Agent | None:
        """Look up an agent by id."""
        for agent in self.agents:
            if agent.id == agent_id:
                return agent
        return None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class AgentResult:
    """Immutable record of one agent invocation's output for one entity.

    One row is written per invocation per concrete action.

    Attributes:
        id: UUID of the result row.
        agent_id: Agent that produced the output.
        entity_id: Entity the output belongs to.
        entity_type: Type of that entity (e.g. "citizen_request").
        action_type: Concrete action performed.
        result: Output payload, frozen on construction.
        created_at: When the result was recorded (UTC).
    """

    id: UUID
    agent_id: int
    entity_id: int
    entity_type: str
    action_type: AgentActionType
    result: Mapping[str, Any]
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.action_type is AgentActionType.FULL:
            raise ValidationError(
                "AgentResult rows are recorded per concrete action, not FULL",
                field="action_type",
            )
        if not isinstance(self.result, MappingProxyType):
            object.__setattr__(self, "result", MappingProxyType(dict(self.result)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict."""
        return {
            "id": str(self.id),
            "agentId": self.agent_id,
            "entityId": self.entity_id,
            "entityType": self.entity_type,
            "actionType": self.action_type.value,
            "result": dict(self.result),
            "createdAt": self.created_at.isoformat(),
        }
