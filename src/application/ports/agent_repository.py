"""Agent repository port.

Agents are read as an immutable AgentRoster snapshot which callers pass
to the dispatcher explicitly.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.agent import AgentRoster


class AgentRepositoryProtocol(Protocol):
    """Protocol for the agent snapshot source."""

    async def snapshot(self) -> AgentRoster:
        """Return the current agent roster."""
        ...
