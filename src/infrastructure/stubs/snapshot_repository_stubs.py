"""Task rule and agent snapshot source stubs.

Both hold a mutable collection and hand out immutable snapshots, so
test code can edit rules between calls without affecting a snapshot
already taken.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.application.ports.agent_repository import AgentRepositoryProtocol
from src.application.ports.task_rule_repository import TaskRuleRepositoryProtocol
from src.domain.models.agent import Agent, AgentRoster
from src.domain.models.task_rule import TaskRule, freeze_rules


class TaskRuleRepositoryStub(TaskRuleRepositoryProtocol):
    """In-memory task rule source."""

    def __init__(self, rules: Iterable[TaskRule] = ()) -> None:
        self._rules: dict[int, TaskRule] = {rule.id: rule for rule in rules}

    async def snapshot(self) -> tuple[TaskRule, ...]:
        return freeze_rules(sorted(self._rules.values(), key=lambda r: r.id))

    # Test helper methods

    def put(self, rule: TaskRule) -> None:
        """Test helper: Add or replace a rule."""
        self._rules[rule.id] = rule

    def remove(self, rule_id: int) -> None:
        """Test helper: Remove a rule."""
        self._rules.pop(rule_id, None)


class AgentRepositoryStub(AgentRepositoryProtocol):
    """In-memory agent source."""

    def __init__(self, agents: Iterable[Agent] = ()) -> None:
        self._agents: dict[int, Agent] = {agent.id: agent for agent in agents}

    async def snapshot(self) -> AgentRoster:
        return AgentRoster.of(sorted(self._agents.values(), key=lambda a: a.id))

    # Test helper methods

    def put(self, agent: Agent) -> None:
        """Test helper: Add or replace an agent."""
        self._agents[agent.id] = agent
