"""
Pytest configuration and shared fixtures for the correspondence pipeline tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Services are wired over the in-memory stubs from src.infrastructure.stubs
"""

import pytest

from src.bootstrap.pipeline import Pipeline, build_in_memory_pipeline
from src.config.pipeline_config import (
    TEST_BATCH_PROCESSING_CONFIG,
    TEST_LEDGER_ANCHOR_CONFIG,
)
from src.domain.models.agent import Agent, AgentActionType, AgentConfig, AgentRoster
from src.domain.models.task_rule import TaskRule
from src.infrastructure.stubs import AgentRuntimeStub, LedgerStub


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def agent() -> Agent:
    """An active agent allowed to run every action."""
    return Agent(
        id=1,
        name="Correspondence Assistant",
        type="citizen_requests",
        config=AgentConfig(model="stub-model"),
    )


@pytest.fixture
def inactive_agent() -> Agent:
    """An agent that has been switched off."""
    return Agent(
        id=2,
        name="Retired Assistant",
        type="citizen_requests",
        config=AgentConfig(model="stub-model"),
        is_active=False,
    )


@pytest.fixture
def classifier_agent() -> Agent:
    """An agent restricted to classification."""
    return Agent(
        id=3,
        name="Classifier",
        type="citizen_requests",
        config=AgentConfig(
            model="stub-model",
            capabilities=frozenset({AgentActionType.CLASSIFICATION}),
        ),
    )


@pytest.fixture
def roster(agent: Agent, inactive_agent: Agent, classifier_agent: Agent) -> AgentRoster:
    """Agent roster snapshot with active, inactive and restricted agents."""
    return AgentRoster.of([agent, inactive_agent, classifier_agent])


@pytest.fixture
def task_rules() -> list[TaskRule]:
    """A small rule set covering roads and water supply."""
    return [
        TaskRule(
            id=1,
            keywords=frozenset({"road", "pothole"}),
            priority=10,
            department_id=100,
            position_id=1001,
            name="Roads",
        ),
        TaskRule(
            id=2,
            keywords=frozenset({"water"}),
            priority=5,
            department_id=200,
            name="Water supply",
        ),
    ]


@pytest.fixture
def runtime() -> AgentRuntimeStub:
    """Deterministic agent runtime."""
    return AgentRuntimeStub()


@pytest.fixture
def ledger() -> LedgerStub:
    """In-memory ledger."""
    return LedgerStub()


@pytest.fixture
def pipeline(
    task_rules: list[TaskRule],
    agent: Agent,
    inactive_agent: Agent,
    classifier_agent: Agent,
    runtime: AgentRuntimeStub,
    ledger: LedgerStub,
) -> Pipeline:
    """A pipeline wired over in-memory stubs with short test timeouts."""
    return build_in_memory_pipeline(
        task_rules=task_rules,
        agents=[agent, inactive_agent, classifier_agent],
        runtime=runtime,
        ledger=ledger,
        batch_config=TEST_BATCH_PROCESSING_CONFIG,
        anchor_config=TEST_LEDGER_ANCHOR_CONFIG,
    )
