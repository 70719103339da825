"""Bootstrap wiring for the correspondence pipeline.

Builds the services of one pipeline instance over a set of adapters.
The ledger is selected from the environment: a JSON-RPC node when
LEDGER_RPC_URL is set, otherwise the in-memory ledger stub.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

from structlog import get_logger

from src.application.ports.agent_runtime import AgentRuntimeProtocol
from src.application.ports.ledger import LedgerProtocol
from src.application.ports.pipeline_metrics import PipelineMetricsPort
from src.application.services.agent_dispatcher_service import AgentDispatcherService
from src.application.services.audit_trail_service import AuditTrailRecorder
from src.application.services.intake_service import IntakeService
from src.application.services.lifecycle_service import (
    EntityLockRegistry,
    LifecycleService,
)
from src.config.pipeline_config import (
    DEFAULT_BATCH_PROCESSING_CONFIG,
    DEFAULT_LEDGER_ANCHOR_CONFIG,
    BatchProcessingConfig,
    LedgerAnchorConfig,
    LedgerEndpointConfig,
)
from src.domain.models.agent import Agent
from src.domain.models.org_structure import OrgStructure
from src.domain.models.task_rule import TaskRule
from src.infrastructure.adapters.ledger import HttpLedgerAdapter
from src.infrastructure.stubs import (
    ActivityRepositoryStub,
    AgentRepositoryStub,
    AgentResultRepositoryStub,
    AgentRuntimeStub,
    BlockchainRecordRepositoryStub,
    CitizenRequestRepositoryStub,
    LedgerStub,
    TaskRuleRepositoryStub,
)

logger = get_logger()


@dataclass
class Pipeline:
    """Wired services and the stores behind them."""

    intake: IntakeService
    lifecycle: LifecycleService
    dispatcher: AgentDispatcherService
    recorder: AuditTrailRecorder
    requests: CitizenRequestRepositoryStub
    activities: ActivityRepositoryStub
    blockchain_records: BlockchainRecordRepositoryStub
    agent_results: AgentResultRepositoryStub
    task_rules: TaskRuleRepositoryStub
    agents: AgentRepositoryStub
    runtime: AgentRuntimeProtocol
    ledger: LedgerProtocol

    async def shutdown(self) -> None:
        """Wait for outstanding ledger anchoring."""
        await self.recorder.drain()


def create_ledger() -> LedgerProtocol:
    """Select the ledger adapter from the environment.

    Returns the JSON-RPC adapter if LEDGER_RPC_URL is configured,
    otherwise falls back to the in-memory stub.
    """
    if os.environ.get("LEDGER_RPC_URL"):
        config = LedgerEndpointConfig.from_environment()
        logger.info("ledger_adapter_selected", adapter="json_rpc", url=config.url)
        return HttpLedgerAdapter(config)
    logger.warning(
        "ledger_adapter_selected",
        adapter="stub",
        message="LEDGER_RPC_URL not set, using in-memory ledger stub",
    )
    return LedgerStub()


def build_in_memory_pipeline(
    *,
    task_rules: Iterable[TaskRule] = (),
    agents: Iterable[Agent] = (),
    org_structure: OrgStructure | None = None,
    runtime: AgentRuntimeProtocol | None = None,
    ledger: LedgerProtocol | None = None,
    batch_config: BatchProcessingConfig = DEFAULT_BATCH_PROCESSING_CONFIG,
    anchor_config: LedgerAnchorConfig = DEFAULT_LEDGER_ANCHOR_CONFIG,
    metrics: PipelineMetricsPort | None = None,
) -> Pipeline:
    """Wire a pipeline over in-memory stores.

    Args:
        task_rules: Initial routing rules.
        agents: Initial agent roster.
        org_structure: Optional org hierarchy for routing validation.
        runtime: Agent Runtime, defaults to the keyword stub.
        ledger: Ledger, defaults to `create_ledger()`.
        batch_config: Worker pool and agent timeout settings.
        anchor_config: Ledger retry settings.
        metrics: Optional metrics collaborator.
    """
    requests = CitizenRequestRepositoryStub()
    activities = ActivityRepositoryStub()
    blockchain_records = BlockchainRecordRepositoryStub()
    agent_results = AgentResultRepositoryStub()
    runtime = runtime or AgentRuntimeStub()
    ledger = ledger or create_ledger()

    recorder = AuditTrailRecorder(
        activities, blockchain_records, ledger, config=anchor_config, metrics=metrics
    )
    lifecycle = LifecycleService(requests, recorder, locks=EntityLockRegistry())
    rule_store = TaskRuleRepositoryStub(task_rules)

    return Pipeline(
        intake=IntakeService(lifecycle, rule_store, org_structure=org_structure),
        lifecycle=lifecycle,
        dispatcher=AgentDispatcherService(
            lifecycle,
            recorder,
            agent_results,
            runtime,
            config=batch_config,
            metrics=metrics,
        ),
        recorder=recorder,
        requests=requests,
        activities=activities,
        blockchain_records=blockchain_records,
        agent_results=agent_results,
        task_rules=rule_store,
        agents=AgentRepositoryStub(agents),
        runtime=runtime,
        ledger=ledger,
    )


__all__ = ["Pipeline", "build_in_memory_pipeline", "create_ledger"]
