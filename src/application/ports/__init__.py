"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- CitizenRequestRepositoryProtocol: request snapshots
- AgentResultRepositoryProtocol: append-only agent outputs
- ActivityRepositoryProtocol: append-only audit trail
- BlockchainRecordRepositoryProtocol: ledger anchor bookkeeping
- TaskRuleRepositoryProtocol / AgentRepositoryProtocol: snapshot sources
- AgentRuntimeProtocol: LLM agent invocation
- LedgerProtocol: hash anchoring
- PipelineMetricsPort: metric recording
"""

from src.application.ports.activity_repository import ActivityRepositoryProtocol
from src.application.ports.agent_repository import AgentRepositoryProtocol
from src.application.ports.agent_result_repository import (
    AgentResultRepositoryProtocol,
)
from src.application.ports.agent_runtime import (
    AgentRuntimeProtocol,
    AgentRuntimeResponse,
)
from src.application.ports.blockchain_record_repository import (
    BlockchainRecordRepositoryProtocol,
)
from src.application.ports.citizen_request_repository import (
    CitizenRequestRepositoryProtocol,
)
from src.application.ports.ledger import LedgerProtocol
from src.application.ports.pipeline_metrics import PipelineMetricsPort
from src.application.ports.task_rule_repository import TaskRuleRepositoryProtocol

__all__: list[str] = [
    "ActivityRepositoryProtocol",
    "AgentRepositoryProtocol",
    "AgentResultRepositoryProtocol",
    "AgentRuntimeProtocol",
    "AgentRuntimeResponse",
    "BlockchainRecordRepositoryProtocol",
    "CitizenRequestRepositoryProtocol",
    "LedgerProtocol",
    "PipelineMetricsPort",
    "TaskRuleRepositoryProtocol",
]
