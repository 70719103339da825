"""Stub implementations for development and testing.

In-memory adapters for every application port. NOT for production use.
"""

from src.infrastructure.stubs.activity_repository_stub import ActivityRepositoryStub
from src.infrastructure.stubs.agent_result_repository_stub import (
    AgentResultRepositoryStub,
)
from src.infrastructure.stubs.agent_runtime_stub import AgentRuntimeStub
from src.infrastructure.stubs.blockchain_record_repository_stub import (
    BlockchainRecordRepositoryStub,
)
from src.infrastructure.stubs.citizen_request_repository_stub import (
    CitizenRequestRepositoryStub,
)
from src.infrastructure.stubs.ledger_stub import LedgerStub
from src.infrastructure.stubs.snapshot_repository_stubs import (
    AgentRepositoryStub,
    TaskRuleRepositoryStub,
)

__all__: list[str] = [
    "ActivityRepositoryStub",
    "AgentRepositoryStub",
    "AgentResultRepositoryStub",
    "AgentRuntimeStub",
    "BlockchainRecordRepositoryStub",
    "CitizenRequestRepositoryStub",
    "LedgerStub",
    "TaskRuleRepositoryStub",
]
