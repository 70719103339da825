"""Domain models for the correspondence pipeline.

Contains value objects and domain models that represent
core business concepts. These models are immutable and
contain no infrastructure dependencies.
"""

from src.domain.models.activity import Activity, ActivityType
from src.domain.models.agent import Agent, AgentActionType, AgentConfig, AgentResult, AgentRoster
from src.domain.models.batch_report import BatchOptions, BatchReport
from src.domain.models.blockchain_record import BlockchainRecord, BlockchainStatus
from src.domain.models.citizen_request import CitizenRequest, RequestStatus
from src.domain.models.org_structure import Department, Employee, OrgStructure, Position
from src.domain.models.task_rule import RoutingDecision, TaskRule

__all__: list[str] = [
    "Activity",
    "ActivityType",
    "Agent",
    "AgentActionType",
    "AgentConfig",
    "AgentResult",
    "AgentRoster",
    "BatchOptions",
    "BatchReport",
    "BlockchainRecord",
    "BlockchainStatus",
    "CitizenRequest",
    "Department",
    "Employee",
    "OrgStructure",
    "Position",
    "RequestStatus",
    "RoutingDecision",
    "TaskRule",
]
