"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- AuditTrailRecorder: Append-only audit trail with ledger anchoring
- LifecycleService: Request state machine, the single request writer
- AgentDispatcherService: Single and batch agent processing
- IntakeService: Create, route and assign incoming requests
"""

from src.application.services.agent_dispatcher_service import (
    AgentDispatcherService,
    ProcessingOutcome,
)
from src.application.services.anchor_retry_policy import (
    AnchorAction,
    AnchorRetryPolicy,
)
from src.application.services.audit_trail_service import AuditTrailRecorder
from src.application.services.intake_service import IntakeResult, IntakeService
from src.application.services.lifecycle_service import (
    EntityLockRegistry,
    LifecycleService,
)

__all__: list[str] = [
    "AgentDispatcherService",
    "AnchorAction",
    "AnchorRetryPolicy",
    "AuditTrailRecorder",
    "EntityLockRegistry",
    "IntakeResult",
    "IntakeService",
    "LifecycleService",
    "ProcessingOutcome",
]
