"""Domain errors for the correspondence pipeline.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from PipelineError, except RuleEvaluationWarning
which is a warning category.
"""

from src.domain.errors.agent import (
    AgentProcessingError,
    AgentRuntimeError,
    MalformedAgentOutputError,
)
from src.domain.errors.audit import AuditWriteError, ImmutableRecordError
from src.domain.errors.ledger import LedgerError
from src.domain.errors.routing import RuleEvaluationWarning
from src.domain.errors.state_transition import InvalidTransitionError
from src.domain.errors.validation import (
    AgentInactiveError,
    AgentNotFoundError,
    CitizenRequestNotFoundError,
    ValidationError,
)

__all__: list[str] = [
    "AgentInactiveError",
    "AgentNotFoundError",
    "AgentProcessingError",
    "AgentRuntimeError",
    "AuditWriteError",
    "CitizenRequestNotFoundError",
    "ImmutableRecordError",
    "InvalidTransitionError",
    "LedgerError",
    "MalformedAgentOutputError",
    "RuleEvaluationWarning",
    "ValidationError",
]
