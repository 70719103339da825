"""Base exception classes for the correspondence pipeline domain layer."""


class PipelineError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application.

    Direct subclasses:
    - ValidationError
    - InvalidTransitionError
    - AgentProcessingError
    - LedgerError
    - AuditWriteError
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
