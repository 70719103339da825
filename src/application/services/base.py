"""Structured logging shared by the pipeline services.

Every service logs through a structlog logger bound to its class name and
pipeline component, and binds an operation name per call:

    class LifecycleService(LoggingMixin):
        def __init__(self, requests: CitizenRequestRepositoryProtocol) -> None:
            self._requests = requests
            self._init_logger(component="lifecycle")

        async def delete(self, request_id: int) -> CitizenRequest:
            log = self._log_operation("delete", request_id=request_id)
            log.info("request_deleted")

Event names are snake_case verbs in the past tense (`request_created`,
`anchor_confirmed`); failures carry `error` and `error_type`.
"""

from __future__ import annotations

import structlog

from src.application.observability.correlation import get_correlation_id


def error_context(exc: BaseException) -> dict[str, str]:
    """Log fields describing an exception."""
    return {"error": str(exc), "error_type": type(exc).__name__}


class LoggingMixin:
    """Binds `service`, `component`, `operation` and `correlation_id`.

    Attributes:
        _log: Logger bound to the service and component.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "pipeline") -> None:
        """Bind the service logger. Call once from __init__."""
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Logger for one call of `operation`.

        Context values that are None are left out, so batch-level calls
        (no request id) and request-level calls share the same call sites.
        """
        bound = {key: value for key, value in context.items() if value is not None}
        correlation_id = get_correlation_id()
        if correlation_id:
            bound["correlation_id"] = correlation_id
        return self._log.bind(operation=operation, **bound)
