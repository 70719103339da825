"""structlog configuration for the pipeline.

Production renders one JSON object per line; any other environment gets
the colored console renderer. Every entry carries the same `service_name`
and `environment` values the Prometheus metrics are labelled with:

    {
        "event": "batch_processing_completed",
        "level": "info",
        "timestamp": "2024-05-01T09:30:00.000000Z",
        "correlation_id": "4f0c...",
        "service_name": "correspondence-pipeline",
        "environment": "production",
        "service": "AgentDispatcherService",
        "component": "dispatcher",
        ...
    }
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from src.application.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
SERVICE_NAME_ENV = "SERVICE_NAME"
DEFAULT_SERVICE_NAME = "correspondence-pipeline"


def _get_log_level() -> int:
    """Level from LOG_LEVEL, INFO when unset or unknown."""
    level = getattr(logging, os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def _deployment_fields(environment: str) -> Processor:
    service_name = os.getenv(SERVICE_NAME_ENV, DEFAULT_SERVICE_NAME)

    def add_deployment_fields(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service_name", service_name)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_deployment_fields


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog once at process start.

    Args:
        environment: "production" for JSON lines, anything else for the
            console renderer.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        _deployment_fields(environment),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
