"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "PIPELINE_ENVIRONMENT"


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog for the given environment.

    Falls back to PIPELINE_ENVIRONMENT, then to production.
    """
    _configure_structlog(
        environment=environment or os.getenv(ENVIRONMENT_ENV, "production")
    )


__all__ = ["configure_structlog"]
