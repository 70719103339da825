"""Observability infrastructure for structured logging.

Usage:
    from src.infrastructure.observability import configure_structlog

    # At startup
    configure_structlog(environment="production")
"""

from src.infrastructure.observability.logging import configure_structlog

__all__: list[str] = ["configure_structlog"]
