"""
Infrastructure layer - External adapters for the correspondence pipeline.

This layer contains:
- JSON-RPC ledger adapter (httpx)
- Prometheus metrics collector
- structlog configuration
- In-memory stubs for every application port

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
