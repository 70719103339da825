"""
Domain layer - Pure business logic for the correspondence pipeline.

This layer contains:
- Domain models (CitizenRequest, TaskRule, Agent, Activity, ...)
- Domain services (routing engine, anchor hashing)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or bootstrap.
Only stdlib, typing and structlog imports are allowed.
"""

from src.domain.exceptions import PipelineError

__all__: list[str] = ["PipelineError"]
