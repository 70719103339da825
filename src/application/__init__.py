"""
Application layer - Use cases and orchestration for the correspondence pipeline.

This layer contains:
- Application services (lifecycle, dispatcher, audit trail, intake)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, bootstrap
"""
