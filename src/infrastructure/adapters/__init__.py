"""Infrastructure adapters for the correspondence pipeline.

Adapters implement the ports defined in the application layer,
providing concrete implementations for external services.
"""

__all__: list[str] = []
