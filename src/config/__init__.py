"""Configuration for the correspondence pipeline.

Frozen dataclasses with validation and environment overrides.
"""

from src.config.pipeline_config import (
    DEFAULT_BATCH_PROCESSING_CONFIG,
    DEFAULT_LEDGER_ANCHOR_CONFIG,
    TEST_BATCH_PROCESSING_CONFIG,
    TEST_LEDGER_ANCHOR_CONFIG,
    BatchProcessingConfig,
    LedgerAnchorConfig,
    LedgerEndpointConfig,
)

__all__ = [
    "BatchProcessingConfig",
    "DEFAULT_BATCH_PROCESSING_CONFIG",
    "DEFAULT_LEDGER_ANCHOR_CONFIG",
    "LedgerAnchorConfig",
    "LedgerEndpointConfig",
    "TEST_BATCH_PROCESSING_CONFIG",
    "TEST_LEDGER_ANCHOR_CONFIG",
]
