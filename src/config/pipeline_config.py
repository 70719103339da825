"""Correspondence pipeline configuration.

This module defines configuration for batch processing, ledger anchoring
and the ledger endpoint, with environment variable overrides for
production tuning.

Environment Variables (Batch):
- PIPELINE_BATCH_MAX_CONCURRENCY: Requests processed concurrently (default: 4)
- PIPELINE_AGENT_TIMEOUT_SECONDS: Per-call Agent Runtime timeout (default: 30.0)

Environment Variables (Ledger anchoring):
- LEDGER_ANCHOR_MAX_ATTEMPTS: Submission attempts before failing (default: 5)
- LEDGER_ANCHOR_BASE_DELAY: First retry delay in seconds (default: 0.5)
- LEDGER_ANCHOR_MAX_DELAY: Retry delay cap in seconds (default: 30.0)
- LEDGER_SUBMIT_TIMEOUT: Per-attempt submission timeout (default: 10.0)

Environment Variables (Ledger endpoint):
- LEDGER_RPC_URL: JSON-RPC endpoint of the ledger node
- LEDGER_API_KEY: Optional bearer token for the ledger node
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class BatchProcessingConfig:
    """Configuration for batch agent processing.

    Attributes:
        max_concurrency: Size of the worker pool for batch items.
                        Default: 4 concurrent requests.
        agent_timeout_seconds: Timeout of one Agent Runtime call.
                              Default: 30.0 seconds.
    """

    max_concurrency: int = 4
    agent_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be positive, got {self.max_concurrency}"
            )
        if self.agent_timeout_seconds <= 0:
            raise ValueError(
                f"agent_timeout_seconds must be positive, got {self.agent_timeout_seconds}"
            )

    @classmethod
    def from_environment(cls) -> "BatchProcessingConfig":
        """Create config from environment variables with defaults.

        Returns:
            BatchProcessingConfig with values from environment or defaults.
        """
        return cls(
            max_concurrency=_get_int_env("PIPELINE_BATCH_MAX_CONCURRENCY", 4),
            agent_timeout_seconds=_get_float_env("PIPELINE_AGENT_TIMEOUT_SECONDS", 30.0),
        )


@dataclass(frozen=True)
class LedgerAnchorConfig:
    """Configuration for asynchronous ledger anchoring.

    Retry delays grow exponentially: base_delay * 2 ** (attempt - 1),
    capped at max_delay.

    Attributes:
        max_attempts: Submission attempts before the record fails.
                     Default: 5.
        base_delay_seconds: Delay before the first retry.
                           Default: 0.5 seconds.
        max_delay_seconds: Upper bound of a single retry delay.
                          Default: 30.0 seconds.
        submit_timeout_seconds: Timeout of one submission attempt.
                               Default: 10.0 seconds.
    """

    max_attempts: int = 5
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 30.0
    submit_timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.base_delay_seconds < 0:
            raise ValueError(
                f"base_delay_seconds must be non-negative, got {self.base_delay_seconds}"
            )
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError(
                f"max_delay_seconds ({self.max_delay_seconds}) must be at least "
                f"base_delay_seconds ({self.base_delay_seconds})"
            )
        if self.submit_timeout_seconds <= 0:
            raise ValueError(
                f"submit_timeout_seconds must be positive, got {self.submit_timeout_seconds}"
            )

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after a failed attempt (1-based)."""
        return min(self.base_delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)

    @classmethod
    def from_environment(cls) -> "LedgerAnchorConfig":
        """Create config from environment variables with defaults.

        Returns:
            LedgerAnchorConfig with values from environment or defaults.
        """
        return cls(
            max_attempts=_get_int_env("LEDGER_ANCHOR_MAX_ATTEMPTS", 5),
            base_delay_seconds=_get_float_env("LEDGER_ANCHOR_BASE_DELAY", 0.5),
            max_delay_seconds=_get_float_env("LEDGER_ANCHOR_MAX_DELAY", 30.0),
            submit_timeout_seconds=_get_float_env("LEDGER_SUBMIT_TIMEOUT", 10.0),
        )


@dataclass(frozen=True)
class LedgerEndpointConfig:
    """Connection settings of the JSON-RPC ledger node.

    Attributes:
        url: JSON-RPC endpoint URL.
        api_key: Optional bearer token.
    """

    url: str = "http://localhost:8545"
    api_key: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(f"url must be an http(s) URL, got {self.url!r}")

    @classmethod
    def from_environment(cls) -> "LedgerEndpointConfig":
        """Create config from environment variables with defaults."""
        return cls(
            url=os.environ.get("LEDGER_RPC_URL", "http://localhost:8545"),
            api_key=os.environ.get("LEDGER_API_KEY") or None,
        )


# Pre-defined configurations for common use cases

DEFAULT_BATCH_PROCESSING_CONFIG = BatchProcessingConfig()

# Testing config with short timeouts for unit tests
TEST_BATCH_PROCESSING_CONFIG = BatchProcessingConfig(
    max_concurrency=2,
    agent_timeout_seconds=0.2,
)

DEFAULT_LEDGER_ANCHOR_CONFIG = LedgerAnchorConfig()

# Testing config without real sleeping between retries
TEST_LEDGER_ANCHOR_CONFIG = LedgerAnchorConfig(
    max_attempts=3,
    base_delay_seconds=0.0,
    max_delay_seconds=0.0,
    submit_timeout_seconds=0.2,
)
