"""Unit tests for pipeline configuration."""

import pytest

from src.config.pipeline_config import (
    DEFAULT_BATCH_PROCESSING_CONFIG,
    DEFAULT_LEDGER_ANCHOR_CONFIG,
    BatchProcessingConfig,
    LedgerAnchorConfig,
    LedgerEndpointConfig,
)


class TestBatchProcessingConfig:
    """Tests for BatchProcessingConfig."""

    def test_defaults(self) -> None:
        assert DEFAULT_BATCH_PROCESSING_CONFIG.max_concurrency == 4
        assert DEFAULT_BATCH_PROCESSING_CONFIG.agent_timeout_seconds == 30.0

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_concurrency": 0}, {"agent_timeout_seconds": 0}],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            BatchProcessingConfig(**kwargs)

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PIPELINE_BATCH_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("PIPELINE_AGENT_TIMEOUT_SECONDS", "12.5")

        config = BatchProcessingConfig.from_environment()

        assert config.max_concurrency == 8
        assert config.agent_timeout_seconds == 12.5

    def test_malformed_environment_falls_back(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PIPELINE_BATCH_MAX_CONCURRENCY", "many")
        monkeypatch.delenv("PIPELINE_AGENT_TIMEOUT_SECONDS", raising=False)

        config = BatchProcessingConfig.from_environment()

        assert config == DEFAULT_BATCH_PROCESSING_CONFIG


class TestLedgerAnchorConfig:
    """Tests for LedgerAnchorConfig."""

    def test_defaults(self) -> None:
        assert DEFAULT_LEDGER_ANCHOR_CONFIG.max_attempts == 5

    def test_delay_for(self) -> None:
        config = LedgerAnchorConfig(base_delay_seconds=0.5, max_delay_seconds=3.0)
        assert [config.delay_for(n) for n in (1, 2, 3, 4, 5)] == [0.5, 1.0, 2.0, 3.0, 3.0]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"base_delay_seconds": -1.0},
            {"base_delay_seconds": 5.0, "max_delay_seconds": 1.0},
            {"submit_timeout_seconds": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LedgerAnchorConfig(**kwargs)

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_ANCHOR_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("LEDGER_ANCHOR_BASE_DELAY", "0.1")
        monkeypatch.setenv("LEDGER_ANCHOR_MAX_DELAY", "1")
        monkeypatch.setenv("LEDGER_SUBMIT_TIMEOUT", "4")

        config = LedgerAnchorConfig.from_environment()

        assert config == LedgerAnchorConfig(
            max_attempts=2,
            base_delay_seconds=0.1,
            max_delay_seconds=1.0,
            submit_timeout_seconds=4.0,
        )


class TestLedgerEndpointConfig:
    """Tests for LedgerEndpointConfig."""

    def test_rejects_non_http_url(self) -> None:
        with pytest.raises(ValueError):
            LedgerEndpointConfig(url="ftp://ledger")

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_RPC_URL", "https://ledger.example.org/rpc")
        monkeypatch.setenv("LEDGER_API_KEY", "secret")

        config = LedgerEndpointConfig.from_environment()

        assert config.url == "https://ledger.example.org/rpc"
        assert config.api_key == "secret"

    def test_blank_api_key_is_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LEDGER_RPC_URL", raising=False)
        monkeypatch.setenv("LEDGER_API_KEY", "")

        config = LedgerEndpointConfig.from_environment()

        assert config.url == "http://localhost:8545"
        assert config.api_key is None
