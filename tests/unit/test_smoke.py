"""
Smoke tests to verify all critical dependencies are installed correctly.

These tests confirm that:
1. Python 3.11+ is installed
2. All core dependencies are importable
3. Project version is accessible

Run with: pytest tests/unit/test_smoke.py -v
"""

import sys

import pytest


class TestPythonVersion:
    """Verify Python version requirements."""

    def test_python_311_or_higher(self) -> None:
        assert sys.version_info >= (3, 11), (
            f"Python 3.11+ required, "
            f"got {sys.version_info.major}.{sys.version_info.minor}"
        )


class TestCoreDependencies:
    """Verify the runtime stack."""

    def test_httpx_async_import(self) -> None:
        """httpx async client must be importable (ledger adapter)."""
        from httpx import AsyncClient, MockTransport

        assert AsyncClient is not None
        assert MockTransport is not None

    def test_structlog_configuration(self) -> None:
        """structlog can be bound with context."""
        import structlog

        logger = structlog.get_logger()
        bound_logger = logger.bind(request_id=1, operation="test")
        assert bound_logger is not None

    def test_prometheus_client_import(self) -> None:
        """prometheus_client must be importable (pipeline metrics)."""
        from prometheus_client import CollectorRegistry, Counter, Histogram

        assert CollectorRegistry is not None
        assert Counter is not None
        assert Histogram is not None


class TestProjectVersion:
    """Verify project metadata is accessible."""

    def test_version_accessible(self, project_version: str) -> None:
        """Project version must be accessible from src package."""
        assert isinstance(project_version, str)
        assert len(project_version) > 0

    def test_version_format(self, project_version: str) -> None:
        """Version must be in semver format."""
        parts = project_version.split(".")
        assert len(parts) >= 2, f"Version must be semver format, got {project_version}"


class TestAsyncCapabilities:
    """Verify async/await functionality."""

    @pytest.mark.asyncio
    async def test_async_function_runs(self) -> None:
        import asyncio

        result = await asyncio.sleep(0, result="success")
        assert result == "success"
