"""Unit tests for correlation id propagation."""

import asyncio

import pytest

from src.application.observability.correlation import (
    correlation_id_processor,
    ensure_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    set_correlation_id("")
    yield
    set_correlation_id("")


class TestCorrelationId:
    """Tests for the correlation contextvar helpers."""

    def test_generated_ids_are_unique(self) -> None:
        assert generate_correlation_id() != generate_correlation_id()

    def test_set_and_get(self) -> None:
        set_correlation_id("batch-1")
        assert get_correlation_id() == "batch-1"

    def test_ensure_generates_once(self) -> None:
        first = ensure_correlation_id()
        assert first
        assert ensure_correlation_id() == first

    def test_ensure_keeps_existing(self) -> None:
        set_correlation_id("caller-supplied")
        assert ensure_correlation_id() == "caller-supplied"

    @pytest.mark.asyncio
    async def test_spawned_tasks_inherit_id(self) -> None:
        """Background tasks log with the id of the operation that queued them."""
        set_correlation_id("parent")

        async def child() -> str:
            return get_correlation_id()

        assert await asyncio.create_task(child()) == "parent"


class TestCorrelationProcessor:
    """Tests for the structlog processor."""

    def test_adds_id(self) -> None:
        set_correlation_id("abc")
        assert correlation_id_processor(None, "info", {"event": "x"}) == {
            "event": "x",
            "correlation_id": "abc",
        }

    def test_keeps_explicit_id(self) -> None:
        set_correlation_id("abc")
        event = correlation_id_processor(None, "info", {"correlation_id": "mine"})
        assert event["correlation_id"] == "mine"

    def test_no_id_no_key(self) -> None:
        assert "correlation_id" not in correlation_id_processor(None, "info", {})
