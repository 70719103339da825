"""Stub Agent Runtime - deterministic keyword classifier.

This stub allows testing and development without a real LLM.

All generated text carries a [DEV MODE] watermark prefix to distinguish
it from production output.

WARNING: This stub is for development/testing only.
"""

from __future__ import annotations

import asyncio

from structlog import get_logger

from src.application.ports.agent_runtime import (
    AgentRuntimeProtocol,
    AgentRuntimeResponse,
)
from src.domain.errors.agent import AgentRuntimeError
from src.domain.models.agent import AgentActionType, AgentConfig

logger = get_logger()

DEV_MODE_WATERMARK = "[DEV MODE] "

# Keyword -> classification, checked in order
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("road", "infrastructure"),
    ("pothole", "infrastructure"),
    ("water", "utilities"),
    ("heating", "utilities"),
    ("electricity", "utilities"),
    ("school", "education"),
    ("kindergarten", "education"),
    ("hospital", "healthcare"),
    ("clinic", "healthcare"),
    ("tax", "finance"),
    ("pension", "social_support"),
    ("garbage", "sanitation"),
)

DEFAULT_CLASSIFICATION = "general"

# Failure reasons understood by the stub
FAILURE_TIMEOUT = "timeout"
FAILURE_MALFORMED = "malformed_output"
FAILURE_RATE_LIMIT = "rate_limit"


class AgentRuntimeStub(AgentRuntimeProtocol):
    """Stub implementation of the Agent Runtime for development.

    WARNING: NOT FOR PRODUCTION USE.

    Failure injection:
    - set_failure(marker, reason): content containing `marker` fails
    - set_action_failure(action, reason): every call of `action` fails

    Reasons: "timeout" hangs past any reasonable timeout,
    "malformed_output" returns an empty response, anything else raises
    AgentRuntimeError with that reason.

    Attributes:
        _latency_ms: Simulated latency per invocation in milliseconds.
        _invocations: (action, content) of every call, for testing.
    """

    def __init__(
        self,
        latency_ms: int = 0,
        categories: tuple[tuple[str, str], ...] = DEFAULT_CATEGORIES,
    ) -> None:
        """Initialize the stub runtime.

        Args:
            latency_ms: Simulated latency in milliseconds (default 0).
            categories: Keyword to classification table.
        """
        self._latency_ms = latency_ms
        self._categories = categories
        self._content_failures: dict[str, str] = {}
        self._action_failures: dict[AgentActionType, str] = {}
        self._invocations: list[tuple[AgentActionType, str]] = []

        logger.warning(
            "agent_runtime_stub_active",
            message="Using stub agent runtime - NOT FOR PRODUCTION",
            latency_ms=latency_ms,
        )

    async def invoke(
        self,
        content: str,
        action_type: AgentActionType,
        agent_config: AgentConfig,
    ) -> AgentRuntimeResponse:
        """Stub: classify, summarize or draft a response deterministically.

        Raises:
            AgentRuntimeError: If a failure is configured for this call.
        """
        self._invocations.append((action_type, content))
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000.0)

        reason = self._failure_for(content, action_type)
        if reason == FAILURE_TIMEOUT:
            await asyncio.sleep(3600)
        elif reason == FAILURE_MALFORMED:
            return AgentRuntimeResponse()
        elif reason is not None:
            raise AgentRuntimeError(
                f"Stub: {action_type.value} configured to fail", reason=reason
            )

        if action_type is AgentActionType.CLASSIFICATION:
            classification, confidence = self._classify(content)
            return AgentRuntimeResponse(
                classification=classification, confidence=confidence
            )
        if action_type is AgentActionType.SUMMARIZATION:
            first_line = content.splitlines()[0] if content else ""
            return AgentRuntimeResponse(summary=f"{DEV_MODE_WATERMARK}{first_line}"[:200])
        if action_type is AgentActionType.RESPONSE_GENERATION:
            classification, _ = self._classify(content)
            return AgentRuntimeResponse(
                response_text=(
                    f"{DEV_MODE_WATERMARK}Your request has been registered and "
                    f"forwarded to the {classification} department."
                )
            )
        raise AgentRuntimeError(
            f"Stub: unsupported action {action_type.value}", reason="unsupported_action"
        )

    def _classify(self, content: str) -> tuple[str, float]:
        folded = content.casefold()
        for keyword, classification in self._categories:
            if keyword in folded:
                return classification, 0.9
        return DEFAULT_CLASSIFICATION, 0.5

    def _failure_for(self, content: str, action_type: AgentActionType) -> str | None:
        for marker, reason in self._content_failures.items():
            if marker in content:
                return reason
        return self._action_failures.get(action_type)

    # Test helper methods

    def set_failure(self, marker: str, reason: str) -> None:
        """Test helper: Fail every call whose content contains `marker`."""
        self._content_failures[marker] = reason

    def set_action_failure(self, action_type: AgentActionType, reason: str) -> None:
        """Test helper: Fail every call of one action."""
        self._action_failures[action_type] = reason

    def clear_failures(self) -> None:
        """Test helper: Remove all configured failures."""
        self._content_failures.clear()
        self._action_failures.clear()

    def get_invocation_count(self) -> int:
        """Test helper: Number of invoke() calls so far."""
        return len(self._invocations)

    def get_invocations(self) -> list[tuple[AgentActionType, str]]:
        """Test helper: (action, content) of every call."""
        return list(self._invocations)
