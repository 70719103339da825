"""Unit tests for single-request agent processing."""

import asyncio

import pytest

from src.application.ports.agent_runtime import AgentRuntimeResponse
from src.application.services.agent_dispatcher_service import (
    AgentDispatcherService,
    build_agent_content,
)
from src.bootstrap.pipeline import Pipeline
from src.config.pipeline_config import BatchProcessingConfig
from src.domain.errors.agent import AgentProcessingError
from src.domain.errors.validation import (
    AgentInactiveError,
    AgentNotFoundError,
    CitizenRequestNotFoundError,
    ValidationError,
)
from src.domain.models.activity import ActivityType
from src.domain.models.agent import AgentActionType, AgentRoster
from src.domain.models.citizen_request import CitizenRequest, RequestStatus
from src.infrastructure.stubs import AgentRuntimeStub


async def _create(pipeline: Pipeline, subject: str = "No water in building 5"):
    return await pipeline.lifecycle.create(
        subject,
        "Since yesterday there is no cold water on all floors.",
        full_name="Jane Citizen",
        contact_info="jane@example.org",
    )


class TestBuildAgentContent:
    """Tests for the content layout handed to the runtime."""

    def test_layout(self) -> None:
        request = CitizenRequest(
            id=1,
            subject="Pothole",
            description="Deep hole near the school",
            full_name="Jane Citizen",
            contact_info="+1 555 0100",
        )
        assert build_agent_content(request) == (
            "Subject: Pothole\n\n"
            "Description:\nDeep hole near the school\n\n"
            "Contact information:\n"
            "Full name: Jane Citizen\n"
            "Contacts: +1 555 0100"
        )

    def test_missing_contact_details_are_blank(self) -> None:
        request = CitizenRequest(id=1, subject="Pothole", description="")
        content = build_agent_content(request)
        assert content.endswith("Full name: \nContacts: ")


class TestProcessRequest:
    """Tests for process_request."""

    @pytest.mark.asyncio
    async def test_classification_claims_request(
        self, pipeline: Pipeline, roster: AgentRoster
    ) -> None:
        request = await _create(pipeline)

        outcome = await pipeline.dispatcher.process_request(
            request.id, 1, "classification", roster
        )

        assert not outcome.skipped
        assert outcome.actions == (AgentActionType.CLASSIFICATION,)
        stored = await pipeline.lifecycle.get(request.id)
        assert stored.status is RequestStatus.IN_PROGRESS
        assert stored.ai_processed is True
        assert stored.ai_classification == "utilities"
        assert outcome.request == stored

    @pytest.mark.asyncio
    async def test_writes_results_and_two_activities(
        self, pipeline: Pipeline, roster: AgentRoster
    ) -> None:
        """One entity_update diff and one ai_process per call."""
        request = await _create(pipeline)
        before = len(pipeline.activities.get_all())

        outcome = await pipeline.dispatcher.process_request(
            request.id, 1, AgentActionType.CLASSIFICATION, roster
        )

        new = pipeline.activities.get_all()[before:]
        kinds = [a.action_type for a in new if a.action_type is not ActivityType.BLOCKCHAIN_RECORD]
        assert kinds == [ActivityType.ENTITY_UPDATE, ActivityType.AI_PROCESS]

        update = new[0]
        assert {c["field"] for c in update.metadata["changes"]} == {
            "status",
            "aiProcessed",
            "aiClassification",
        }

        ai_process = pipeline.activities.of_type(ActivityType.AI_PROCESS)[0]
        assert ai_process.metadata["classification"] == "utilities"
        assert ai_process.metadata["confidence"] == 0.9
        assert ai_process.metadata["agentResultIds"] == [
            str(rid) for rid in outcome.agent_result_ids
        ]

        (result,) = await pipeline.dispatcher.list_results(request.id)
        assert result.agent_id == 1
        assert result.action_type is AgentActionType.CLASSIFICATION
        assert dict(result.result) == {"classification": "utilities", "confidence": 0.9}

    @pytest.mark.asyncio
    async def test_full_runs_every_action(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)

        outcome = await pipeline.dispatcher.process_request(
            request.id, 1, "full", roster
        )

        assert outcome.actions == (
            AgentActionType.CLASSIFICATION,
            AgentActionType.SUMMARIZATION,
            AgentActionType.RESPONSE_GENERATION,
        )
        assert runtime.get_invocation_count() == 3
        results = await pipeline.dispatcher.list_results(request.id)
        assert [r.action_type for r in results] == list(outcome.actions)

        stored = await pipeline.lifecycle.get(request.id)
        assert stored.summary.startswith("[DEV MODE] Subject: No water")
        assert "utilities department" in stored.ai_suggestion
        assert len(pipeline.activities.of_type(ActivityType.ENTITY_UPDATE)) == 1
        assert len(pipeline.activities.of_type(ActivityType.AI_PROCESS)) == 1

    @pytest.mark.asyncio
    async def test_runtime_receives_laid_out_content(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)

        await pipeline.dispatcher.process_request(request.id, 1, "classification", roster)

        ((action, content),) = runtime.get_invocations()
        assert action is AgentActionType.CLASSIFICATION
        assert content == build_agent_content(request)

    @pytest.mark.asyncio
    async def test_already_processed_is_skipped(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)
        await pipeline.dispatcher.process_request(request.id, 1, "classification", roster)
        activity_count = len(pipeline.activities.get_all())

        outcome = await pipeline.dispatcher.process_request(
            request.id, 1, "classification", roster
        )

        assert outcome.skipped
        assert outcome.agent_result_ids == ()
        assert runtime.get_invocation_count() == 1
        assert len(pipeline.activities.get_all()) == activity_count

    @pytest.mark.asyncio
    async def test_concurrent_calls_process_once(
        self, pipeline: Pipeline, roster: AgentRoster
    ) -> None:
        """Two overlapping calls on one request run the agent once."""
        slow_runtime = AgentRuntimeStub(latency_ms=10)
        dispatcher = AgentDispatcherService(
            pipeline.lifecycle,
            pipeline.recorder,
            pipeline.agent_results,
            slow_runtime,
            config=BatchProcessingConfig(max_concurrency=2, agent_timeout_seconds=1.0),
        )
        request = await _create(pipeline)

        outcomes = await asyncio.gather(
            dispatcher.process_request(request.id, 1, "full", roster),
            dispatcher.process_request(request.id, 1, "full", roster),
        )

        assert sorted(outcome.skipped for outcome in outcomes) == [False, True]
        assert slow_runtime.get_invocation_count() == 3
        assert len(await dispatcher.list_results(request.id)) == 3
        assert len(pipeline.activities.of_type(ActivityType.AI_PROCESS)) == 1
        assert len(pipeline.activities.of_type(ActivityType.ENTITY_UPDATE)) == 1

    @pytest.mark.asyncio
    async def test_force_reprocess(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        """Reprocessing an in-progress request keeps its status."""
        request = await _create(pipeline)
        await pipeline.dispatcher.process_request(request.id, 1, "classification", roster)

        outcome = await pipeline.dispatcher.process_request(
            request.id, 1, "summarization", roster, force_reprocess=True
        )

        assert not outcome.skipped
        assert runtime.get_invocation_count() == 2
        stored = await pipeline.lifecycle.get(request.id)
        assert stored.status is RequestStatus.IN_PROGRESS
        assert stored.summary is not None
        assert len(await pipeline.dispatcher.list_results(request.id)) == 2

    @pytest.mark.asyncio
    async def test_completed_request_is_not_reopened(
        self, pipeline: Pipeline, roster: AgentRoster
    ) -> None:
        """Agent processing never reopens a soft-terminal request."""
        request = await _create(pipeline)
        await pipeline.lifecycle.transition(request.id, RequestStatus.IN_PROGRESS)
        await pipeline.lifecycle.transition(request.id, RequestStatus.COMPLETED)

        await pipeline.dispatcher.process_request(request.id, 1, "classification", roster)

        stored = await pipeline.lifecycle.get(request.id)
        assert stored.status is RequestStatus.COMPLETED
        assert stored.ai_processed is True


class TestValidation:
    """Validation errors are raised before any side effect."""

    @pytest.mark.asyncio
    async def test_unknown_action(self, pipeline: Pipeline, roster: AgentRoster) -> None:
        request = await _create(pipeline)
        with pytest.raises(ValidationError):
            await pipeline.dispatcher.process_request(request.id, 1, "translate", roster)

    @pytest.mark.asyncio
    async def test_unknown_agent(self, pipeline: Pipeline, roster: AgentRoster) -> None:
        request = await _create(pipeline)
        with pytest.raises(AgentNotFoundError):
            await pipeline.dispatcher.process_request(
                request.id, 99, "classification", roster
            )

    @pytest.mark.asyncio
    async def test_inactive_agent(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)
        with pytest.raises(AgentInactiveError):
            await pipeline.dispatcher.process_request(
                request.id, 2, "classification", roster
            )
        assert runtime.get_invocation_count() == 0

    @pytest.mark.asyncio
    async def test_unsupported_action(
        self, pipeline: Pipeline, roster: AgentRoster
    ) -> None:
        request = await _create(pipeline)
        with pytest.raises(ValidationError):
            await pipeline.dispatcher.process_request(request.id, 3, "full", roster)

    @pytest.mark.asyncio
    async def test_unknown_request(self, pipeline: Pipeline, roster: AgentRoster) -> None:
        with pytest.raises(CitizenRequestNotFoundError):
            await pipeline.dispatcher.process_request(404, 1, "classification", roster)

    @pytest.mark.asyncio
    async def test_deleted_request(self, pipeline: Pipeline, roster: AgentRoster) -> None:
        request = await _create(pipeline)
        await pipeline.lifecycle.delete(request.id)
        with pytest.raises(ValidationError):
            await pipeline.dispatcher.process_request(
                request.id, 1, "classification", roster
            )


class TestRuntimeFailures:
    """Agent Runtime failures leave the request untouched."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["timeout", "malformed_output", "rate_limit"])
    async def test_failure_is_recorded_and_raised(
        self,
        pipeline: Pipeline,
        roster: AgentRoster,
        runtime: AgentRuntimeStub,
        reason: str,
    ) -> None:
        request = await _create(pipeline)
        runtime.set_action_failure(AgentActionType.CLASSIFICATION, reason)

        with pytest.raises(AgentProcessingError) as exc_info:
            await pipeline.dispatcher.process_request(
                request.id, 1, "classification", roster
            )

        assert exc_info.value.reason == reason
        assert exc_info.value.request_id == request.id
        assert await pipeline.lifecycle.get(request.id) == request
        assert await pipeline.dispatcher.list_results(request.id) == []
        (failed,) = pipeline.activities.of_type(ActivityType.AI_PROCESS_FAILED)
        assert failed.metadata["reason"] == reason
        assert failed.metadata["failedAction"] == "classification"
        assert pipeline.activities.of_type(ActivityType.ENTITY_UPDATE) == []

    @pytest.mark.asyncio
    async def test_late_failure_in_full_persists_nothing(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        """A failing later action discards the earlier outputs."""
        request = await _create(pipeline)
        runtime.set_action_failure(AgentActionType.RESPONSE_GENERATION, "rate_limit")

        with pytest.raises(AgentProcessingError):
            await pipeline.dispatcher.process_request(request.id, 1, "full", roster)

        assert runtime.get_invocation_count() == 3
        assert await pipeline.lifecycle.get(request.id) == request
        assert await pipeline.dispatcher.list_results(request.id) == []

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_runtime_error(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)

        async def explode(*args, **kwargs):
            raise RuntimeError("socket closed")

        runtime.invoke = explode

        with pytest.raises(AgentProcessingError) as exc_info:
            await pipeline.dispatcher.process_request(
                request.id, 1, "classification", roster
            )
        assert exc_info.value.reason == "runtime_error"
        assert "socket closed" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_out_of_range_confidence_is_malformed(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)

        async def overconfident(*args, **kwargs):
            return AgentRuntimeResponse(classification="utilities", confidence=1.5)

        runtime.invoke = overconfident

        with pytest.raises(AgentProcessingError) as exc_info:
            await pipeline.dispatcher.process_request(
                request.id, 1, "classification", roster
            )
        assert exc_info.value.reason == "malformed_output"

    @pytest.mark.asyncio
    async def test_failures_are_not_retried(
        self, pipeline: Pipeline, roster: AgentRoster, runtime: AgentRuntimeStub
    ) -> None:
        request = await _create(pipeline)
        runtime.set_action_failure(AgentActionType.CLASSIFICATION, "rate_limit")

        with pytest.raises(AgentProcessingError):
            await pipeline.dispatcher.process_request(
                request.id, 1, "classification", roster
            )
        assert runtime.get_invocation_count() == 1
