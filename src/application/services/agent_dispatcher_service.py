"""Agent Dispatcher service.

Runs AI agents on citizen requests, one request at a time or as a
batch over a bounded worker pool.

Processing one request:
1. Validate the agent against the roster snapshot and the action type
2. Skip requests already processed (unless force_reprocess)
3. Invoke every concrete action; any failure records ai_process_failed,
   leaves the request unmodified and raises AgentProcessingError
4. Apply the AI fields and claim the request (NEW/ASSIGNED -> IN_PROGRESS)
   through the lifecycle service: one entity_update activity
5. Persist one AgentResult per concrete action
6. Record one ai_process activity

Steps 2-6 run under the request's write lock, so concurrent calls on one
request process it once.

Batch processing folds per-item outcomes, in input order, into a
BatchReport and records one ai_process_report activity. Agent Runtime
failures are never retried automatically.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID, uuid4

from src.application.observability.correlation import ensure_correlation_id
from src.application.ports.agent_result_repository import (
    AgentResultRepositoryProtocol,
)
from src.application.ports.agent_runtime import (
    AgentRuntimeProtocol,
    AgentRuntimeResponse,
)
from src.application.ports.pipeline_metrics import PipelineMetricsPort
from src.application.services.audit_trail_service import AuditTrailRecorder
from src.application.services.base import LoggingMixin, error_context
from src.application.services.lifecycle_service import LifecycleService
from src.config.pipeline_config import (
    DEFAULT_BATCH_PROCESSING_CONFIG,
    BatchProcessingConfig,
)
from src.domain.errors.agent import (
    AgentProcessingError,
    AgentRuntimeError,
    MalformedAgentOutputError,
)
from src.domain.errors.state_transition import InvalidTransitionError
from src.domain.errors.validation import (
    AgentInactiveError,
    AgentNotFoundError,
    ValidationError,
)
from src.domain.models.activity import (
    BATCH_ENTITY_TYPE,
    AiProcessFailedPayload,
    AiProcessPayload,
    AiProcessReportPayload,
)
from src.domain.models.agent import (
    Agent,
    AgentActionType,
    AgentResult,
    AgentRoster,
)
from src.domain.models.batch_report import (
    BatchItemFailure,
    BatchItemOutcome,
    BatchItemSkipped,
    BatchItemSuccess,
    BatchOptions,
    BatchReport,
)
from src.domain.models.citizen_request import (
    CITIZEN_REQUEST_ENTITY_TYPE,
    CLAIMABLE_STATES,
    CitizenRequest,
    RequestStatus,
)

# Errors that fail one batch item without aborting the batch
ITEM_ERRORS: tuple[type[Exception], ...] = (
    AgentProcessingError,
    InvalidTransitionError,
    ValidationError,
)


@dataclass(frozen=True)
class ProcessingOutcome:
    """Result of processing one request.

    Attributes:
        request_id: The processed request.
        skipped: True when the request was already processed.
        actions: Concrete actions that ran (empty when skipped).
        agent_result_ids: AgentResult rows written (empty when skipped).
        request: Request snapshot after processing.
    """

    request_id: int
    skipped: bool
    actions: tuple[AgentActionType, ...] = ()
    agent_result_ids: tuple[UUID, ...] = ()
    request: CitizenRequest | None = None

    def to_batch_outcome(self) -> BatchItemOutcome:
        if self.skipped:
            return BatchItemSkipped(request_id=self.request_id)
        return BatchItemSuccess(
            request_id=self.request_id,
            actions=tuple(action.value for action in self.actions),
        )


def build_agent_content(request: CitizenRequest) -> str:
    """Lay out request content for the Agent Runtime."""
    return (
        f"Subject: {request.subject}\n"
        "\n"
        "Description:\n"
        f"{request.description}\n"
        "\n"
        "Contact information:\n"
        f"Full name: {request.full_name or ''}\n"
        f"Contacts: {request.contact_info or ''}"
    )


def _validate_response(
    action: AgentActionType, response: AgentRuntimeResponse
) -> None:
    """Reject output that does not carry what the action promises.

    Raises:
        MalformedAgentOutputError: If required output is missing or invalid.
    """
    if not isinstance(response, AgentRuntimeResponse):
        raise MalformedAgentOutputError(
            f"expected AgentRuntimeResponse, got {type(response).__name__}"
        )
    if action is AgentActionType.CLASSIFICATION and not response.classification:
        raise MalformedAgentOutputError("classification missing from agent output")
    if action is AgentActionType.SUMMARIZATION and not response.summary:
        raise MalformedAgentOutputError("summary missing from agent output")
    if action is AgentActionType.RESPONSE_GENERATION and not response.response_text:
        raise MalformedAgentOutputError("response text missing from agent output")
    if response.confidence is not None and not 0.0 <= response.confidence <= 1.0:
        raise MalformedAgentOutputError(
            f"confidence out of range: {response.confidence}"
        )


class AgentDispatcherService(LoggingMixin):
    """Single and batch agent processing of citizen requests."""

    def __init__(
        self,
        lifecycle: LifecycleService,
        recorder: AuditTrailRecorder,
        agent_results: AgentResultRepositoryProtocol,
        runtime: AgentRuntimeProtocol,
        config: BatchProcessingConfig = DEFAULT_BATCH_PROCESSING_CONFIG,
        metrics: PipelineMetricsPort | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            lifecycle: Writer of citizen requests.
            recorder: Audit trail recorder.
            agent_results: Storage of agent outputs.
            runtime: Agent Runtime adapter.
            config: Worker pool size and agent timeout.
            metrics: Optional metrics collaborator.
        """
        self._lifecycle = lifecycle
        self._recorder = recorder
        self._agent_results = agent_results
        self._runtime = runtime
        self._config = config
        self._metrics = metrics
        self._init_logger(component="dispatcher")

    async def process_request(
        self,
        request_id: int,
        agent_id: int,
        action_type: str | AgentActionType,
        agents: AgentRoster,
        *,
        force_reprocess: bool = False,
    ) -> ProcessingOutcome:
        """Process one request with one agent.

        Args:
            request_id: The request to process.
            agent_id: The agent to use.
            action_type: classification, summarization,
                response_generation or full.
            agents: Agent roster snapshot.
            force_reprocess: Process even if already ai_processed.

        Returns:
            The processing outcome; `skipped` when already processed.

        Raises:
            ValidationError: Unknown action, agent or request, or an
                inactive agent. Raised before any side effect.
            AgentProcessingError: If the Agent Runtime fails.
        """
        action = AgentActionType.parse(action_type)
        agent = self._resolve_agent(agent_id, agents, action.sub_actions())
        return await self._process(
            request_id, agent, action.sub_actions(), force_reprocess=force_reprocess
        )

    async def process_batch(
        self,
        request_ids: Sequence[int],
        agent_id: int,
        agents: AgentRoster,
        options: BatchOptions | None = None,
    ) -> BatchReport:
        """Process many requests with one agent.

        Each request is an isolated unit of work: its failure is reported
        in the batch results and the batch continues. Only audit or
        storage failures abort the batch; the abort is raised once every
        item has settled, so no item writes after the caller sees it.
        A request id listed twice is processed once and then skipped.

        Args:
            request_ids: Requests to process; results keep this order.
            agent_id: The agent to use.
            agents: Agent roster snapshot.
            options: Action selection and force_reprocess.

        Returns:
            The batch report.

        Raises:
            ValidationError: Unknown or inactive agent.
            AuditWriteError: If an activity cannot be recorded.
        """
        options = options or BatchOptions()
        actions = options.actions()
        agent = self._resolve_agent(agent_id, agents, actions)
        ensure_correlation_id()
        log = self._log_operation(
            "process_batch",
            agent_id=agent.id,
            batch_size=len(request_ids),
            actions=[action.value for action in actions],
        )
        log.info("batch_processing_started")

        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def run_one(request_id: int) -> BatchItemOutcome:
            async with semaphore:
                try:
                    outcome = await self._process(
                        request_id,
                        agent,
                        actions,
                        force_reprocess=options.force_reprocess,
                    )
                except ITEM_ERRORS as exc:
                    log.warning(
                        "batch_item_failed", request_id=request_id, **error_context(exc)
                    )
                    return BatchItemFailure(
                        request_id=request_id,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                return outcome.to_batch_outcome()

        settled = await asyncio.gather(
            *(run_one(rid) for rid in request_ids), return_exceptions=True
        )
        outcomes: list[BatchItemOutcome] = []
        for request_id, result in zip(request_ids, settled):
            if isinstance(result, BaseException):
                log.error(
                    "batch_processing_aborted",
                    request_id=request_id,
                    **error_context(result),
                )
                raise result
            outcomes.append(result)

        report = BatchReport.fold(
            outcomes, agent_id=agent.id, agent_name=agent.name, actions=actions
        )

        if self._metrics is not None:
            for outcome in outcomes:
                self._metrics.record_batch_item(_outcome_label(outcome))

        summary = report.summary
        await self._recorder.record(
            related_id=None,
            related_type=BATCH_ENTITY_TYPE,
            payload=AiProcessReportPayload(
                agent_id=agent.id,
                agent_name=agent.name,
                total=summary.total,
                processed=summary.processed,
                succeeded=summary.succeeded,
                failed=summary.failed,
                actions=summary.actions,
            ),
            description=(
                f"Batch processed by {agent.name}: "
                f"{summary.succeeded} succeeded, {summary.failed} failed"
            ),
            timestamp=summary.time_stamp,
        )

        log.info(
            "batch_processing_completed",
            total=summary.total,
            processed=summary.processed,
            succeeded=summary.succeeded,
            failed=summary.failed,
            skipped=len(report.skipped),
        )
        return report

    async def list_results(self, request_id: int) -> list[AgentResult]:
        """Agent results recorded for a request, oldest first."""
        return await self._agent_results.list_for_entity(
            CITIZEN_REQUEST_ENTITY_TYPE, request_id
        )

    def _resolve_agent(
        self,
        agent_id: int,
        agents: AgentRoster,
        actions: Sequence[AgentActionType],
    ) -> Agent:
        agent = agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        if not agent.is_active:
            raise AgentInactiveError(agent_id)
        for action in actions:
            if not agent.config.supports(action):
                raise ValidationError(
                    f"Agent {agent_id} does not support {action.value}",
                    field="action_type",
                )
        return agent

    async def _process(
        self,
        request_id: int,
        agent: Agent,
        actions: Sequence[AgentActionType],
        *,
        force_reprocess: bool,
    ) -> ProcessingOutcome:
        log = self._log_operation(
            "process_request", request_id=request_id, agent_id=agent.id
        )
        # ai_processed is only trusted under the request's write lock
        async with self._lifecycle.lock_for(request_id):
            request = await self._lifecycle.get(request_id)
            if request.status is RequestStatus.DELETED:
                raise ValidationError(
                    f"Citizen request {request_id} is deleted", field="request_id"
                )
            if request.ai_processed and not force_reprocess:
                log.info("request_already_processed_skipped")
                return ProcessingOutcome(
                    request_id=request_id, skipped=True, request=request
                )

            content = build_agent_content(request)
            responses: list[tuple[AgentActionType, AgentRuntimeResponse]] = []
            for action in actions:
                response = await self._invoke(request_id, agent, action, content)
                responses.append((action, response))

            changes: dict[str, object] = {"ai_processed": True}
            classification: str | None = None
            confidence: float | None = None
            for action, response in responses:
                if action is AgentActionType.CLASSIFICATION:
                    classification = response.classification
                    confidence = response.confidence
                    changes["ai_classification"] = response.classification
                elif action is AgentActionType.SUMMARIZATION:
                    changes["summary"] = response.summary
                elif action is AgentActionType.RESPONSE_GENERATION:
                    changes["ai_suggestion"] = response.response_text

            updated = await self._lifecycle.apply_changes(
                request_id,
                changes,
                target_status=RequestStatus.IN_PROGRESS,
                only_from=CLAIMABLE_STATES,
                reason=f"processed by agent {agent.name}",
                lock_held=True,
            )

            results = tuple(
                AgentResult(
                    id=uuid4(),
                    agent_id=agent.id,
                    entity_id=request_id,
                    entity_type=CITIZEN_REQUEST_ENTITY_TYPE,
                    action_type=action,
                    result=response.to_dict(),
                )
                for action, response in responses
            )
            await self._agent_results.append_many(results)

            action_values = tuple(action.value for action in actions)
            await self._recorder.record(
                related_id=request_id,
                related_type=CITIZEN_REQUEST_ENTITY_TYPE,
                payload=AiProcessPayload(
                    agent_id=agent.id,
                    agent_name=agent.name,
                    actions=action_values,
                    agent_result_ids=tuple(result.id for result in results),
                    classification=classification,
                    confidence=confidence,
                ),
                description=f"Processed by {agent.name}: {', '.join(action_values)}",
            )

        log.info(
            "request_processed",
            actions=list(action_values),
            classification=classification,
            status=updated.status.value,
        )
        return ProcessingOutcome(
            request_id=request_id,
            skipped=False,
            actions=tuple(actions),
            agent_result_ids=tuple(result.id for result in results),
            request=updated,
        )

    async def _invoke(
        self,
        request_id: int,
        agent: Agent,
        action: AgentActionType,
        content: str,
    ) -> AgentRuntimeResponse:
        """Run one concrete action under the configured timeout.

        Raises:
            AgentProcessingError: After recording ai_process_failed.
        """
        log = self._log_operation(
            "invoke_agent",
            request_id=request_id,
            agent_id=agent.id,
            action_type=action.value,
        )
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._runtime.invoke(content, action, agent.config),
                timeout=self._config.agent_timeout_seconds,
            )
            _validate_response(action, response)
        except asyncio.TimeoutError:
            reason = "timeout"
            detail = f"no response within {self._config.agent_timeout_seconds}s"
        except AgentRuntimeError as exc:
            reason = exc.reason
            detail = str(exc)
        except Exception as exc:
            reason = "runtime_error"
            detail = f"{type(exc).__name__}: {exc}"
        else:
            self._observe(action, "success", started)
            log.debug("agent_invocation_succeeded")
            return response

        self._observe(action, reason, started)
        log.warning("agent_invocation_failed", reason=reason, detail=detail)
        await self._recorder.record(
            related_id=request_id,
            related_type=CITIZEN_REQUEST_ENTITY_TYPE,
            payload=AiProcessFailedPayload(
                agent_id=agent.id,
                failed_action=action.value,
                reason=reason,
                detail=detail,
            ),
            description=f"Agent {agent.name} failed {action.value}: {reason}",
        )
        raise AgentProcessingError(
            request_id=request_id,
            agent_id=agent.id,
            action_type=action.value,
            reason=reason,
            detail=detail,
        )

    def _observe(self, action: AgentActionType, outcome: str, started: float) -> None:
        if self._metrics is not None:
            self._metrics.record_agent_invocation(
                action.value, outcome, time.perf_counter() - started
            )


def _outcome_label(outcome: BatchItemOutcome) -> str:
    if isinstance(outcome, BatchItemSkipped):
        return "skipped"
    if isinstance(outcome, BatchItemSuccess):
        return "success"
    return "error"
