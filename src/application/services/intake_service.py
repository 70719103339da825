"""Intake service.

Entry point for new citizen correspondence: creates the request, routes
it against a task rule snapshot and applies the assignment.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from src.application.ports.task_rule_repository import TaskRuleRepositoryProtocol
from src.application.services.base import LoggingMixin
from src.application.services.lifecycle_service import LifecycleService
from src.domain.errors.routing import RuleEvaluationWarning
from src.domain.models.citizen_request import CitizenRequest
from src.domain.models.org_structure import OrgStructure
from src.domain.models.task_rule import RoutingDecision
from src.domain.services.routing_engine import route


@dataclass(frozen=True)
class IntakeResult:
    """A submitted request and the routing decision applied to it.

    Attributes:
        request: Request snapshot after routing.
        decision: The routing decision (possibly unassigned).
        warnings: Rule evaluation warnings raised while routing.
    """

    request: CitizenRequest
    decision: RoutingDecision
    warnings: tuple[RuleEvaluationWarning, ...] = ()


class IntakeService(LoggingMixin):
    """Create, route and assign incoming citizen requests."""

    def __init__(
        self,
        lifecycle: LifecycleService,
        task_rules: TaskRuleRepositoryProtocol,
        org_structure: OrgStructure | None = None,
    ) -> None:
        """Initialize the intake service.

        Args:
            lifecycle: Writer of citizen requests.
            task_rules: Source of the routing rule snapshot.
            org_structure: Optional org hierarchy; decisions targeting
                unknown departments or positions are dropped.
        """
        self._lifecycle = lifecycle
        self._task_rules = task_rules
        self._org_structure = org_structure
        self._init_logger(component="intake")

    async def submit_request(
        self,
        subject: str,
        description: str,
        *,
        priority: str = "medium",
        full_name: str | None = None,
        contact_info: str | None = None,
    ) -> IntakeResult:
        """Create a request and route it.

        Raises:
            ValidationError: If the request fields are invalid.
        """
        request = await self._lifecycle.create(
            subject,
            description,
            priority=priority,
            full_name=full_name,
            contact_info=contact_info,
        )
        return await self.route_request(request.id)

    async def route_request(self, request_id: int) -> IntakeResult:
        """Route an existing request against the current rule snapshot."""
        log = self._log_operation("route_request", request_id=request_id)
        request = await self._lifecycle.get(request_id)
        rules = await self._task_rules.snapshot()

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", RuleEvaluationWarning)
            decision = route(request, rules)
        rule_warnings = tuple(
            w.message for w in caught if isinstance(w.message, RuleEvaluationWarning)
        )

        if (
            decision.is_assigned
            and self._org_structure is not None
            and not self._org_structure.resolves(decision)
        ):
            log.warning(
                "routing_target_unknown",
                rule_id=decision.rule_id,
                department_id=decision.department_id,
                position_id=decision.position_id,
            )
            decision = RoutingDecision.unassigned()

        if decision.is_assigned:
            request = await self._lifecycle.apply_routing(request_id, decision)
            log.info(
                "request_routed",
                rule_id=decision.rule_id,
                department_id=decision.department_id,
                position_id=decision.position_id,
                matched_keywords=list(decision.matched_keywords),
            )
        else:
            log.info("request_unassigned", skipped_rules=len(rule_warnings))

        return IntakeResult(request=request, decision=decision, warnings=rule_warnings)
