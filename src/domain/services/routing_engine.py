"""Rule-based routing of citizen requests.

`route` is a pure function: it reads a request and an immutable rule
snapshot, and returns a RoutingDecision. It performs no I/O and touches
no shared state, so identical inputs always give identical decisions.

Algorithm:
1. Discard inactive rules.
2. Skip rules without a department, with a RuleEvaluationWarning.
3. A rule matches when any keyword is a case-insensitive substring of
   `subject + " " + description`.
4. Highest priority wins; ties go to the lowest rule id.
5. No match yields RoutingDecision.unassigned().
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable

import structlog

from src.domain.errors.routing import RuleEvaluationWarning
from src.domain.models.citizen_request import CitizenRequest
from src.domain.models.task_rule import RoutingDecision, TaskRule

logger = structlog.get_logger()


def route(request: CitizenRequest, rules: Iterable[TaskRule]) -> RoutingDecision:
    """Map a request to a department/position assignment.

    A malformed rule (no department) is skipped with a warning and never
    blocks evaluation of the remaining rules.

    Args:
        request: The request to route.
        rules: Snapshot of the task rules to evaluate.

    Returns:
        The winning rule's decision, or the explicit unassigned decision.
    """
    text = request.routing_text
    best: TaskRule | None = None
    best_keywords: tuple[str, ...] = ()

    for rule in rules:
        if not rule.is_active:
            continue
        if rule.department_id is None:
            warnings.warn(
                RuleEvaluationWarning(rule.id, "missing department"),
                stacklevel=2,
            )
            logger.warning(
                "task_rule_skipped",
                rule_id=rule.id,
                reason="missing_department",
                request_id=request.id,
            )
            continue
        matched = rule.matches(text)
        if not matched:
            continue
        if best is None or (rule.priority, -rule.id) > (best.priority, -best.id):
            best = rule
            best_keywords = matched

    if best is None:
        return RoutingDecision.unassigned()

    return RoutingDecision(
        department_id=best.department_id,
        position_id=best.position_id,
        rule_id=best.id,
        matched_keywords=best_keywords,
    )
