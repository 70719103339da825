"""Routing warnings.

RuleEvaluationWarning is non-fatal: the offending rule is skipped and the
rest of the rule set is still evaluated.
"""

from __future__ import annotations


class RuleEvaluationWarning(UserWarning):
    """Emitted when a task rule cannot be evaluated (e.g. no department).

    Attributes:
        rule_id: The rule that was skipped.
    """

    def __init__(self, rule_id: int, reason: str) -> None:
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Task rule {rule_id} skipped: {reason}")
