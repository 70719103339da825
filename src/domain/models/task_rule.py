"""Task rule and routing decision domain models.

A TaskRule is a keyword-triggered policy mapping request content to a
department and, optionally, a position. Rules are immutable during a
routing evaluation; they are edited out-of-band and handed to the
routing engine as a snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

TASK_RULE_ENTITY_TYPE: str = "task_rule"


@dataclass(frozen=True, eq=True)
class TaskRule:
    """A keyword-triggered routing policy.

    Attributes:
        id: Integer identifier. Lower ids were created earlier.
        keywords: Case-insensitive substrings that trigger the rule.
        priority: Higher value wins when several rules match.
        department_id: Target department. None marks a malformed rule
            that routing skips with a warning.
        position_id: Target position within the department (optional).
        is_active: Inactive rules are never selected.
        name: Human-readable rule name (optional).
    """

    id: int
    keywords: frozenset[str]
    priority: int
    department_id: int | None
    position_id: int | None = field(default=None)
    is_active: bool = field(default=True)
    name: str = field(default="")

    def __post_init__(self) -> None:
        """Normalize keywords into a frozenset."""
        if not isinstance(self.keywords, frozenset):
            object.__setattr__(self, "keywords", frozenset(self.keywords))

    def matches(self, text: str) -> tuple[str, ...]:
        """Return the keywords of this rule found in `text`.

        Matching is a case-insensitive substring test. Blank keywords
        never match.

        Args:
            text: Text to search (subject + " " + description).

        Returns:
            Sorted tuple of matching keywords, empty if none match.
        """
        folded = text.casefold()
        return tuple(
            sorted(
                keyword
                for keyword in self.keywords
                if keyword.strip() and keyword.casefold() in folded
            )
        )


@dataclass(frozen=True, eq=True)
class RoutingDecision:
    """Outcome of routing one request against a rule set.

    An unassigned decision is an explicit result, not an error.

    Attributes:
        department_id: Chosen department, None when unassigned.
        position_id: Chosen position, None when not specified.
        rule_id: The rule that produced the decision, None when unassigned.
        matched_keywords: Keywords of the winning rule found in the text.
    """

    department_id: int | None
    position_id: int | None = None
    rule_id: int | None = None
    matched_keywords: tuple[str, ...] = ()

    @classmethod
    def unassigned(cls) -> RoutingDecision:
        """Create the explicit "no rule matched" decision."""
        return cls(department_id=None)

    @property
    def is_assigned(self) -> bool:
        """True when a rule matched and a department was chosen."""
        return self.department_id is not None


def freeze_rules(rules: Iterable[TaskRule]) -> tuple[TaskRule, ...]:
    """Take an immutable snapshot of a rule collection."""
    return tuple(rules)
