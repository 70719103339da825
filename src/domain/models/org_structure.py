"""Organizational hierarchy consumed read-only by routing.

Departments contain positions; employees occupy positions. The pipeline
only reads this structure, as an immutable OrgStructure snapshot, to check
that a routing decision points at a real unit.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.domain.models.task_rule import RoutingDecision


@dataclass(frozen=True, eq=True)
class Department:
    """An organizational unit.

    Attributes:
        id: Integer identifier.
        name: Display name.
        parent_id: Parent department, None for top-level units.
    """

    id: int
    name: str
    parent_id: int | None = None


@dataclass(frozen=True, eq=True)
class Position:
    """A position within a department."""

    id: int
    name: str
    department_id: int


@dataclass(frozen=True, eq=True)
class Employee:
    """A person occupying a position."""

    id: int
    full_name: str
    position_id: int
    department_id: int


@dataclass(frozen=True)
class OrgStructure:
    """Immutable snapshot of the organizational hierarchy."""

    departments: tuple[Department, ...] = field(default=())
    positions: tuple[Position, ...] = field(default=())
    employees: tuple[Employee, ...] = field(default=())

    @classmethod
    def of(
        cls,
        departments: Iterable[Department],
        positions: Iterable[Position] = (),
        employees: Iterable[Employee] = (),
    ) -> OrgStructure:
        """Create a snapshot from arbitrary iterables."""
        return cls(
            departments=tuple(departments),
            positions=tuple(positions),
            employees=tuple(employees),
        )

    def department(self, department_id: int) -> Department | None:
        """Look up a department by id."""
        return next((d for d in self.departments if d.id == department_id), None)

    def position(self, position_id: int) -> Position | None:
        """Look up a position by id."""
        return next((p for p in self.positions if p.id == position_id), None)

    def employees_in(self, position_id: int) -> tuple[Employee, ...]:
        """Employees currently holding a position."""
        return tuple(e for e in self.employees if e.position_id == position_id)

    def resolves(self, decision: RoutingDecision) -> bool:
        """Check that a decision targets an existing department/position pair.

        Unassigned decisions trivially resolve.
        """
        if decision.department_id is None:
            return True
        if self.department(decision.department_id) is None:
            return False
        if decision.position_id is None:
            return True
        position = self.position(decision.position_id)
        return position is not None and position.department_id == decision.department_id
