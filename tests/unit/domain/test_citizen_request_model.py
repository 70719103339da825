"""Unit tests for the CitizenRequest model and lifecycle state machine."""

from datetime import datetime, timezone

import pytest

from src.domain.errors.state_transition import InvalidTransitionError
from src.domain.errors.validation import ValidationError
from src.domain.models.citizen_request import (
    CLAIMABLE_STATES,
    STATE_TRANSITION_MATRIX,
    CitizenRequest,
    FieldChange,
    RequestStatus,
)


def _request(**overrides) -> CitizenRequest:
    values = {
        "id": 7,
        "subject": "Pothole on Main street",
        "description": "There is a deep pothole near house 12.",
        "full_name": "Jane Citizen",
        "contact_info": "jane@example.org",
    }
    values.update(overrides)
    return CitizenRequest(**values)


class TestRequestStatus:
    """Tests for the lifecycle state enumeration."""

    def test_serialized_values_are_stable(self) -> None:
        """Consumers rely on the snake_case status values."""
        assert [s.value for s in RequestStatus] == [
            "new",
            "assigned",
            "in_progress",
            "waiting_info",
            "completed",
            "requires_attention",
            "deleted",
        ]

    def test_deleted_is_terminal(self) -> None:
        """DELETED has no outgoing transitions."""
        assert RequestStatus.DELETED.is_terminal()
        assert RequestStatus.DELETED.valid_transitions() == frozenset()

    def test_soft_terminal_states(self) -> None:
        """COMPLETED and REQUIRES_ATTENTION only leave via reopen or delete."""
        assert RequestStatus.COMPLETED.is_soft_terminal()
        assert RequestStatus.REQUIRES_ATTENTION.is_soft_terminal()
        assert not RequestStatus.IN_PROGRESS.is_soft_terminal()
        for state in (RequestStatus.COMPLETED, RequestStatus.REQUIRES_ATTENTION):
            assert state.valid_transitions() == {
                RequestStatus.IN_PROGRESS,
                RequestStatus.DELETED,
            }

    def test_every_live_state_can_be_deleted(self) -> None:
        """Any state except DELETED may be tombstoned."""
        for state, targets in STATE_TRANSITION_MATRIX.items():
            if state is not RequestStatus.DELETED:
                assert RequestStatus.DELETED in targets

    def test_claimable_states(self) -> None:
        """The dispatcher only claims NEW and ASSIGNED requests."""
        assert CLAIMABLE_STATES == {RequestStatus.NEW, RequestStatus.ASSIGNED}


class TestCitizenRequestValidation:
    """Tests for field validation on construction."""

    def test_defaults(self) -> None:
        """A new request starts NEW, medium priority, unprocessed."""
        request = _request()
        assert request.status is RequestStatus.NEW
        assert request.priority == "medium"
        assert request.ai_processed is False
        assert request.assigned_department_id is None

    def test_unknown_priority_rejected(self) -> None:
        """Priority must be one of the known values."""
        with pytest.raises(ValidationError) as exc_info:
            _request(priority="critical")
        assert exc_info.value.field == "priority"

    def test_blank_subject_and_description_rejected(self) -> None:
        """At least one of subject or description must carry text."""
        with pytest.raises(ValidationError):
            _request(subject="  ", description="")

    def test_subject_only_is_accepted(self) -> None:
        """An empty description is fine when a subject is present."""
        assert _request(description="").subject

    def test_subject_length_limit(self) -> None:
        """Overlong subjects are rejected."""
        with pytest.raises(ValidationError):
            _request(subject="x" * 501)

    def test_status_must_be_enum(self) -> None:
        """Raw strings are not accepted as status."""
        with pytest.raises(ValidationError):
            _request(status="new")


class TestWithStatus:
    """Tests for status transitions."""

    def test_valid_transition(self) -> None:
        """NEW -> ASSIGNED is allowed and produces a new instance."""
        request = _request()
        assigned = request.with_status(RequestStatus.ASSIGNED)
        assert assigned.status is RequestStatus.ASSIGNED
        assert request.status is RequestStatus.NEW

    def test_same_status_is_noop(self) -> None:
        """Moving to the current state returns the same instance."""
        request = _request()
        assert request.with_status(RequestStatus.NEW) is request

    @pytest.mark.parametrize(
        ("from_state", "to_state"),
        [
            (RequestStatus.NEW, RequestStatus.COMPLETED),
            (RequestStatus.ASSIGNED, RequestStatus.NEW),
            (RequestStatus.WAITING_INFO, RequestStatus.COMPLETED),
            (RequestStatus.COMPLETED, RequestStatus.ASSIGNED),
            (RequestStatus.DELETED, RequestStatus.NEW),
        ],
    )
    def test_invalid_transitions_raise(
        self, from_state: RequestStatus, to_state: RequestStatus
    ) -> None:
        """Transitions outside the matrix raise InvalidTransitionError."""
        request = _request(status=from_state)
        with pytest.raises(InvalidTransitionError) as exc_info:
            request.with_status(to_state)
        assert exc_info.value.from_state is from_state
        assert exc_info.value.to_state is to_state
        assert request.status is from_state

    def test_error_lists_allowed_transitions(self) -> None:
        """The error message names the valid targets."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            _request().with_status(RequestStatus.COMPLETED)
        assert "assigned" in str(exc_info.value)


class TestWithChangesAndDiff:
    """Tests for field edits and diffs."""

    def test_with_changes_rejects_status(self) -> None:
        """Status goes through with_status only."""
        with pytest.raises(ValidationError):
            _request().with_changes(status=RequestStatus.ASSIGNED)

    def test_with_changes_rejects_immutable_fields(self) -> None:
        """id and created_at cannot be edited."""
        with pytest.raises(ValidationError):
            _request().with_changes(id=8)

    def test_with_changes_identical_values_is_noop(self) -> None:
        """Setting fields to their current values returns self."""
        request = _request()
        assert request.with_changes(priority="medium") is request

    def test_diff_lists_only_changed_fields(self) -> None:
        """The diff carries changed fields in declaration order."""
        request = _request()
        updated = request.with_status(RequestStatus.IN_PROGRESS).with_changes(
            ai_processed=True, ai_classification="infrastructure"
        )

        changes = request.diff(updated)

        assert [c.field for c in changes] == [
            "status",
            "ai_processed",
            "ai_classification",
        ]
        assert changes[0] == FieldChange(
            "status", RequestStatus.NEW, RequestStatus.IN_PROGRESS
        )

    def test_diff_ignores_updated_at(self) -> None:
        """Bookkeeping timestamps are not part of the diff."""
        request = _request()
        touched = _request(updated_at=datetime(2030, 1, 1, tzinfo=timezone.utc))
        assert request.diff(touched) == ()

    def test_field_change_serializes_consumer_names(self) -> None:
        """FieldChange.to_dict uses the camelCase consumer names."""
        change = FieldChange("ai_processed", False, True)
        assert change.to_dict() == {"field": "aiProcessed", "old": False, "new": True}


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_consumer_field_names(self) -> None:
        """The stable consumer keys are present."""
        data = _request().to_dict()
        for key in ("status", "aiProcessed", "aiClassification", "aiSuggestion"):
            assert key in data
        assert data["status"] == "new"

    def test_round_trip(self) -> None:
        """from_dict(to_dict()) rebuilds an equal request."""
        request = _request(status=RequestStatus.ASSIGNED, assigned_department_id=3)
        assert CitizenRequest.from_dict(request.to_dict()) == request

    def test_from_dict_rejects_unknown_keys(self) -> None:
        """Unknown keys raise ValidationError."""
        data = _request().to_dict()
        data["unexpected"] = 1
        with pytest.raises(ValidationError):
            CitizenRequest.from_dict(data)
