"""Reconstruct a citizen request from its audit history.

The audit trail is authoritative: folding a request's activities in
order must yield exactly the stored entity. Replay starts from the
entity_create snapshot and then applies every state-changing payload.
AI and ledger activities carry no entity state and are ignored.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from src.domain.errors.validation import ValidationError
from src.domain.models.activity import (
    Activity,
    EntityCreatePayload,
    EntityDeletePayload,
    EntityUpdatePayload,
    StatusChangePayload,
)
from src.domain.models.citizen_request import CitizenRequest, RequestStatus


def replay_history(activities: Iterable[Activity]) -> CitizenRequest | None:
    """Fold an ordered activity history into the request state it describes.

    Args:
        activities: Activities of one request, oldest first.

    Returns:
        The reconstructed request, or None if the history is empty.

    Raises:
        ValidationError: If state-changing activities precede the
            entity_create snapshot.
    """
    state: CitizenRequest | None = None

    for activity in activities:
        payload = activity.payload
        if isinstance(payload, EntityCreatePayload):
            state = CitizenRequest.from_dict(dict(payload.snapshot))
            continue
        if not isinstance(
            payload, (EntityUpdatePayload, EntityDeletePayload, StatusChangePayload)
        ):
            continue
        if state is None:
            raise ValidationError(
                f"Activity {activity.id} ({activity.action_type.value}) "
                "precedes the entity_create snapshot"
            )
        if isinstance(payload, EntityUpdatePayload):
            state = state.apply_field_changes(payload.changes, at=activity.timestamp)
        elif isinstance(payload, EntityDeletePayload):
            state = dataclasses.replace(
                state, status=RequestStatus.DELETED, updated_at=activity.timestamp
            )
        else:
            state = dataclasses.replace(
                state,
                status=RequestStatus(payload.to_status),
                updated_at=activity.timestamp,
            )

    return state
