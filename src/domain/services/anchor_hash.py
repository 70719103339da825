"""Deterministic anchor hashing for ledger-sensitive activities.

The anchor hash covers exactly the fields that make an activity
meaningful to an outside verifier:
- entityType
- entityId
- action
- metadata (canonical JSON)
- timestamp (ISO 8601)

The activity id is deliberately not part of the hash: two independent
recorders writing the same change at the same instant produce the same
anchor.
"""

from __future__ import annotations

import hashlib
import json
import math
import unicodedata
from datetime import datetime
from typing import Any

from src.domain.models.activity import Activity


def _sanitize_for_json(data: Any) -> Any:
    """Recursively sanitize data for deterministic JSON serialization.

    - Normalizes Unicode strings using NFKC form
    - Rejects NaN, Infinity, and -Infinity float values
    - Converts tuples to lists

    Raises:
        ValueError: If data contains non-finite floats.
    """
    if isinstance(data, str):
        return unicodedata.normalize("NFKC", data)
    elif isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(
                f"Cannot serialize non-finite float value: {data!r}. "
                "NaN and Infinity are not valid JSON."
            )
        return data
    elif isinstance(data, dict):
        return {_sanitize_for_json(k): _sanitize_for_json(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [_sanitize_for_json(item) for item in data]
    else:
        return data


def canonical_json(data: Any) -> str:
    """Produce deterministic JSON representation for hashing.

    Keys are sorted recursively, separators are compact, non-ASCII is kept
    as-is after NFKC normalization.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        _sanitize_for_json(data),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_anchor_hash(
    entity_type: str,
    entity_id: int | None,
    action: str,
    metadata: dict[str, Any],
    timestamp: datetime,
) -> str:
    """Compute the SHA-256 anchor hash.

    Args:
        entity_type: Type of the entity the activity describes.
        entity_id: Id of that entity (None for batch-level activities).
        action: Activity type value.
        metadata: Activity metadata.
        timestamp: Activity timestamp.

    Returns:
        Lowercase hexadecimal SHA-256 hash (64 characters).
    """
    hashable: dict[str, Any] = {
        "entityType": entity_type,
        "entityId": entity_id,
        "action": action,
        "metadata": metadata,
        "timestamp": timestamp.isoformat(),
    }
    canonical = canonical_json(hashable)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_activity_anchor_hash(activity: Activity) -> str:
    """Compute the anchor hash of a recorded activity."""
    return compute_anchor_hash(
        entity_type=activity.related_type,
        entity_id=activity.related_id,
        action=activity.action_type.value,
        metadata=activity.metadata,
        timestamp=activity.timestamp,
    )
