"""Domain services for the correspondence pipeline.

Domain services contain business logic that doesn't naturally fit in
entities or value objects. They are pure: no I/O, no shared state.

Available services:
- route: Rule-based routing of a citizen request
- compute_anchor_hash: Deterministic SHA-256 anchor for ledger submission
- replay_history: Rebuild a request from its audit activities
"""

from src.domain.services.anchor_hash import (
    canonical_json,
    compute_activity_anchor_hash,
    compute_anchor_hash,
)
from src.domain.services.history_replay import replay_history
from src.domain.services.routing_engine import route

__all__ = [
    "canonical_json",
    "compute_activity_anchor_hash",
    "compute_anchor_hash",
    "replay_history",
    "route",
]
