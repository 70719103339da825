"""Citizen request repository stub implementation.

In-memory implementation of CitizenRequestRepositoryProtocol for
development and testing.
"""

from __future__ import annotations

import itertools

from src.application.ports.citizen_request_repository import (
    CitizenRequestRepositoryProtocol,
)
from src.domain.models.citizen_request import CitizenRequest, RequestStatus


class CitizenRequestRepositoryStub(CitizenRequestRepositoryProtocol):
    """In-memory stub implementation of CitizenRequestRepositoryProtocol.

    It is NOT suitable for production use.

    Attributes:
        _requests: Dictionary mapping request id to the latest snapshot.
    """

    def __init__(self, start_id: int = 1) -> None:
        """Initialize the stub with empty storage."""
        self._requests: dict[int, CitizenRequest] = {}
        self._ids = itertools.count(start_id)
        self._save_count = 0

    async def next_id(self) -> int:
        return next(self._ids)

    async def save(self, request: CitizenRequest) -> None:
        self._requests[request.id] = request
        self._save_count += 1

    async def get(self, request_id: int) -> CitizenRequest | None:
        return self._requests.get(request_id)

    async def list_by_status(
        self, status: RequestStatus, limit: int = 100
    ) -> list[CitizenRequest]:
        matching = sorted(
            (r for r in self._requests.values() if r.status is status),
            key=lambda r: r.id,
        )
        return matching[:limit]

    # Test helper methods

    def get_save_count(self) -> int:
        """Test helper: Number of snapshots stored so far."""
        return self._save_count

    def clear(self) -> None:
        """Test helper: Clear all stored requests."""
        self._requests.clear()
        self._save_count = 0
