"""Citizen request repository port.

Defines the storage contract for citizen requests. Only the lifecycle
service writes through this port; every other component reads.

Developer Golden Rules:
1. AUDIT IN THE SERVICE - Repository stores, the lifecycle service records
2. FAIL LOUD - Repository raises on errors
3. TOMBSTONES STAY - Deleted requests remain readable with status DELETED
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.citizen_request import CitizenRequest, RequestStatus


class CitizenRequestRepositoryProtocol(Protocol):
    """Protocol for citizen request storage operations.

    Methods:
        next_id: Reserve the id of a new request
        save: Insert or replace a request snapshot
        get: Retrieve a request by id
        list_by_status: List requests in a lifecycle state
    """

    async def next_id(self) -> int:
        """Reserve a fresh, never reused request id."""
        ...

    async def save(self, request: CitizenRequest) -> None:
        """Store a request snapshot, replacing any previous one with the same id.

        Args:
            request: The request to store.
        """
        ...

    async def get(self, request_id: int) -> CitizenRequest | None:
        """Retrieve a request by id.

        Args:
            request_id: The request identifier.

        Returns:
            The request if found, None otherwise.
        """
        ...

    async def list_by_status(
        self, status: RequestStatus, limit: int = 100
    ) -> list[CitizenRequest]:
        """List requests in a lifecycle state, ordered by id.

        Args:
            status: The lifecycle state to filter by.
            limit: Maximum number of requests to return.
        """
        ...
