"""JSON-RPC ledger adapter over httpx.

Submits anchor hashes to a ledger node speaking JSON-RPC 2.0 and maps
transport and protocol failures onto LedgerError with a retryable flag:

- Timeouts, connection errors, HTTP 429 and 5xx: retryable
- Other HTTP errors and JSON-RPC errors: permanent
- JSON-RPC server errors (-32000..-32099): retryable
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx
import structlog

from src.application.ports.ledger import LedgerProtocol
from src.config.pipeline_config import LedgerEndpointConfig
from src.domain.errors.ledger import LedgerError

log = structlog.get_logger()

SUBMIT_METHOD = "anchor_submitHash"
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HttpLedgerAdapter(LedgerProtocol):
    """LedgerProtocol implementation backed by a JSON-RPC endpoint.

    Usage:
        adapter = HttpLedgerAdapter(LedgerEndpointConfig.from_environment())
        tx_hash = await adapter.submit(anchor_hash)

    A shared httpx.AsyncClient may be injected; otherwise one client is
    opened per submission.
    """

    def __init__(
        self,
        config: LedgerEndpointConfig,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Endpoint URL and credentials.
            client: Optional shared client (e.g. with a mock transport).
            timeout_seconds: HTTP timeout of one request.
        """
        self._config = config
        self._client = client
        self._timeout = timeout_seconds
        self._request_ids = itertools.count(1)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def submit(self, anchor_hash: str) -> str:
        """Submit an anchor hash and return the transaction hash.

        Raises:
            LedgerError: If the submission fails.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": SUBMIT_METHOD,
            "params": [anchor_hash],
        }
        if self._client is not None:
            response = await self._post(self._client, payload)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._post(client, payload)
        return self._parse(response, anchor_hash)

    async def _post(
        self, client: httpx.AsyncClient, payload: dict[str, Any]
    ) -> httpx.Response:
        try:
            return await client.post(
                self._config.url,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            log.warning("ledger_request_timeout", url=self._config.url, error=str(e))
            raise LedgerError(f"Ledger request timeout: {e}", retryable=True) from e
        except httpx.TransportError as e:
            log.warning("ledger_connection_error", url=self._config.url, error=str(e))
            raise LedgerError(f"Ledger connection error: {e}", retryable=True) from e

    def _parse(self, response: httpx.Response, anchor_hash: str) -> str:
        if response.status_code >= 300:
            retryable = response.status_code in RETRYABLE_STATUS_CODES
            log.error(
                "ledger_http_error",
                status_code=response.status_code,
                retryable=retryable,
            )
            raise LedgerError(
                f"Ledger returned HTTP {response.status_code}", retryable=retryable
            )

        try:
            body = response.json()
        except ValueError as e:
            raise LedgerError("Ledger returned invalid JSON", retryable=False) from e

        error = body.get("error") if isinstance(body, dict) else None
        if error is not None:
            code = error.get("code", 0) if isinstance(error, dict) else 0
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            retryable = -32099 <= code <= -32000
            log.error("ledger_rpc_error", code=code, message=message, retryable=retryable)
            raise LedgerError(
                f"Ledger RPC error {code}: {message}", retryable=retryable
            )

        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, str) or not result:
            raise LedgerError("Ledger response has no transaction hash", retryable=False)

        log.info("ledger_hash_submitted", hash=anchor_hash, transaction_hash=result)
        return result

    async def aclose(self) -> None:
        """Close the injected client, if any."""
        if self._client is not None:
            await self._client.aclose()
