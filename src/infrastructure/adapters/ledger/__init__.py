"""Ledger adapters."""

from src.infrastructure.adapters.ledger.http_ledger_adapter import HttpLedgerAdapter

__all__ = ["HttpLedgerAdapter"]
