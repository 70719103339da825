"""
Agent Smith - Citizen Correspondence Processing Pipeline

Routes citizen requests to organizational units, dispatches AI agents for
classification, summarization and response drafting, drives each request
through its lifecycle, and keeps an append-only audit trail whose sensitive
entries are anchored to a distributed ledger.

Operating Truths:
- Every mutation leaves exactly one audit event behind
- One failing request never takes down a batch
- Ledger anchoring is evidence, not a gate
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
