"""Correlation ids for pipeline runs.

A correlation id ties together the log lines of one unit of work: a
single intake call, one agent invocation or a whole batch run. The id is
kept in a contextvar. asyncio copies the context into every task it
creates, so batch workers and ledger anchoring tasks log with the id of
the run that spawned them.

    ensure_correlation_id()          # start of process_batch
    structlog.configure(processors=[..., correlation_id_processor, ...])
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

# Empty string means "no id"
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return a fresh random id."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Return the id of the current context, or "" when none is set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the id for the current context and the tasks it spawns."""
    _correlation_id.set(correlation_id)


def ensure_correlation_id() -> str:
    """Return the current id, generating and setting one when unset.

    Callers that already run under an id (e.g. a batch started from a
    traced request) keep it.
    """
    correlation_id = _correlation_id.get()
    if not correlation_id:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor adding `correlation_id` when one is set.

    An id bound explicitly on the logger wins over the context.
    """
    correlation_id = _correlation_id.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
