"""Request State Machine — the only legal edges between request statuses.

Invariants:
    - pending → accepted | rejected | cancelled | expired
    - accepted → completed | cancelled
    - rejected, expired, completed, cancelled are terminal (no outgoing edges)
    - All functions are PURE: no IO, no async, no DB

Design Decisions:
    - Edge table as data, not if/else chains: one place to read the whole graph
    - check_transition raises instead of returning a dict: callers in services/
      propagate it straight to the API envelope
"""

from collabhub.core.domain_types import (
    ACTIVE_STATUSES, TERMINAL_STATUSES, RequestStatus,
)
from collabhub.core.errors import InvalidTransitionError

TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({
        RequestStatus.ACCEPTED, RequestStatus.REJECTED,
        RequestStatus.CANCELLED, RequestStatus.EXPIRED,
    }),
    RequestStatus.ACCEPTED: frozenset({
        RequestStatus.COMPLETED, RequestStatus.CANCELLED,
    }),
    **{status: frozenset() for status in TERMINAL_STATUSES},
}


def is_active(status: RequestStatus | str) -> bool:
    return RequestStatus(status) in ACTIVE_STATUSES


def can_transition(current: RequestStatus | str, target: RequestStatus | str) -> bool:
    """True if `current → target` is an edge of the graph."""
    return RequestStatus(target) in TRANSITIONS[RequestStatus(current)]


def check_transition(current: RequestStatus | str, target: RequestStatus | str) -> None:
    """Raise InvalidTransitionError unless `current → target` is legal."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            RequestStatus(current).value, RequestStatus(target).value,
        )


def active_pair_key(brand_id: str, creator_id: str) -> str:
    """Key enforced UNIQUE by the store while a request is active."""
    return f"{brand_id}:{creator_id}"
