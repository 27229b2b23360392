"""
Order status state machine
"""
from storefront.services.errors import InvalidStatusTransitionError

VALID_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"confirmed", "processing", "cancelled"},
    "confirmed": {"processing", "shipped", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"completed", "fulfilled"},
    "completed": set(),
    "fulfilled": set(),
    "cancelled": set(),
}

TERMINAL_STATUSES: set[str] = {
    status for status, targets in VALID_TRANSITIONS.items() if not targets
}


def can_transition(current: str, requested: str) -> bool:
    return requested in VALID_TRANSITIONS.get(current, set())


def ensure_transition(current: str, requested: str) -> None:
    """Raise InvalidStatusTransitionError unless current -> requested is allowed"""
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(current, requested)
