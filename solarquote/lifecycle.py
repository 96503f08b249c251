"""
lifecycle.py — Status transitions for quotation requests and vendor quotations

Quotation request:   open → in_progress → closed
                     open → closed
Vendor quotation:    submitted → viewed → accepted | rejected
                     submitted → accepted | rejected

Business Rules:
- closed, accepted and rejected are terminal
- Request status never moves backwards
- Re-applying the current status is not a transition (callers decide
  whether that is a no-op or an error)

Called by: services/quotation_service.py
Depends on: errors
"""

from .errors import InvalidTransition

REQUEST = "request"
QUOTATION = "quotation"

REQUEST_STATUSES = ("open", "in_progress", "closed")
QUOTATION_STATUSES = ("submitted", "viewed", "accepted", "rejected")

_TRANSITIONS = {
    REQUEST: {
        "open": {"in_progress", "closed"},
        "in_progress": {"closed"},
        "closed": set(),
    },
    QUOTATION: {
        "submitted": {"viewed", "accepted", "rejected"},
        "viewed": {"accepted", "rejected"},
        "accepted": set(),
        "rejected": set(),
    },
}


def allowed_targets(kind: str, current: str) -> set[str]:
    """Statuses reachable in one step from `current`."""
    try:
        return set(_TRANSITIONS[kind][current])
    except KeyError:
        raise ValueError(f"Unknown {kind} status: {current!r}")


def is_terminal(kind: str, status: str) -> bool:
    return not allowed_targets(kind, status)


def can_transition(kind: str, current: str, target: str) -> bool:
    return target in allowed_targets(kind, current)


def ensure_transition(kind: str, current: str, target: str) -> None:
    """Raise InvalidTransition unless current → target is legal."""
    if not can_transition(kind, current, target):
        label = "Quotation request" if kind == REQUEST else "Quotation"
        if is_terminal(kind, current):
            raise InvalidTransition(f"{label} is already {current}")
        raise InvalidTransition(f"{label} cannot move from {current} to {target}")
