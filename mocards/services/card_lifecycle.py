# mocards/services/card_lifecycle.py
"""Allowed card status changes.

Every operation that moves a card checks this table first; there is no way
back to ``unassigned`` and ``suspended`` is terminal.
"""

from mocards.db.models.card_model import CardStatus


class InvalidCardTransition(Exception):
    def __init__(self, operation: str, current_status: str):
        self.operation = operation
        self.current_status = current_status
        super().__init__(f"Cannot {operation} a card whose status is {current_status}.")


TRANSITIONS: dict[str, tuple[frozenset[CardStatus], CardStatus]] = {
    "assign": (frozenset({CardStatus.UNASSIGNED}), CardStatus.ASSIGNED),
    "reassign": (frozenset({CardStatus.ASSIGNED}), CardStatus.ASSIGNED),
    "activate": (frozenset({CardStatus.ASSIGNED}), CardStatus.ACTIVATED),
    "expire": (frozenset({CardStatus.ACTIVATED}), CardStatus.EXPIRED),
    "suspend": (
        frozenset({CardStatus.UNASSIGNED, CardStatus.ASSIGNED, CardStatus.ACTIVATED, CardStatus.EXPIRED}),
        CardStatus.SUSPENDED,
    ),
}


def can_transition(operation: str, current_status: str) -> bool:
    sources, _ = TRANSITIONS[operation]
    return CardStatus(current_status) in sources


def require_transition(operation: str, current_status: str) -> CardStatus:
    if not can_transition(operation, current_status):
        raise InvalidCardTransition(operation, current_status)
    return TRANSITIONS[operation][1]


def source_statuses(operation: str) -> list[str]:
    sources, _ = TRANSITIONS[operation]
    return sorted(status.value for status in sources)
