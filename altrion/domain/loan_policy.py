# altrion/domain/loan_policy.py
from typing import Dict, FrozenSet

from ..utils.config import settings

# Percent values, e.g. 60.0 = 60% LTV, 5.2 = 5.2% APR
MAX_LTV_PERCENT = settings.LOAN_LTV_PERCENT
INTEREST_RATE_PERCENT = settings.LOAN_INTEREST_RATE
DEFAULT_TERM_MONTHS = settings.LOAN_TERM_MONTHS
MAX_TERM_MONTHS = 600

APPLICATION_ID_PREFIX = "ALT-"
APPLICATION_ID_LENGTH = 8

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
ACTIVE = "active"
COMPLETED = "completed"

APPLICATION_STATUSES = (PENDING, APPROVED, REJECTED, ACTIVE, COMPLETED)

# Only consulted when strict transitions are enabled.
STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING:   frozenset({APPROVED, REJECTED}),
    APPROVED:  frozenset({ACTIVE}),
    ACTIVE:    frozenset({COMPLETED}),
    REJECTED:  frozenset(),
    COMPLETED: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, frozenset())
