"""
Payout package.

Contains the payout processor and its status transition table.
"""

from tradehub.services.payout.payout_processor import (
    PAYOUT_TRANSITIONS,
    PayoutProcessor,
    is_allowed_transition,
)


__all__ = [
    "PAYOUT_TRANSITIONS",
    "PayoutProcessor",
    "is_allowed_transition",
]
