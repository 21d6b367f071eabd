"""
Monthly challenge package.

Per-month referral challenge: progress tracking, reward claim and the
admin month overview.
"""

from tradehub.services.monthly_challenge.tracker import (
    DEFAULT_PAYOUT_METHOD,
    MonthlyChallengeTracker,
)
from tradehub.utils.datetime_utils import month_key


__all__ = [
    "DEFAULT_PAYOUT_METHOD",
    "MonthlyChallengeTracker",
    "month_key",
]
