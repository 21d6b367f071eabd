"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from tradehub.models.affiliate_commission import AffiliateCommission
from tradehub.models.affiliate_payout import AffiliatePayout
from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.affiliate_referral import AffiliateReferral
from tradehub.models.base import Base
from tradehub.models.enums import (
    AffiliateTier,
    CommissionStatus,
    CommissionType,
    PayoutStatus,
    ReferralStatus,
    RelatedEntity,
    RelatedEntityType,
)
from tradehub.models.monthly_challenge import MonthlyChallenge
from tradehub.models.user import User

__all__ = [
    # Base
    "Base",
    # Enums
    "AffiliateTier",
    "CommissionStatus",
    "CommissionType",
    "PayoutStatus",
    "ReferralStatus",
    "RelatedEntity",
    "RelatedEntityType",
    # Core Models
    "User",
    "AffiliateProgram",
    "AffiliateReferral",
    "AffiliateCommission",
    "AffiliatePayout",
    "MonthlyChallenge",
]
