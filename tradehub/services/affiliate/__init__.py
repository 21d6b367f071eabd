"""
Affiliate services package.

Contains modular services for the affiliate program:
- config: Tier brackets and verification policy
- tier_engine: Tier and rate for a referral count
- referral_resolver: Referral code lookup
- referral_tracker: Links referred users to affiliates
- registration: Affiliate enrollment and code generation
- commission_calculator: Commission creation and verification
- earnings_ledger: All earnings mutations
- statistics: Affiliate dashboard figures
"""

from tradehub.services.affiliate.commission_calculator import (
    CommissionCalculator,
    calculate_commission_amount,
    requires_verification,
)
from tradehub.services.affiliate.config import (
    TIER_THRESHOLDS,
    VERIFICATION_POLICY,
)
from tradehub.services.affiliate.earnings_ledger import EarningsLedger
from tradehub.services.affiliate.referral_resolver import ReferralResolver
from tradehub.services.affiliate.referral_tracker import ReferralTracker
from tradehub.services.affiliate.registration import (
    AffiliateRegistrationManager,
    generate_affiliate_code,
)
from tradehub.services.affiliate.statistics import AffiliateStatisticsManager
from tradehub.services.affiliate.tier_engine import apply_tier, tier_for


__all__ = [
    # Configuration
    "TIER_THRESHOLDS",
    "VERIFICATION_POLICY",
    # Pure logic
    "apply_tier",
    "calculate_commission_amount",
    "generate_affiliate_code",
    "requires_verification",
    "tier_for",
    # Managers
    "AffiliateRegistrationManager",
    "AffiliateStatisticsManager",
    "CommissionCalculator",
    "EarningsLedger",
    "ReferralResolver",
    "ReferralTracker",
]
