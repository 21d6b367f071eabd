"""
Tier engine.

Maps an affiliate's referral count to a tier and commission rate.
"""

from decimal import Decimal

from loguru import logger

from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.enums import AffiliateTier
from tradehub.services.affiliate.config import TIER_THRESHOLDS


def tier_for(total_referrals: int) -> tuple[AffiliateTier, Decimal]:
    """
    Get tier and commission rate for a referral count.

    Args:
        total_referrals: Number of referred users (>= 0)

    Returns:
        Tuple of (tier, rate percent)

    Raises:
        ValueError: If total_referrals is negative
    """
    if total_referrals < 0:
        raise ValueError(
            f"total_referrals must be non-negative, got {total_referrals}"
        )

    for minimum, tier, rate in TIER_THRESHOLDS:
        if total_referrals >= minimum:
            return tier, rate

    # Unreachable: the lowest bracket starts at 0
    raise ValueError(f"No tier bracket for {total_referrals}")


def apply_tier(program: AffiliateProgram) -> bool:
    """
    Recompute tier and rate of a program from its referral count.

    Only writes when the tier actually changes. The caller flushes/commits.

    Args:
        program: Affiliate program (total_referrals must be current)

    Returns:
        True if tier and rate were updated
    """
    tier, rate = tier_for(program.total_referrals)

    if program.tier == tier.value:
        return False

    old_tier = program.tier
    program.tier = tier.value
    program.commission_rate = rate

    logger.info(
        "Affiliate tier changed",
        extra={
            "affiliate_program_id": program.id,
            "old_tier": old_tier,
            "new_tier": tier.value,
            "commission_rate": str(rate),
            "total_referrals": program.total_referrals,
        },
    )
    return True
