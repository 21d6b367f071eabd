"""
Affiliate statistics.

Dashboard figures for a single affiliate.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.enums import ReferralStatus
from tradehub.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.repositories.affiliate_referral_repository import (
    AffiliateReferralRepository,
)
from tradehub.utils.exceptions import NoAffiliateAccount


class AffiliateStatisticsManager:
    """Provides affiliate dashboard statistics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics manager."""
        self.session = session
        self.program_repo = AffiliateProgramRepository(session)
        self.referral_repo = AffiliateReferralRepository(session)
        self.commission_repo = AffiliateCommissionRepository(session)

    async def get_dashboard(self, user_id: int) -> dict[str, Any]:
        """
        Get dashboard statistics of an affiliate.

        Uses SQL aggregation for referral and commission figures.

        Args:
            user_id: Affiliate owner

        Returns:
            Dict with code, tier, rate, referral counts, earnings and
            commission count/amount per status

        Raises:
            NoAffiliateAccount: User has no affiliate program
        """
        program = await self.program_repo.get_by_user_id(user_id)
        if program is None:
            raise NoAffiliateAccount("User is not registered as an affiliate")

        referral_counts = await self.referral_repo.get_status_counts(program.id)
        commission_totals = await self.commission_repo.get_status_totals(
            program.id
        )

        return {
            "affiliate_program_id": program.id,
            "affiliate_code": program.affiliate_code,
            "tier": program.tier,
            "commission_rate": program.commission_rate,
            "is_active": program.is_active,
            "total_referrals": program.total_referrals,
            "converted_referrals": referral_counts[ReferralStatus.CONVERTED.value],
            "pending_referrals": referral_counts[ReferralStatus.PENDING.value],
            "total_earnings": program.total_earnings,
            "pending_earnings": program.pending_earnings,
            "paid_earnings": program.paid_earnings,
            "commissions": commission_totals,
        }
