"""
AffiliateReferral repository.

Data access layer for AffiliateReferral model.
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_referral import AffiliateReferral
from tradehub.models.enums import ReferralStatus
from tradehub.repositories.base import BaseRepository


class AffiliateReferralRepository(BaseRepository[AffiliateReferral]):
    """AffiliateReferral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate referral repository."""
        super().__init__(AffiliateReferral, session)

    async def get_pair(
        self, program_id: int, referred_user_id: int
    ) -> AffiliateReferral | None:
        """Get referral for (program, referred user) pair."""
        return await self.get_by(
            affiliate_program_id=program_id,
            referred_user_id=referred_user_id,
        )

    async def mark_converted(
        self,
        program_id: int,
        referred_user_id: int,
        converted_at: datetime,
    ) -> int:
        """
        Flip a PENDING referral to CONVERTED.

        Args:
            program_id: Affiliate program ID
            referred_user_id: Referred user ID
            converted_at: Conversion timestamp

        Returns:
            Number of referrals updated (0 or 1)
        """
        stmt = (
            update(AffiliateReferral)
            .where(
                AffiliateReferral.affiliate_program_id == program_id,
                AffiliateReferral.referred_user_id == referred_user_id,
                AffiliateReferral.status == ReferralStatus.PENDING.value,
            )
            .values(
                status=ReferralStatus.CONVERTED.value,
                conversion_date=converted_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_status_counts(self, program_id: int) -> dict[str, int]:
        """
        Get referral counts per status in a single query.

        Args:
            program_id: Affiliate program ID

        Returns:
            Dict mapping status to count (all statuses present)
        """
        stmt = (
            select(
                AffiliateReferral.status,
                func.count(AffiliateReferral.id).label("count"),
            )
            .where(AffiliateReferral.affiliate_program_id == program_id)
            .group_by(AffiliateReferral.status)
        )
        result = await self.session.execute(stmt)

        counts = {status.value: 0 for status in ReferralStatus}
        for row in result.all():
            counts[row.status] = row.count
        return counts
