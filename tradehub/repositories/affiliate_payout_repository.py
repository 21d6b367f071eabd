"""
AffiliatePayout repository.

Data access layer for AffiliatePayout model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_payout import AffiliatePayout
from tradehub.models.enums import PayoutStatus
from tradehub.repositories.base import BaseRepository


class AffiliatePayoutRepository(BaseRepository[AffiliatePayout]):
    """AffiliatePayout repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate payout repository."""
        super().__init__(AffiliatePayout, session)

    async def list_recent(
        self,
        status: PayoutStatus | None = None,
        program_id: int | None = None,
        limit: int = 100,
    ) -> list[AffiliatePayout]:
        """
        List payouts, newest first.

        Args:
            status: Optional status filter
            program_id: Optional affiliate program filter
            limit: Max number of results

        Returns:
            List of payouts
        """
        stmt = select(AffiliatePayout)
        if status is not None:
            stmt = stmt.where(AffiliatePayout.status == status.value)
        if program_id is not None:
            stmt = stmt.where(AffiliatePayout.affiliate_program_id == program_id)
        stmt = stmt.order_by(
            AffiliatePayout.created_at.desc(), AffiliatePayout.id.desc()
        ).limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
