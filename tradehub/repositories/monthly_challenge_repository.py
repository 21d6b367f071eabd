"""
MonthlyChallenge repository.

Data access layer for MonthlyChallenge model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.monthly_challenge import MonthlyChallenge
from tradehub.repositories.base import BaseRepository


class MonthlyChallengeRepository(BaseRepository[MonthlyChallenge]):
    """MonthlyChallenge repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize monthly challenge repository."""
        super().__init__(MonthlyChallenge, session)

    async def get_for_month(
        self, user_id: int, month: str, for_update: bool = False
    ) -> MonthlyChallenge | None:
        """
        Get challenge progress of user for month.

        Args:
            user_id: Referring user ID
            month: Month key "YYYY-MM"
            for_update: Lock the row

        Returns:
            Challenge or None
        """
        stmt = select(MonthlyChallenge).where(
            MonthlyChallenge.user_id == user_id,
            MonthlyChallenge.month == month,
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_month(self, month: str) -> list[MonthlyChallenge]:
        """Get all challenges of a month, highest referral count first."""
        stmt = (
            select(MonthlyChallenge)
            .where(MonthlyChallenge.month == month)
            .order_by(
                MonthlyChallenge.referral_count.desc(),
                MonthlyChallenge.id,
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
