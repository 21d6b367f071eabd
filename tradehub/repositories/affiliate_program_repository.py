"""
AffiliateProgram repository.

Data access layer for AffiliateProgram model, including the atomic
earnings increments used by the earnings ledger.
"""

from decimal import Decimal

from sqlalchemy import case, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.types import MoneyType
from tradehub.repositories.base import BaseRepository


# Columns that may be changed through increment()
EARNINGS_COLUMNS = frozenset(
    {"total_earnings", "pending_earnings", "paid_earnings"}
)


class AffiliateProgramRepository(BaseRepository[AffiliateProgram]):
    """AffiliateProgram repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate program repository."""
        super().__init__(AffiliateProgram, session)

    async def get_by_code(self, code: str) -> AffiliateProgram | None:
        """
        Get program by exact (case-sensitive) affiliate code.

        Args:
            code: Affiliate code

        Returns:
            Program or None
        """
        return await self.get_by(affiliate_code=code)

    async def get_by_user_id(
        self, user_id: int, for_update: bool = False
    ) -> AffiliateProgram | None:
        """
        Get program owned by user.

        Args:
            user_id: Owner user ID
            for_update: Lock the row

        Returns:
            Program or None
        """
        stmt = select(AffiliateProgram).where(AffiliateProgram.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def code_exists(self, code: str) -> bool:
        """Check if affiliate code is taken."""
        return await self.exists(affiliate_code=code)

    async def increment(
        self, program_id: int, **deltas: Decimal
    ) -> AffiliateProgram | None:
        """
        Atomically add deltas to earnings columns.

        Runs a single UPDATE ... SET col = col + :delta so concurrent
        writers cannot lose each other's updates.

        Args:
            program_id: Program ID
            **deltas: Column name -> amount to add (may be negative)

        Returns:
            Reloaded program or None if it does not exist
        """
        unknown = set(deltas) - EARNINGS_COLUMNS
        if unknown:
            raise ValueError(f"Not an earnings column: {sorted(unknown)}")

        values = {
            column: getattr(AffiliateProgram, column) + delta
            for column, delta in deltas.items()
        }
        stmt = (
            update(AffiliateProgram)
            .where(AffiliateProgram.id == program_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            return None

        return await self.reload(program_id)

    async def settle_payout(
        self, program_id: int, amount: Decimal
    ) -> AffiliateProgram | None:
        """
        Move amount from pending to paid, clamping pending at zero.

        Single UPDATE: paid = paid + amount,
        pending = CASE WHEN pending >= amount THEN pending - amount ELSE 0.

        Args:
            program_id: Program ID
            amount: Paid out amount

        Returns:
            Reloaded program or None if it does not exist
        """
        pending = AffiliateProgram.pending_earnings
        stmt = (
            update(AffiliateProgram)
            .where(AffiliateProgram.id == program_id)
            .values(
                paid_earnings=AffiliateProgram.paid_earnings + amount,
                pending_earnings=case(
                    (pending >= amount, pending - amount),
                    else_=literal(0, MoneyType),
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            return None

        return await self.reload(program_id)

    async def increment_referrals(self, program_id: int) -> AffiliateProgram | None:
        """Atomically increment total_referrals by one."""
        stmt = (
            update(AffiliateProgram)
            .where(AffiliateProgram.id == program_id)
            .values(total_referrals=AffiliateProgram.total_referrals + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            return None

        return await self.reload(program_id)

    async def find_inconsistent(self) -> list[AffiliateProgram]:
        """
        Find programs whose earnings do not add up or went negative.

        Returns:
            Programs with total != pending + paid or a negative field
        """
        stmt = select(AffiliateProgram).where(
            (AffiliateProgram.total_earnings
             != AffiliateProgram.pending_earnings + AffiliateProgram.paid_earnings)
            | (AffiliateProgram.pending_earnings < 0)
            | (AffiliateProgram.paid_earnings < 0)
            | (AffiliateProgram.total_earnings < 0)
        ).order_by(AffiliateProgram.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
