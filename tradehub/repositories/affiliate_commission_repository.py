"""
AffiliateCommission repository.

Data access layer for AffiliateCommission model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_commission import AffiliateCommission
from tradehub.models.enums import CommissionStatus, RelatedEntity
from tradehub.repositories.base import BaseRepository


class AffiliateCommissionRepository(BaseRepository[AffiliateCommission]):
    """AffiliateCommission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate commission repository."""
        super().__init__(AffiliateCommission, session)

    async def get_by_program(
        self, program_id: int, status: CommissionStatus | None = None
    ) -> list[AffiliateCommission]:
        """
        Get commissions of a program, newest first.

        Args:
            program_id: Affiliate program ID
            status: Optional status filter

        Returns:
            List of commissions
        """
        stmt = select(AffiliateCommission).where(
            AffiliateCommission.affiliate_program_id == program_id
        )
        if status is not None:
            stmt = stmt.where(AffiliateCommission.status == status.value)
        stmt = stmt.order_by(
            AffiliateCommission.created_at.desc(), AffiliateCommission.id.desc()
        )

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_for_related_entity(
        self,
        program_id: int,
        referred_user_id: int,
        related: RelatedEntity,
        commission_type: str,
        for_update: bool = False,
    ) -> AffiliateCommission | None:
        """
        Find the commission created for a given origin record.

        Args:
            program_id: Affiliate program ID
            referred_user_id: Referred user ID
            related: Origin record
            commission_type: Commission type value
            for_update: Lock the row

        Returns:
            Commission or None
        """
        stmt = select(AffiliateCommission).where(
            AffiliateCommission.affiliate_program_id == program_id,
            AffiliateCommission.referred_user_id == referred_user_id,
            AffiliateCommission.related_entity_type == related.kind.value,
            AffiliateCommission.related_entity_id == related.id,
            AffiliateCommission.type == commission_type,
        ).order_by(AffiliateCommission.id).limit(1)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_status_totals(
        self, program_id: int
    ) -> dict[str, dict[str, Decimal | int]]:
        """
        Get commission count and amount per status using SQL aggregation.

        Args:
            program_id: Affiliate program ID

        Returns:
            {status: {"count": int, "amount": Decimal}} for every status
        """
        stmt = (
            select(
                AffiliateCommission.status,
                func.count(AffiliateCommission.id).label("count"),
                func.sum(AffiliateCommission.amount).label("amount"),
            )
            .where(AffiliateCommission.affiliate_program_id == program_id)
            .group_by(AffiliateCommission.status)
        )
        result = await self.session.execute(stmt)

        totals: dict[str, dict[str, Decimal | int]] = {
            status.value: {"count": 0, "amount": Decimal("0")}
            for status in CommissionStatus
        }
        for row in result.all():
            totals[row.status] = {
                "count": row.count,
                "amount": Decimal(str(row.amount or 0)),
            }
        return totals
