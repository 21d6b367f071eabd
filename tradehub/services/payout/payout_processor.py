"""
Payout processor.

Moves payouts through their status lifecycle and applies the matching
earnings effects.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_payout import AffiliatePayout
from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.enums import PayoutStatus
from tradehub.repositories.affiliate_payout_repository import (
    AffiliatePayoutRepository,
)
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.services.affiliate.earnings_ledger import EarningsLedger
from tradehub.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from tradehub.utils.datetime_utils import utc_now
from tradehub.utils.exceptions import (
    AffiliateNotFound,
    InvalidAmount,
    InvalidPayoutStatus,
    InvalidPayoutTransition,
    PayoutNotFound,
)


# Every allowed (from, to) status pair and the EarningsLedger method that
# applies its earnings effect. Pairs not listed here are rejected.
PAYOUT_TRANSITIONS: dict[tuple[PayoutStatus, PayoutStatus], str] = {
    (PayoutStatus.PENDING, PayoutStatus.COMPLETED): "settle_completed_payout",
    (PayoutStatus.PENDING, PayoutStatus.FAILED): "restore_failed_payout",
}


def parse_payout_status(value: PayoutStatus | str) -> PayoutStatus | None:
    """Convert a status string to PayoutStatus, None if it is not one."""
    try:
        return PayoutStatus(value)
    except ValueError:
        return None


def is_allowed_transition(
    current: PayoutStatus | str, new: PayoutStatus | str
) -> bool:
    """Check if a payout may move from current to new status."""
    pair = (parse_payout_status(current), parse_payout_status(new))
    return pair in PAYOUT_TRANSITIONS


class PayoutProcessor(BaseService):
    """
    Payout processor service.

    Handles admin payout operations:
    - status transitions of existing payouts (PENDING -> COMPLETED/FAILED)
    - creating PENDING payouts
    - recording immediate payouts from pending earnings
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout processor."""
        super().__init__(session)
        self.payout_repo = AffiliatePayoutRepository(session)
        self.program_repo = AffiliateProgramRepository(session)
        self.ledger = EarningsLedger(session)

    @transaction
    async def transition(
        self,
        payout_id: int,
        new_status: PayoutStatus | str,
        transaction_id: str | None = None,
        paid_at: datetime | None = None,
    ) -> AffiliatePayout:
        """
        Change payout status and apply its earnings effect.

        PENDING -> COMPLETED: paid += amount, pending = max(0, pending - amount)
        PENDING -> FAILED: pending += amount

        Args:
            payout_id: Payout ID
            new_status: Target status
            transaction_id: External payment reference
            paid_at: Payment time for COMPLETED (default: now)

        Returns:
            Updated payout

        Raises:
            PayoutNotFound: No such payout
            InvalidPayoutTransition: Unknown status or pair not in the
                transition table
        """
        requested = new_status
        new_status = parse_payout_status(requested)
        if new_status is None:
            raise InvalidPayoutTransition(
                f"Unknown payout status: {requested}"
            )

        payout = await self.payout_repo.get_by_id(payout_id, for_update=True)
        if payout is None:
            raise PayoutNotFound()

        current = parse_payout_status(payout.status)
        effect_name = PAYOUT_TRANSITIONS.get((current, new_status))
        if effect_name is None:
            raise InvalidPayoutTransition(
                f"Cannot change payout status from {payout.status} "
                f"to {new_status}"
            )

        payout.status = new_status.value
        if transaction_id is not None:
            payout.transaction_id = transaction_id
        if new_status == PayoutStatus.COMPLETED:
            payout.paid_at = paid_at or utc_now()
        await self.session.flush()

        effect = getattr(self.ledger, effect_name)
        await effect(payout.affiliate_program_id, payout.amount)

        self.logger.info(
            "Payout status changed",
            extra={
                "payout_id": payout.id,
                "affiliate_program_id": payout.affiliate_program_id,
                "from_status": current.value,
                "to_status": new_status.value,
                "amount": str(payout.amount),
            },
        )
        return payout

    async def _get_program(self, program_id: int) -> AffiliateProgram:
        program = await self.program_repo.get_by_id(program_id)
        if program is None:
            raise AffiliateNotFound()
        return program

    @transaction
    async def create_payout(
        self,
        program_id: int,
        amount: Decimal,
        method: str,
        notes: str | None = None,
    ) -> AffiliatePayout:
        """
        Create a PENDING payout. Earnings change only when it completes.

        Raises:
            AffiliateNotFound: No such program
            InvalidAmount: Amount is not positive
        """
        amount = Decimal(str(amount))
        if amount <= 0:
            raise InvalidAmount()

        await self._get_program(program_id)

        payout = await self.payout_repo.create(
            affiliate_program_id=program_id,
            amount=amount,
            method=method,
            status=PayoutStatus.PENDING.value,
            notes=notes,
        )

        self.logger.info(
            "Payout created",
            extra={
                "payout_id": payout.id,
                "affiliate_program_id": program_id,
                "amount": str(amount),
                "method": method,
            },
        )
        return payout

    @transaction
    async def process_payout(
        self,
        program_id: int,
        amount: Decimal,
        method: str,
        transaction_id: str,
        notes: str | None = None,
    ) -> AffiliatePayout:
        """
        Record a payout that was already paid, taken from pending earnings.

        Raises:
            AffiliateNotFound: No such program
            InvalidAmount: Amount is not positive
            InsufficientPendingEarnings: pending < amount
        """
        amount = Decimal(str(amount))
        if amount <= 0:
            raise InvalidAmount()

        await self._get_program(program_id)
        await self.ledger.settle_direct_payout(program_id, amount)

        payout = await self.payout_repo.create(
            affiliate_program_id=program_id,
            amount=amount,
            method=method,
            status=PayoutStatus.COMPLETED.value,
            transaction_id=transaction_id,
            notes=notes,
            paid_at=utc_now(),
        )

        self.logger.info(
            "Payout processed",
            extra={
                "payout_id": payout.id,
                "affiliate_program_id": program_id,
                "amount": str(amount),
                "transaction_id": transaction_id,
            },
        )
        return payout

    @log_operation
    async def list_payouts(
        self,
        status: PayoutStatus | str | None = None,
        limit: int = 100,
        program_id: int | None = None,
    ) -> list[AffiliatePayout]:
        """
        List payouts, newest first.

        Raises:
            InvalidPayoutStatus: Status filter is not a payout status
        """
        if status is not None:
            parsed = parse_payout_status(status)
            if parsed is None:
                raise InvalidPayoutStatus(f"Unknown payout status: {status}")
            status = parsed

        return await self.payout_repo.list_recent(
            status=status,
            program_id=program_id,
            limit=limit,
        )
