"""
Earnings ledger.

The only place that changes an affiliate's total/pending/paid earnings.
Every change is a single atomic UPDATE; nothing here commits, the caller
owns the transaction.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_commission import AffiliateCommission
from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.repositories.affiliate_referral_repository import (
    AffiliateReferralRepository,
)
from tradehub.utils.datetime_utils import utc_now
from tradehub.utils.exceptions import (
    AffiliateNotFound,
    InsufficientPendingEarnings,
    InvalidAmount,
)


class EarningsLedger:
    """Applies earnings effects of commissions, rewards and payouts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize earnings ledger."""
        self.session = session
        self.program_repo = AffiliateProgramRepository(session)
        self.referral_repo = AffiliateReferralRepository(session)

    @staticmethod
    def _check_amount(amount: Decimal) -> None:
        if amount <= 0:
            raise InvalidAmount()

    async def apply_approved(
        self,
        program_id: int,
        amount: Decimal,
        referred_user_id: int | None = None,
    ) -> AffiliateProgram:
        """
        Credit an approved commission.

        total += amount, pending += amount. The referral of the referred
        user (if any and still PENDING) becomes CONVERTED.

        Args:
            program_id: Affiliate program ID
            amount: Commission amount
            referred_user_id: User the commission was earned on

        Returns:
            Updated program

        Raises:
            AffiliateNotFound: Program does not exist
        """
        self._check_amount(amount)

        program = await self.program_repo.increment(
            program_id,
            total_earnings=amount,
            pending_earnings=amount,
        )
        if program is None:
            raise AffiliateNotFound()

        converted = 0
        if referred_user_id is not None:
            converted = await self.referral_repo.mark_converted(
                program_id, referred_user_id, utc_now()
            )

        logger.info(
            "Commission credited to affiliate earnings",
            extra={
                "affiliate_program_id": program_id,
                "amount": str(amount),
                "referred_user_id": referred_user_id,
                "referral_converted": bool(converted),
            },
        )
        return program

    async def apply_rejection(self, commission: AffiliateCommission) -> None:
        """
        Record a rejected commission.

        PENDING commissions never touched earnings, so there is nothing
        to reverse.
        """
        logger.info(
            "Commission rejected, earnings unchanged",
            extra={
                "commission_id": commission.id,
                "affiliate_program_id": commission.affiliate_program_id,
                "amount": str(commission.amount),
                "reason": commission.rejection_reason,
            },
        )

    async def credit_reward(
        self, program_id: int, amount: Decimal
    ) -> AffiliateProgram:
        """
        Credit a monthly challenge reward (total += amount, pending += amount).

        Raises:
            AffiliateNotFound: Program does not exist
        """
        self._check_amount(amount)

        program = await self.program_repo.increment(
            program_id,
            total_earnings=amount,
            pending_earnings=amount,
        )
        if program is None:
            raise AffiliateNotFound()

        logger.info(
            "Challenge reward credited",
            extra={"affiliate_program_id": program_id, "amount": str(amount)},
        )
        return program

    async def settle_completed_payout(
        self, program_id: int, amount: Decimal
    ) -> AffiliateProgram:
        """
        Settle a payout that moved to COMPLETED.

        paid += amount, pending = max(0, pending - amount).

        Raises:
            AffiliateNotFound: Program does not exist
        """
        self._check_amount(amount)

        program = await self.program_repo.settle_payout(program_id, amount)
        if program is None:
            raise AffiliateNotFound()

        logger.info(
            "Payout settled",
            extra={
                "affiliate_program_id": program_id,
                "amount": str(amount),
                "pending_earnings": str(program.pending_earnings),
                "paid_earnings": str(program.paid_earnings),
            },
        )
        return program

    async def restore_failed_payout(
        self, program_id: int, amount: Decimal
    ) -> AffiliateProgram:
        """
        Return the amount of a FAILED payout to pending (pending += amount).

        Raises:
            AffiliateNotFound: Program does not exist
        """
        self._check_amount(amount)

        program = await self.program_repo.increment(
            program_id, pending_earnings=amount
        )
        if program is None:
            raise AffiliateNotFound()

        logger.warning(
            "Failed payout restored to pending earnings",
            extra={"affiliate_program_id": program_id, "amount": str(amount)},
        )
        return program

    async def settle_direct_payout(
        self, program_id: int, amount: Decimal
    ) -> AffiliateProgram:
        """
        Pay out immediately from pending earnings.

        Locks the program row, requires pending >= amount, then
        pending -= amount, paid += amount.

        Raises:
            AffiliateNotFound: Program does not exist
            InsufficientPendingEarnings: pending < amount
        """
        self._check_amount(amount)

        program = await self.program_repo.get_by_id(program_id, for_update=True)
        if program is None:
            raise AffiliateNotFound()

        if program.pending_earnings < amount:
            raise InsufficientPendingEarnings()

        program = await self.program_repo.increment(
            program_id,
            pending_earnings=-amount,
            paid_earnings=amount,
        )

        logger.info(
            "Direct payout settled",
            extra={"affiliate_program_id": program_id, "amount": str(amount)},
        )
        return program
