"""
Commission calculator.

Turns commissionable events (academy enrollment, copy trading subscription,
broker account opening, premium subscription) into affiliate commissions,
and handles their admin verification.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_commission import AffiliateCommission
from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.enums import (
    CommissionStatus,
    CommissionType,
    RelatedEntity,
)
from tradehub.repositories.affiliate_commission_repository import (
    AffiliateCommissionRepository,
)
from tradehub.repositories.user_repository import UserRepository
from tradehub.services.affiliate.config import (
    COMMISSION_QUANTUM,
    VERIFICATION_POLICY,
)
from tradehub.services.affiliate.earnings_ledger import EarningsLedger
from tradehub.services.affiliate.referral_resolver import ReferralResolver
from tradehub.services.base_service import BaseService, transaction
from tradehub.utils.datetime_utils import utc_now
from tradehub.utils.exceptions import (
    CommissionAlreadyProcessed,
    CommissionNotFound,
    InvalidAmount,
    UserNotFound,
)


def calculate_commission_amount(
    base_amount: Decimal, rate_percent: Decimal
) -> Decimal:
    """
    Calculate commission for a base amount.

    amount = base * rate / 100, rounded half-up to cents.

    Args:
        base_amount: Purchase/investment/deposit amount
        rate_percent: Commission rate in percent (10 means 10%)

    Returns:
        Commission amount, 0 for non-positive base or negative rate
    """
    base_amount = Decimal(str(base_amount))
    rate_percent = Decimal(str(rate_percent))

    if base_amount <= 0 or rate_percent < 0:
        logger.warning(
            "Commission requested for invalid base or rate",
            extra={
                "base_amount": str(base_amount),
                "rate_percent": str(rate_percent),
            },
        )
        return Decimal("0.00")

    amount = base_amount * rate_percent / Decimal("100")
    return amount.quantize(COMMISSION_QUANTUM, rounding=ROUND_HALF_UP)


def requires_verification(commission_type: CommissionType | str) -> bool:
    """
    Check whether commissions of this type need admin approval.

    Unknown types require verification.
    """
    try:
        commission_type = CommissionType(commission_type)
    except ValueError:
        return True
    return VERIFICATION_POLICY.get(commission_type, True)


class CommissionCalculator(BaseService):
    """
    Commission calculator service.

    Creates commissions for events triggered by referred users. Commissions
    that need no verification are APPROVED immediately and credited through
    the earnings ledger in the same transaction; the others stay PENDING
    until an admin verifies them.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission calculator."""
        super().__init__(session)
        self.commission_repo = AffiliateCommissionRepository(session)
        self.user_repo = UserRepository(session)
        self.resolver = ReferralResolver(session)
        self.ledger = EarningsLedger(session)

    @transaction
    async def compute(
        self,
        base_amount: Decimal,
        affiliate: AffiliateProgram,
        requires_verification: bool,
        *,
        commission_type: CommissionType = CommissionType.OTHER,
        referred_user_id: int | None = None,
        related: RelatedEntity | None = None,
        description: str | None = None,
        verification_data: dict[str, Any] | None = None,
    ) -> AffiliateCommission:
        """
        Create a commission for an affiliate at the affiliate's current rate.

        Args:
            base_amount: Amount the commission is computed from
            affiliate: Program receiving the commission
            requires_verification: Keep PENDING until verified by admin
            commission_type: Event type
            referred_user_id: User who triggered the event
            related: Origin record
            description: Human-readable description
            verification_data: Data an admin needs to verify the event

        Returns:
            Created commission

        Raises:
            InvalidAmount: Computed commission is zero
        """
        return await self._compute(
            base_amount,
            affiliate,
            requires_verification,
            commission_type=commission_type,
            referred_user_id=referred_user_id,
            related=related,
            description=description,
            verification_data=verification_data,
        )

    async def _compute(
        self,
        base_amount: Decimal,
        affiliate: AffiliateProgram,
        requires_verification: bool,
        *,
        commission_type: CommissionType,
        referred_user_id: int | None,
        related: RelatedEntity | None,
        description: str | None,
        verification_data: dict[str, Any] | None,
    ) -> AffiliateCommission:
        amount = calculate_commission_amount(
            base_amount, affiliate.commission_rate
        )
        if amount <= 0:
            raise InvalidAmount("Commission amount must be positive")

        status = (
            CommissionStatus.PENDING
            if requires_verification
            else CommissionStatus.APPROVED
        )

        commission = await self.commission_repo.create(
            affiliate_program_id=affiliate.id,
            referred_user_id=referred_user_id,
            amount=amount,
            type=CommissionType(commission_type).value,
            description=description,
            status=status.value,
            requires_verification=requires_verification,
            verification_data=verification_data or {},
            related_entity=related,
        )

        if status == CommissionStatus.APPROVED:
            await self.ledger.apply_approved(
                affiliate.id, amount, referred_user_id
            )

        self.logger.info(
            "Commission created",
            extra={
                "commission_id": commission.id,
                "affiliate_program_id": affiliate.id,
                "referred_user_id": referred_user_id,
                "type": commission.type,
                "amount": str(amount),
                "status": status.value,
            },
        )
        return commission

    async def _referrer_of(self, referred_user_id: int) -> AffiliateProgram | None:
        """Get the active program that referred a user, if any."""
        user = await self.user_repo.get_by_id(referred_user_id)
        if user is None:
            raise UserNotFound()

        if not user.referred_by_code:
            return None

        return await self.resolver.find(user.referred_by_code, require_active=True)

    @transaction
    async def create_for_user(
        self,
        referred_user_id: int,
        base_amount: Decimal,
        commission_type: CommissionType,
        related: RelatedEntity | None = None,
        description: str | None = None,
        verification_data: dict[str, Any] | None = None,
    ) -> AffiliateCommission | None:
        """
        Create the commission owed for an event of a referred user.

        Verification follows the static policy of the commission type.

        Args:
            referred_user_id: User who triggered the event
            base_amount: Amount the commission is computed from
            commission_type: Event type
            related: Origin record
            description: Human-readable description
            verification_data: Data an admin needs to verify the event

        Returns:
            Created commission, or None when the user was not referred by an
            active affiliate or the commission would be zero

        Raises:
            UserNotFound: Referred user does not exist
        """
        affiliate = await self._referrer_of(referred_user_id)
        if affiliate is None:
            self.logger.debug(
                "No active referrer, commission skipped",
                extra={"referred_user_id": referred_user_id},
            )
            return None

        if calculate_commission_amount(base_amount, affiliate.commission_rate) <= 0:
            return None

        return await self._compute(
            base_amount,
            affiliate,
            requires_verification(commission_type),
            commission_type=commission_type,
            referred_user_id=referred_user_id,
            related=related,
            description=description,
            verification_data=verification_data,
        )

    async def create_academy_commission(
        self, referred_user_id: int, class_id: str | int, price: Decimal
    ) -> AffiliateCommission | None:
        """Commission for an academy class enrollment (auto-approved)."""
        return await self.create_for_user(
            referred_user_id,
            price,
            CommissionType.ACADEMY,
            related=RelatedEntity.academy_class(class_id),
            description="Academy class enrollment commission",
        )

    async def create_copy_trading_commission(
        self,
        referred_user_id: int,
        subscription_id: str | int,
        investment_amount: Decimal,
    ) -> AffiliateCommission | None:
        """Commission for a copy trading subscription (needs verification)."""
        investment_amount = Decimal(str(investment_amount))
        return await self.create_for_user(
            referred_user_id,
            investment_amount,
            CommissionType.COPY_TRADING,
            related=RelatedEntity.copy_trading_subscription(subscription_id),
            description=(
                "Copy trading subscription commission - "
                f"${investment_amount:.2f} investment"
            ),
            verification_data={
                "investment_amount": str(investment_amount),
                "subscription_id": str(subscription_id),
                "requires_deposit_verification": True,
            },
        )

    async def create_broker_account_commission(
        self,
        referred_user_id: int,
        opening_id: str | int,
        deposit_amount: Decimal,
    ) -> AffiliateCommission | None:
        """Commission for a broker account opening (needs verification)."""
        deposit_amount = Decimal(str(deposit_amount))
        return await self.create_for_user(
            referred_user_id,
            deposit_amount,
            CommissionType.BROKER_ACCOUNT,
            related=RelatedEntity.broker_account_opening(opening_id),
            description=(
                "Broker account opening commission - "
                f"${deposit_amount:.2f} deposit"
            ),
            verification_data={
                "deposit_amount": str(deposit_amount),
                "account_opening_id": str(opening_id),
                "requires_deposit_verification": True,
            },
        )

    async def create_subscription_commission(
        self,
        referred_user_id: int,
        subscription_id: str | int,
        price: Decimal,
    ) -> AffiliateCommission | None:
        """Commission for a premium subscription (auto-approved)."""
        return await self.create_for_user(
            referred_user_id,
            price,
            CommissionType.SUBSCRIPTION,
            related=RelatedEntity.subscription(subscription_id),
            description="Premium subscription commission",
        )

    @transaction
    async def verify_commission(
        self,
        commission_id: int,
        approved: bool,
        admin_id: int,
        rejection_reason: str | None = None,
    ) -> AffiliateCommission:
        """
        Approve or reject a PENDING commission.

        Approval credits the affiliate through the earnings ledger;
        rejection leaves earnings untouched.

        Args:
            commission_id: Commission ID
            approved: Approve (True) or reject (False)
            admin_id: Verifying admin
            rejection_reason: Reason stored on rejection

        Returns:
            Updated commission

        Raises:
            CommissionNotFound: No such commission
            CommissionAlreadyProcessed: Commission is not PENDING
        """
        commission = await self.commission_repo.get_by_id(
            commission_id, for_update=True
        )
        if commission is None:
            raise CommissionNotFound()

        if not commission.is_pending:
            raise CommissionAlreadyProcessed()

        await self._finish_verification(
            commission, approved, admin_id, rejection_reason
        )
        return commission

    async def _finish_verification(
        self,
        commission: AffiliateCommission,
        approved: bool,
        admin_id: int | None,
        rejection_reason: str | None = None,
    ) -> None:
        commission.verified_at = utc_now()
        commission.verified_by = admin_id

        if approved:
            commission.status = CommissionStatus.APPROVED.value
            await self.session.flush()
            await self.ledger.apply_approved(
                commission.affiliate_program_id,
                commission.amount,
                commission.referred_user_id,
            )
        else:
            commission.status = CommissionStatus.REJECTED.value
            commission.rejection_reason = rejection_reason
            await self.session.flush()
            await self.ledger.apply_rejection(commission)

        self.logger.info(
            "Commission verified",
            extra={
                "commission_id": commission.id,
                "status": commission.status,
                "admin_id": admin_id,
            },
        )

    @transaction
    async def approve_for_related_entity(
        self,
        referred_user_id: int,
        related: RelatedEntity,
        commission_type: CommissionType,
        base_amount: Decimal,
        admin_id: int | None = None,
        description: str | None = None,
    ) -> AffiliateCommission | None:
        """
        Approve the commission of an activated subscription/account opening.

        Approves the existing PENDING commission for the origin record, or
        creates it directly as APPROVED when none exists. A commission that
        is already approved or rejected is returned unchanged.

        Args:
            referred_user_id: User who owns the activated record
            related: Activated record
            commission_type: Event type
            base_amount: Amount used when the commission must be created
            admin_id: Activating admin
            description: Description used when the commission must be created

        Returns:
            The commission, or None when the user has no active referrer
        """
        affiliate = await self._referrer_of(referred_user_id)
        if affiliate is None:
            return None

        commission = await self.commission_repo.find_for_related_entity(
            affiliate.id,
            referred_user_id,
            related,
            CommissionType(commission_type).value,
            for_update=True,
        )

        if commission is not None:
            if commission.is_pending:
                await self._finish_verification(commission, True, admin_id)
            return commission

        if calculate_commission_amount(base_amount, affiliate.commission_rate) <= 0:
            return None

        commission = await self._compute(
            base_amount,
            affiliate,
            False,
            commission_type=commission_type,
            referred_user_id=referred_user_id,
            related=related,
            description=description,
            verification_data=None,
        )
        commission.verified_at = utc_now()
        commission.verified_by = admin_id
        await self.session.flush()
        return commission
