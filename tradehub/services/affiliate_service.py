"""
Affiliate service.

Request-boundary facade over the affiliate managers. Every method returns
a ServiceResult: domain errors become a failed result with a stable
error_code, database errors propagate to the caller.
"""

from collections.abc import Awaitable
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.enums import CommissionType, PayoutStatus, RelatedEntity
from tradehub.services.affiliate import (
    AffiliateRegistrationManager,
    AffiliateStatisticsManager,
    CommissionCalculator,
    ReferralTracker,
)
from tradehub.services.base_service import BaseService, ServiceResult
from tradehub.services.monthly_challenge import MonthlyChallengeTracker
from tradehub.services.payout import PayoutProcessor
from tradehub.utils.exceptions import AffiliateError


T = TypeVar("T")


class AffiliateService(BaseService):
    """
    Affiliate service facade.

    Delegates to specialized managers:
    - AffiliateRegistrationManager: enrollment
    - ReferralTracker: referral attachment/tracking
    - CommissionCalculator: commissions and their verification
    - MonthlyChallengeTracker: monthly challenge
    - PayoutProcessor: payouts
    - AffiliateStatisticsManager: dashboard
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate service."""
        super().__init__(session)
        self.registration = AffiliateRegistrationManager(session)
        self.tracker = ReferralTracker(session)
        self.commissions = CommissionCalculator(session)
        self.challenges = MonthlyChallengeTracker(session)
        self.payouts = PayoutProcessor(session)
        self.statistics = AffiliateStatisticsManager(session)

    async def _run(self, operation: Awaitable[T]) -> ServiceResult:
        try:
            data = await operation
        except AffiliateError as e:
            return ServiceResult.from_error(e)
        return ServiceResult.ok(data)

    # Registration and referrals

    async def register_affiliate(
        self,
        user_id: int,
        full_name: str | None = None,
        phone: str | None = None,
        payment_method: str | None = None,
        payout_details: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Enroll a user as affiliate."""
        return await self._run(
            self.registration.register(
                user_id,
                full_name=full_name,
                phone=phone,
                payment_method=payment_method,
                payout_details=payout_details,
            )
        )

    async def attach_signup_referral(
        self, user_id: int, referral_code: str | None
    ) -> ServiceResult:
        """Attach signup referral code (invalid codes are ignored)."""
        return await self._run(
            self.tracker.attach_signup_referral(user_id, referral_code)
        )

    async def track_referral(
        self, referral_code: str, user_id: int
    ) -> ServiceResult:
        """Track a referral (idempotent)."""
        return await self._run(
            self.tracker.track_referral(referral_code, user_id)
        )

    async def get_dashboard(self, user_id: int) -> ServiceResult:
        """Get affiliate dashboard statistics."""
        return await self._run(self.statistics.get_dashboard(user_id))

    # Commissions

    async def record_commission(
        self,
        referred_user_id: int,
        base_amount: Decimal,
        commission_type: CommissionType,
        related: RelatedEntity | None = None,
        description: str | None = None,
    ) -> ServiceResult:
        """Create the commission for an event of a referred user."""
        return await self._run(
            self.commissions.create_for_user(
                referred_user_id,
                base_amount,
                commission_type,
                related=related,
                description=description,
            )
        )

    async def verify_commission(
        self,
        commission_id: int,
        approved: bool,
        admin_id: int,
        rejection_reason: str | None = None,
    ) -> ServiceResult:
        """Approve or reject a PENDING commission."""
        return await self._run(
            self.commissions.verify_commission(
                commission_id, approved, admin_id, rejection_reason
            )
        )

    # Monthly challenge

    async def get_challenge_progress(
        self, user_id: int, month: str | None = None
    ) -> ServiceResult:
        """Get monthly challenge progress."""
        return await self._run(self.challenges.get_progress(user_id, month))

    async def record_subscription(
        self, referred_user_id: int, at: datetime | None = None
    ) -> ServiceResult:
        """Count a qualifying subscription towards the referrer's challenge."""
        return await self._run(
            self.challenges.record_qualifying_subscription(referred_user_id, at)
        )

    async def claim_challenge_reward(
        self, user_id: int, month: str | None = None
    ) -> ServiceResult:
        """Claim the monthly challenge reward."""
        return await self._run(self.challenges.claim(user_id, month))

    async def get_challenge_overview(self, month: str | None = None) -> ServiceResult:
        """Admin overview of a challenge month."""
        return await self._run(self.challenges.get_month_overview(month))

    # Payouts

    async def create_payout(
        self,
        program_id: int,
        amount: Decimal,
        method: str,
        notes: str | None = None,
    ) -> ServiceResult:
        """Create a PENDING payout."""
        return await self._run(
            self.payouts.create_payout(program_id, amount, method, notes)
        )

    async def update_payout_status(
        self,
        payout_id: int,
        new_status: PayoutStatus | str,
        transaction_id: str | None = None,
    ) -> ServiceResult:
        """Move a payout to a new status."""
        return await self._run(
            self.payouts.transition(payout_id, new_status, transaction_id)
        )

    async def process_payout(
        self,
        program_id: int,
        amount: Decimal,
        method: str,
        transaction_id: str,
        notes: str | None = None,
    ) -> ServiceResult:
        """Record an immediate payout from pending earnings."""
        return await self._run(
            self.payouts.process_payout(
                program_id, amount, method, transaction_id, notes
            )
        )

    async def list_payouts(
        self, status: PayoutStatus | str | None = None, limit: int = 100
    ) -> ServiceResult:
        """List payouts, newest first."""
        return await self._run(self.payouts.list_payouts(status, limit))
