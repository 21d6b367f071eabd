"""
Monthly challenge tracker.

Counts qualifying referrals per affiliate and calendar month, and pays the
reward once the threshold is reached.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.config.settings import settings
from tradehub.models.affiliate_payout import AffiliatePayout
from tradehub.models.enums import PayoutStatus
from tradehub.models.monthly_challenge import MonthlyChallenge
from tradehub.repositories.affiliate_payout_repository import (
    AffiliatePayoutRepository,
)
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.repositories.monthly_challenge_repository import (
    MonthlyChallengeRepository,
)
from tradehub.repositories.user_repository import UserRepository
from tradehub.services.affiliate.earnings_ledger import EarningsLedger
from tradehub.services.affiliate.referral_resolver import ReferralResolver
from tradehub.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from tradehub.utils.datetime_utils import is_valid_month_key, month_key, utc_now
from tradehub.utils.exceptions import (
    AffiliateError,
    AlreadyClaimed,
    InvalidMonth,
    NoAffiliateAccount,
    NotEligible,
)


# Payout method used when the affiliate has not chosen one
DEFAULT_PAYOUT_METHOD = "PENDING"


def _resolve_month(month: str | None) -> str:
    if month is None:
        return month_key()
    if not is_valid_month_key(month):
        raise InvalidMonth(f"Invalid month key: {month!r}, expected YYYY-MM")
    return month


class MonthlyChallengeTracker(BaseService):
    """
    Monthly challenge service.

    One MonthlyChallenge row per (referrer, month). Each qualifying
    subscription of a referred user adds to the referrer's count for the
    month of the event; reaching the threshold allows a single claim.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize monthly challenge tracker."""
        super().__init__(session)
        self.challenge_repo = MonthlyChallengeRepository(session)
        self.program_repo = AffiliateProgramRepository(session)
        self.payout_repo = AffiliatePayoutRepository(session)
        self.user_repo = UserRepository(session)
        self.resolver = ReferralResolver(session)
        self.ledger = EarningsLedger(session)

    @property
    def required_referrals(self) -> int:
        return settings.monthly_challenge_required_referrals

    async def _get_or_create(
        self, user_id: int, month: str, for_update: bool = False
    ) -> MonthlyChallenge:
        challenge = await self.challenge_repo.get_for_month(
            user_id, month, for_update=for_update
        )
        if challenge is not None:
            return challenge

        try:
            async with self.session.begin_nested():
                return await self.challenge_repo.create(
                    user_id=user_id,
                    month=month,
                    referral_count=0,
                    qualified_referrals=[],
                    reward_claimed=False,
                    reward_amount=settings.monthly_challenge_reward_amount,
                )
        except IntegrityError:
            # Another transaction created the row for this month first
            self.logger.debug(
                "Challenge row created concurrently, reusing it",
                extra={"user_id": user_id, "month": month},
            )

        return await self.challenge_repo.get_for_month(
            user_id, month, for_update=for_update
        )

    @transaction
    async def get_progress(
        self, user_id: int, month: str | None = None
    ) -> MonthlyChallenge:
        """
        Get challenge progress of a user, creating an empty record if needed.

        Args:
            user_id: Referring user
            month: Month key (default: current UTC month)

        Returns:
            Challenge record for the month
        """
        return await self._get_or_create(user_id, _resolve_month(month))

    @transaction
    async def record_qualifying_subscription(
        self, referred_user_id: int, at: datetime | None = None
    ) -> MonthlyChallenge | None:
        """
        Count a referred user's subscription towards the referrer's challenge.

        The referrer is found through the user's referred_by_code; the
        program's active flag is not checked. With deduplication on, a user
        counts at most once per month. When auto-claim is enabled and the
        threshold is reached, the reward is claimed right away; a failed
        auto-claim is logged and does not affect the recorded progress.

        Args:
            referred_user_id: User who subscribed
            at: Subscription time (default: now)

        Returns:
            Updated challenge, or None when the user was not referred
        """
        user = await self.user_repo.get_by_id(referred_user_id)
        if user is None or not user.referred_by_code:
            return None

        program = await self.resolver.find(
            user.referred_by_code, require_active=False
        )
        if program is None:
            self.logger.warning(
                "Referred user has unknown referral code",
                extra={
                    "referred_user_id": referred_user_id,
                    "referral_code": user.referred_by_code,
                },
            )
            return None

        month = month_key(at)
        challenge = await self._get_or_create(
            program.user_id, month, for_update=True
        )

        qualified = list(challenge.qualified_referrals or [])
        if settings.monthly_challenge_deduplicate and referred_user_id in qualified:
            self.logger.debug(
                "Referral already counted this month",
                extra={
                    "referred_user_id": referred_user_id,
                    "month": month,
                },
            )
            return challenge

        qualified.append(referred_user_id)
        # JSON column: assign a new list so the change is tracked
        challenge.qualified_referrals = qualified
        challenge.referral_count = challenge.referral_count + 1
        await self.session.flush()

        self.logger.info(
            "Qualifying referral recorded",
            extra={
                "referrer_user_id": program.user_id,
                "referred_user_id": referred_user_id,
                "month": month,
                "referral_count": challenge.referral_count,
            },
        )

        if (
            settings.monthly_challenge_auto_claim
            and challenge.is_claimable(self.required_referrals)
        ):
            await self._auto_claim(challenge)

        return challenge

    async def _auto_claim(self, challenge: MonthlyChallenge) -> None:
        try:
            async with self.session.begin_nested():
                await self._claim(challenge)
        except AffiliateError as e:
            await self.session.refresh(challenge)
            self.logger.warning(
                "Auto-claim of monthly challenge failed",
                extra={
                    "user_id": challenge.user_id,
                    "month": challenge.month,
                    "error_code": e.code,
                },
            )

    @transaction
    async def claim(
        self, affiliate_user_id: int, month: str | None = None
    ) -> AffiliatePayout:
        """
        Claim the monthly challenge reward.

        Checks, in order: AlreadyClaimed, NotEligible, NoAffiliateAccount.
        On success the challenge is marked claimed, a PENDING payout of the
        reward amount is created and the reward is credited to the
        affiliate's earnings, all in one transaction.

        Args:
            affiliate_user_id: Referring user claiming the reward
            month: Month key (default: current UTC month)

        Returns:
            Created payout

        Raises:
            AlreadyClaimed: Reward already claimed for the month
            NotEligible: Not enough qualified referrals
            NoAffiliateAccount: User has no affiliate program
        """
        month = _resolve_month(month)
        challenge = await self.challenge_repo.get_for_month(
            affiliate_user_id, month, for_update=True
        )
        if challenge is None:
            raise NotEligible("No challenge progress for this month")

        return await self._claim(challenge)

    async def _claim(self, challenge: MonthlyChallenge) -> AffiliatePayout:
        if challenge.reward_claimed:
            raise AlreadyClaimed()

        if challenge.referral_count < self.required_referrals:
            raise NotEligible(
                f"Need {self.required_referrals} qualified referrals, "
                f"have {challenge.referral_count}"
            )

        program = await self.program_repo.get_by_user_id(challenge.user_id)
        if program is None:
            raise NoAffiliateAccount()

        challenge.reward_claimed = True
        challenge.claimed_at = utc_now()
        await self.session.flush()

        reward = Decimal(str(challenge.reward_amount))
        payout = await self.payout_repo.create(
            affiliate_program_id=program.id,
            amount=reward,
            method=program.payment_method or DEFAULT_PAYOUT_METHOD,
            status=PayoutStatus.PENDING.value,
            notes=(
                f"Monthly Challenge Reward - {challenge.month} "
                f"({challenge.referral_count} qualified referrals)"
            ),
        )
        await self.ledger.credit_reward(program.id, reward)

        self.logger.info(
            "Monthly challenge reward claimed",
            extra={
                "user_id": challenge.user_id,
                "month": challenge.month,
                "payout_id": payout.id,
                "amount": str(reward),
            },
        )
        return payout

    @log_operation
    async def get_month_overview(self, month: str | None = None) -> dict:
        """
        Admin overview of a month.

        Args:
            month: Month key (default: current UTC month)

        Returns:
            Dict with month, participants (highest count first) and stats:
            total_participants, completed_challenges, pending_rewards,
            total_rewards_paid
        """
        month = _resolve_month(month)
        challenges = await self.challenge_repo.list_for_month(month)
        required = self.required_referrals

        users = await self.user_repo.get_many([c.user_id for c in challenges])
        users_by_id = {user.id: user for user in users}

        participants = []
        for challenge in challenges:
            user = users_by_id.get(challenge.user_id)
            participants.append({
                "user_id": challenge.user_id,
                "name": user.display_name if user else None,
                "email": user.email if user else None,
                "referral_count": challenge.referral_count,
                "reward_claimed": challenge.reward_claimed,
                "reward_amount": challenge.reward_amount,
                "claimed_at": challenge.claimed_at,
            })

        completed = [c for c in challenges if c.referral_count >= required]
        return {
            "month": month,
            "participants": participants,
            "stats": {
                "total_participants": len(challenges),
                "completed_challenges": len(completed),
                "pending_rewards": sum(
                    1 for c in completed if not c.reward_claimed
                ),
                "total_rewards_paid": sum(
                    (Decimal(str(c.reward_amount)) for c in challenges
                     if c.reward_claimed),
                    Decimal("0"),
                ),
            },
        }
