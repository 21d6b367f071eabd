"""
Referral tracker.

Links referred users to the affiliate whose code they used.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.models.affiliate_referral import AffiliateReferral
from tradehub.models.enums import ReferralStatus
from tradehub.models.user import User
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.repositories.affiliate_referral_repository import (
    AffiliateReferralRepository,
)
from tradehub.repositories.user_repository import UserRepository
from tradehub.services.affiliate.referral_resolver import ReferralResolver
from tradehub.services.affiliate.tier_engine import apply_tier
from tradehub.services.base_service import BaseService, transaction
from tradehub.utils.exceptions import InvalidReferralCode, UserNotFound


class ReferralTracker(BaseService):
    """
    Referral tracker service.

    Two entry points with different strictness:
    - attach_signup_referral: used at signup, requires an active program
      and silently ignores bad codes
    - track_referral: direct tracking call, accepts inactive programs and
      is idempotent per (affiliate, user) pair
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral tracker."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.program_repo = AffiliateProgramRepository(session)
        self.referral_repo = AffiliateReferralRepository(session)
        self.resolver = ReferralResolver(session)

    async def _get_user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def _record_referral(
        self, program: AffiliateProgram, user: User
    ) -> AffiliateReferral:
        """
        Create the PENDING referral, bump the count and re-tier.

        If the pair was inserted concurrently, the existing referral is
        returned and the count is left alone.
        """
        try:
            async with self.session.begin_nested():
                referral = await self.referral_repo.create(
                    affiliate_program_id=program.id,
                    referred_user_id=user.id,
                    status=ReferralStatus.PENDING.value,
                )
        except IntegrityError:
            existing = await self.referral_repo.get_pair(program.id, user.id)
            if existing is None:
                raise
            self.logger.info(
                "Referral recorded concurrently, reusing it",
                extra={
                    "affiliate_program_id": program.id,
                    "referred_user_id": user.id,
                },
            )
            return existing

        program = await self.program_repo.increment_referrals(program.id)
        if apply_tier(program):
            await self.session.flush()

        self.logger.info(
            "Referral recorded",
            extra={
                "affiliate_program_id": program.id,
                "referred_user_id": user.id,
                "total_referrals": program.total_referrals,
                "tier": program.tier,
            },
        )
        return referral

    @transaction
    async def attach_signup_referral(
        self, user_id: int, referral_code: str | None
    ) -> AffiliateReferral | None:
        """
        Attach a referral code given at signup.

        Unknown codes and codes of inactive programs are ignored: the user
        keeps no code and no referral is created. A referred_by_code the
        user already has is never replaced.

        Args:
            user_id: Newly registered user
            referral_code: Code entered at signup

        Returns:
            Created referral, or None if the code was ignored

        Raises:
            UserNotFound: User does not exist
        """
        user = await self._get_user(user_id)

        program = await self.resolver.find(referral_code, require_active=True)
        if program is None:
            if referral_code:
                self.logger.info(
                    "Ignoring invalid signup referral code",
                    extra={"user_id": user_id, "referral_code": referral_code},
                )
            return None

        if program.user_id == user.id:
            self.logger.warning(
                "Self-referral ignored",
                extra={"user_id": user_id, "referral_code": referral_code},
            )
            return None

        existing = await self.referral_repo.get_pair(program.id, user.id)
        if existing is not None:
            return existing

        # A code recorded earlier keeps the attribution
        if not user.referred_by_code:
            user.referred_by_code = program.affiliate_code
            await self.session.flush()

        return await self._record_referral(program, user)

    @transaction
    async def track_referral(
        self, referral_code: str, user_id: int
    ) -> AffiliateReferral:
        """
        Track a referral for an existing user.

        Does not check whether the program is active. Calling it again for
        the same pair returns the existing referral without side effects.

        Args:
            referral_code: Affiliate code
            user_id: Referred user

        Returns:
            Existing or newly created referral

        Raises:
            InvalidReferralCode: Unknown code or self-referral
            UserNotFound: User does not exist
        """
        program = await self.resolver.resolve(referral_code, require_active=False)
        user = await self._get_user(user_id)

        if program.user_id == user.id:
            raise InvalidReferralCode("Cannot use your own referral code")

        existing = await self.referral_repo.get_pair(program.id, user.id)
        if existing is not None:
            return existing

        if not user.referred_by_code:
            user.referred_by_code = program.affiliate_code
            await self.session.flush()

        return await self._record_referral(program, user)
