"""
Affiliate registration.

Enrolls users into the affiliate program and generates their referral codes.
"""

import secrets
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.config.settings import settings
from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.repositories.user_repository import UserRepository
from tradehub.services.affiliate.config import (
    CODE_NAME_PAD,
    CODE_NUMBER_MAX,
    CODE_NUMBER_MIN,
    DEFAULT_COMMISSION_RATE,
    DEFAULT_TIER,
)
from tradehub.services.base_service import BaseService, transaction
from tradehub.utils.exceptions import (
    AffiliateCodeUnavailable,
    AlreadyRegisteredAffiliate,
    UserNotFound,
)


def _name_part(word: str) -> str:
    letters = "".join(ch for ch in word if ch.isalpha()).upper()
    return letters[:2].ljust(2, CODE_NAME_PAD)


def generate_affiliate_code(
    name: str | None,
    number: int | None = None,
    prefix: str = "XEN",
) -> str:
    """
    Generate an affiliate code candidate.

    Format PREFIX-FFLL-NNNN: FF and LL are the first two letters of the
    first and last word of the name, NNNN is a number in 1000..9999.

    Examples:
        >>> generate_affiliate_code("John Doe", number=1234)
        'XEN-JODO-1234'
        >>> generate_affiliate_code("Cher", number=5000)
        'XEN-CHXX-5000'

    Args:
        name: Full name of the affiliate
        number: Fixed number (random when omitted)
        prefix: Code prefix

    Returns:
        Code candidate (uniqueness is not checked)
    """
    words = (name or "").split()
    first = _name_part(words[0]) if words else CODE_NAME_PAD * 2
    last = _name_part(words[-1]) if len(words) > 1 else CODE_NAME_PAD * 2

    if number is None:
        number = CODE_NUMBER_MIN + secrets.randbelow(
            CODE_NUMBER_MAX - CODE_NUMBER_MIN + 1
        )
    elif not CODE_NUMBER_MIN <= number <= CODE_NUMBER_MAX:
        raise ValueError(
            f"Code number must be in {CODE_NUMBER_MIN}..{CODE_NUMBER_MAX}"
        )

    return f"{prefix}-{first}{last}-{number}"


class AffiliateRegistrationManager(BaseService):
    """Registers users as affiliates."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize registration manager."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.program_repo = AffiliateProgramRepository(session)

    async def _unique_code(self, name: str | None) -> str:
        attempts = settings.affiliate_code_max_attempts

        for _ in range(attempts):
            code = generate_affiliate_code(
                name, prefix=settings.affiliate_code_prefix
            )
            if not await self.program_repo.code_exists(code):
                return code

        self.logger.error(
            "Affiliate code space exhausted for name",
            extra={"name": name, "attempts": attempts},
        )
        raise AffiliateCodeUnavailable()

    @transaction
    async def register(
        self,
        user_id: int,
        full_name: str | None = None,
        phone: str | None = None,
        payment_method: str | None = None,
        payout_details: dict[str, Any] | None = None,
    ) -> AffiliateProgram:
        """
        Create an affiliate program for a user.

        New programs start at BRONZE with a 10% commission rate.

        Args:
            user_id: User to enroll
            full_name: Name used for the code (defaults to the user's name)
            phone: Contact phone
            payment_method: Preferred payout method
            payout_details: Payout account details

        Returns:
            Created program

        Raises:
            UserNotFound: User does not exist
            AlreadyRegisteredAffiliate: User already has a program
            AffiliateCodeUnavailable: No free code after max attempts
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound()

        if await self.program_repo.get_by_user_id(user_id) is not None:
            raise AlreadyRegisteredAffiliate()

        name = full_name or user.name
        code = await self._unique_code(name)

        try:
            async with self.session.begin_nested():
                program = await self.program_repo.create(
                    user_id=user_id,
                    affiliate_code=code,
                    full_name=name,
                    phone=phone,
                    tier=DEFAULT_TIER.value,
                    commission_rate=DEFAULT_COMMISSION_RATE,
                    total_referrals=0,
                    is_active=True,
                    payment_method=payment_method,
                    payout_details=payout_details or {},
                )
        except IntegrityError as e:
            # Concurrent registration of the same user won the insert
            if await self.program_repo.get_by_user_id(user_id) is not None:
                raise AlreadyRegisteredAffiliate() from e
            raise

        self.logger.info(
            "Affiliate registered",
            extra={
                "user_id": user_id,
                "affiliate_program_id": program.id,
                "affiliate_code": code,
            },
        )
        return program
