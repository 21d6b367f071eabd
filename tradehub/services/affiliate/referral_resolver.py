"""
Referral resolver.

Maps a referral code to the affiliate program that owns it.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.affiliate_program import AffiliateProgram
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.utils.exceptions import InvalidReferralCode


class ReferralResolver:
    """Resolves referral codes. Read-only."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral resolver."""
        self.session = session
        self.program_repo = AffiliateProgramRepository(session)

    async def find(
        self, code: str | None, require_active: bool = True
    ) -> AffiliateProgram | None:
        """
        Find program by exact (case-sensitive) code.

        Args:
            code: Referral code
            require_active: Treat inactive programs as not found

        Returns:
            Program or None
        """
        if not code:
            return None

        program = await self.program_repo.get_by_code(code)

        if program is None:
            return None
        if require_active and not program.is_active:
            return None

        return program

    async def resolve(
        self, code: str | None, require_active: bool = True
    ) -> AffiliateProgram:
        """
        Resolve code to its program.

        Args:
            code: Referral code
            require_active: Reject inactive programs

        Returns:
            Program owning the code

        Raises:
            InvalidReferralCode: Unknown code, or inactive program
                when require_active is set
        """
        program = await self.find(code, require_active=require_active)

        if program is None:
            raise InvalidReferralCode()

        return program
