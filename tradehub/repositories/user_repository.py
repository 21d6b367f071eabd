"""
User repository.

Data access layer for User model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.models.user import User
from tradehub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_many(self, user_ids: list[int]) -> list[User]:
        """
        Get users by a list of IDs.

        Args:
            user_ids: User IDs (order is not preserved)

        Returns:
            List of users found
        """
        if not user_ids:
            return []

        stmt = select(User).where(User.id.in_(user_ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
