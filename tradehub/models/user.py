"""
User model.

Minimal view of a platform user as seen by the affiliate core.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base


if TYPE_CHECKING:
    from tradehub.models.affiliate_program import AffiliateProgram
    from tradehub.models.monthly_challenge import MonthlyChallenge


class User(Base):
    """User model - platform accounts that can refer or be referred."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )

    # Affiliate code this user signed up with (None if not referred)
    referred_by_code: Mapped[str | None] = mapped_column(
        String(32), nullable=True, index=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    affiliate_program: Mapped["AffiliateProgram | None"] = relationship(
        "AffiliateProgram", back_populates="user", uselist=False
    )
    monthly_challenges: Mapped[list["MonthlyChallenge"]] = relationship(
        "MonthlyChallenge", back_populates="user"
    )

    @property
    def display_name(self) -> str:
        """Name used for affiliate codes and admin listings."""
        return self.name or self.email

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, email={self.email!r})>"
