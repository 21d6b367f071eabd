"""
AffiliateReferral model.

Links an affiliate program to a user who signed up with its code.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base
from tradehub.models.enums import ReferralStatus


if TYPE_CHECKING:
    from tradehub.models.affiliate_program import AffiliateProgram


class AffiliateReferral(Base):
    """AffiliateReferral entity. Status moves PENDING -> CONVERTED once."""

    __tablename__ = "affiliate_referrals"
    __table_args__ = (
        UniqueConstraint(
            "affiliate_program_id",
            "referred_user_id",
            name="uq_affiliate_referral_pair",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    affiliate_program_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliate_programs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referred_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReferralStatus.PENDING.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    conversion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    affiliate_program: Mapped["AffiliateProgram"] = relationship(
        "AffiliateProgram", back_populates="referrals"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliateReferral(id={self.id}, program={self.affiliate_program_id}, "
            f"user={self.referred_user_id}, status={self.status})>"
        )
