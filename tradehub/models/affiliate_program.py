"""
AffiliateProgram model.

One row per enrolled affiliate, holding the code, tier and running earnings.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base
from tradehub.models.enums import AffiliateTier
from tradehub.models.types import JSONType, MoneyType, PercentType


if TYPE_CHECKING:
    from tradehub.models.affiliate_commission import AffiliateCommission
    from tradehub.models.affiliate_payout import AffiliatePayout
    from tradehub.models.affiliate_referral import AffiliateReferral
    from tradehub.models.user import User


class AffiliateProgram(Base):
    """
    AffiliateProgram entity.

    Earnings fields:
    - total_earnings: everything ever credited (approved commissions, rewards)
    - pending_earnings: credited but not yet paid out
    - paid_earnings: paid out through completed payouts

    total_earnings == pending_earnings + paid_earnings is expected to hold but
    is not enforced by the database.

    Attributes:
        id: Primary key
        user_id: Owning user (one program per user)
        affiliate_code: Unique referral code (XEN-XXYY-NNNN)
        tier: Current tier (BRONZE/SILVER/GOLD/PLATINUM)
        commission_rate: Commission percentage derived from tier
        total_referrals: Number of referred users
        is_active: Inactive programs do not accept new signups or commissions
        payment_method: Preferred payout method
        payout_details: Free-form payout details (account numbers etc.)
    """

    __tablename__ = "affiliate_programs"
    __table_args__ = (
        CheckConstraint(
            'total_earnings >= 0',
            name='check_affiliate_total_earnings_non_negative'
        ),
        CheckConstraint(
            'pending_earnings >= 0',
            name='check_affiliate_pending_earnings_non_negative'
        ),
        CheckConstraint(
            'paid_earnings >= 0',
            name='check_affiliate_paid_earnings_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # User reference
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    affiliate_code: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, index=True
    )
    full_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    # Tier
    tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AffiliateTier.BRONZE.value
    )
    commission_rate: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False, default=Decimal("10")
    )
    total_referrals: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    # Earnings
    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    pending_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    paid_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )

    # Payout preferences
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payout_details: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="affiliate_program"
    )
    referrals: Mapped[list["AffiliateReferral"]] = relationship(
        "AffiliateReferral", back_populates="affiliate_program"
    )
    commissions: Mapped[list["AffiliateCommission"]] = relationship(
        "AffiliateCommission", back_populates="affiliate_program"
    )
    payouts: Mapped[list["AffiliatePayout"]] = relationship(
        "AffiliatePayout", back_populates="affiliate_program"
    )

    @property
    def earnings_drift(self) -> Decimal:
        """Difference between total and pending + paid (0 when consistent)."""
        return self.total_earnings - (self.pending_earnings + self.paid_earnings)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliateProgram(id={self.id}, code={self.affiliate_code!r}, "
            f"tier={self.tier}, pending={self.pending_earnings})>"
        )
