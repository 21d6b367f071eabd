"""
MonthlyChallenge model.

Per-affiliate, per-calendar-month progress towards the referral reward.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base
from tradehub.models.types import JSONType, MoneyType


if TYPE_CHECKING:
    from tradehub.models.user import User


class MonthlyChallenge(Base):
    """
    MonthlyChallenge entity.

    Attributes:
        id: Primary key
        user_id: Referring user (affiliate owner)
        month: Calendar month, "YYYY-MM"
        referral_count: Number of qualifying referrals counted this month
        qualified_referrals: Ids of referred users that qualified
        reward_claimed: Whether the reward was claimed (terminal)
        reward_amount: Reward fixed when the record was created
        claimed_at: When the reward was claimed
    """

    __tablename__ = "monthly_challenges"
    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_monthly_challenge_user_month"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month: Mapped[str] = mapped_column(
        String(7), nullable=False, index=True
    )

    referral_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    qualified_referrals: Mapped[list[int]] = mapped_column(
        JSONType, nullable=False, default=list
    )

    reward_claimed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    reward_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("1000")
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="monthly_challenges"
    )

    def is_claimable(self, required_referrals: int) -> bool:
        """Check if the reward can be claimed."""
        return (
            not self.reward_claimed
            and self.referral_count >= required_referrals
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MonthlyChallenge(id={self.id}, user={self.user_id}, "
            f"month={self.month}, count={self.referral_count}, "
            f"claimed={self.reward_claimed})>"
        )
