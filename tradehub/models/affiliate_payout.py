"""
AffiliatePayout model.

A disbursement moving earnings from pending to paid (or to failed).
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base
from tradehub.models.enums import PayoutStatus
from tradehub.models.types import MoneyType


if TYPE_CHECKING:
    from tradehub.models.affiliate_program import AffiliateProgram


class AffiliatePayout(Base):
    """AffiliatePayout entity."""

    __tablename__ = "affiliate_payouts"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_affiliate_payout_amount_positive'
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

    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    method: Mapped[str] = mapped_column(
        String(50), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PayoutStatus.PENDING.value,
        index=True,
    )
    transaction_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    affiliate_program: Mapped["AffiliateProgram"] = relationship(
        "AffiliateProgram", back_populates="payouts"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliatePayout(id={self.id}, program={self.affiliate_program_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
