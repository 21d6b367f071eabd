"""
AffiliateCommission model.

A monetary credit owed to an affiliate for one commissionable event.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradehub.models.base import Base
from tradehub.models.enums import (
    CommissionStatus,
    RelatedEntity,
    RelatedEntityType,
)
from tradehub.models.types import JSONType, MoneyType


if TYPE_CHECKING:
    from tradehub.models.affiliate_program import AffiliateProgram


class AffiliateCommission(Base):
    """
    AffiliateCommission entity.

    Created PENDING when the event needs a manual check (copy trading, broker
    account), otherwise APPROVED straight away. Only APPROVED commissions are
    reflected in the affiliate's earnings.
    """

    __tablename__ = "affiliate_commissions"
    __table_args__ = (
        CheckConstraint(
            'amount >= 0', name='check_affiliate_commission_amount_non_negative'
        ),
        Index(
            'idx_affiliate_commission_related',
            'related_entity_type',
            'related_entity_id',
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
    referred_user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    type: Mapped[str] = mapped_column(
        String(30), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionStatus.PENDING.value,
        index=True,
    )

    # Verification
    requires_verification: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    verification_data: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    # Origin of the commission
    related_entity_type: Mapped[str | None] = mapped_column(
        String(40), nullable=True
    )
    related_entity_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    affiliate_program: Mapped["AffiliateProgram"] = relationship(
        "AffiliateProgram", back_populates="commissions"
    )

    @property
    def related_entity(self) -> RelatedEntity | None:
        """Origin of the commission as a typed value."""
        if not self.related_entity_type or self.related_entity_id is None:
            return None
        return RelatedEntity(
            RelatedEntityType(self.related_entity_type),
            self.related_entity_id,
        )

    @related_entity.setter
    def related_entity(self, value: RelatedEntity | None) -> None:
        if value is None:
            self.related_entity_type = None
            self.related_entity_id = None
        else:
            self.related_entity_type = value.kind.value
            self.related_entity_id = value.id

    @property
    def is_pending(self) -> bool:
        """Check if commission still awaits verification."""
        return self.status == CommissionStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliateCommission(id={self.id}, program={self.affiliate_program_id}, "
            f"amount={self.amount}, type={self.type}, status={self.status})>"
        )
