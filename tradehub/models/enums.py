"""
Enumerations shared by affiliate models.

Values are stored as plain strings in the database.
"""

from dataclasses import dataclass
from enum import StrEnum


class AffiliateTier(StrEnum):
    """Referral-count based bracket that determines the commission rate."""

    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


class ReferralStatus(StrEnum):
    """Affiliate referral status."""

    PENDING = "PENDING"
    CONVERTED = "CONVERTED"


class CommissionType(StrEnum):
    """Commissionable event type."""

    ACADEMY = "ACADEMY"
    COPY_TRADING = "COPY_TRADING"
    BROKER_ACCOUNT = "BROKER_ACCOUNT"
    SUBSCRIPTION = "SUBSCRIPTION"
    OTHER = "OTHER"


class CommissionStatus(StrEnum):
    """Commission status. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PayoutStatus(StrEnum):
    """Payout status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class RelatedEntityType(StrEnum):
    """Kind of record a commission originates from."""

    ACADEMY_CLASS = "ACADEMY_CLASS"
    COPY_TRADING_SUBSCRIPTION = "COPY_TRADING_SUBSCRIPTION"
    BROKER_ACCOUNT_OPENING = "BROKER_ACCOUNT_OPENING"
    SUBSCRIPTION = "SUBSCRIPTION"


@dataclass(frozen=True)
class RelatedEntity:
    """Typed reference to the record a commission was earned on."""

    kind: RelatedEntityType
    id: str

    @classmethod
    def academy_class(cls, class_id: str | int) -> "RelatedEntity":
        return cls(RelatedEntityType.ACADEMY_CLASS, str(class_id))

    @classmethod
    def copy_trading_subscription(cls, subscription_id: str | int) -> "RelatedEntity":
        return cls(RelatedEntityType.COPY_TRADING_SUBSCRIPTION, str(subscription_id))

    @classmethod
    def broker_account_opening(cls, opening_id: str | int) -> "RelatedEntity":
        return cls(RelatedEntityType.BROKER_ACCOUNT_OPENING, str(opening_id))

    @classmethod
    def subscription(cls, subscription_id: str | int) -> "RelatedEntity":
        return cls(RelatedEntityType.SUBSCRIPTION, str(subscription_id))
