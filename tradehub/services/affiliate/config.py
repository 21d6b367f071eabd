"""
Affiliate program configuration.

Contains constants for tiers, commission rates and verification policy.
"""

from decimal import Decimal

from tradehub.models.enums import AffiliateTier, CommissionType


# Tier brackets, highest first: (minimum total referrals, tier, rate percent)
TIER_THRESHOLDS: tuple[tuple[int, AffiliateTier, Decimal], ...] = (
    (51, AffiliateTier.PLATINUM, Decimal("20")),
    (26, AffiliateTier.GOLD, Decimal("15")),
    (11, AffiliateTier.SILVER, Decimal("12")),
    (0, AffiliateTier.BRONZE, Decimal("10")),
)

DEFAULT_TIER = AffiliateTier.BRONZE
DEFAULT_COMMISSION_RATE = Decimal("10")

# Whether a commission of each type must be approved by an admin before it
# counts towards earnings. Unknown types always require verification.
VERIFICATION_POLICY: dict[CommissionType, bool] = {
    CommissionType.ACADEMY: False,
    CommissionType.SUBSCRIPTION: False,
    CommissionType.COPY_TRADING: True,
    CommissionType.BROKER_ACCOUNT: True,
    CommissionType.OTHER: True,
}

# Commission amounts are stored with cent precision
COMMISSION_QUANTUM = Decimal("0.01")

# Affiliate code layout: PREFIX-FFLL-NNNN
CODE_NUMBER_MIN = 1000
CODE_NUMBER_MAX = 9999
CODE_NAME_PAD = "X"
