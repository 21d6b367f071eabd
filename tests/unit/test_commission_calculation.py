"""
Unit tests for commission calculation.

Tests cover:
- Commission amount formula and rounding
- Invalid base amounts and rates
- Verification policy per commission type
"""

from decimal import Decimal

import pytest

from tradehub.models.enums import CommissionType
from tradehub.services.affiliate import (
    VERIFICATION_POLICY,
    calculate_commission_amount,
    requires_verification,
)


class TestCommissionAmount:
    """Test calculate_commission_amount."""

    def test_basic_commission(self):
        """100 at 10% is 10.00."""
        assert calculate_commission_amount(Decimal("100"), Decimal("10")) == Decimal("10.00")

    def test_platinum_rate(self):
        """249.99 at 20% is 50.00 (49.998 rounded)."""
        assert calculate_commission_amount(Decimal("249.99"), Decimal("20")) == Decimal("50.00")

    def test_rounds_half_up_to_cents(self):
        """0.125 rounds up to 0.13."""
        # 1.25 * 10 / 100 = 0.125
        assert calculate_commission_amount(Decimal("1.25"), Decimal("10")) == Decimal("0.13")

    def test_result_has_cent_precision(self):
        """Result is quantized to two decimal places."""
        result = calculate_commission_amount(Decimal("33.33"), Decimal("12"))
        assert result == Decimal("4.00")
        assert result.as_tuple().exponent == -2

    def test_accepts_int_and_str(self):
        """Non-Decimal inputs are converted."""
        assert calculate_commission_amount(200, "15") == Decimal("30.00")

    @pytest.mark.parametrize("base", [Decimal("0"), Decimal("-50")])
    def test_non_positive_base_gives_zero(self, base):
        """Zero or negative base yields no commission."""
        assert calculate_commission_amount(base, Decimal("10")) == Decimal("0")

    def test_negative_rate_gives_zero(self):
        """Negative rate yields no commission."""
        assert calculate_commission_amount(Decimal("100"), Decimal("-5")) == Decimal("0")

    def test_zero_rate_gives_zero(self):
        """Zero rate is valid and yields zero."""
        assert calculate_commission_amount(Decimal("100"), Decimal("0")) == Decimal("0")


class TestVerificationPolicy:
    """Test the static verification policy."""

    def test_academy_auto_approved(self):
        assert requires_verification(CommissionType.ACADEMY) is False

    def test_subscription_auto_approved(self):
        assert requires_verification(CommissionType.SUBSCRIPTION) is False

    def test_copy_trading_needs_verification(self):
        assert requires_verification(CommissionType.COPY_TRADING) is True

    def test_broker_account_needs_verification(self):
        assert requires_verification(CommissionType.BROKER_ACCOUNT) is True

    def test_other_needs_verification(self):
        assert requires_verification(CommissionType.OTHER) is True

    def test_unknown_type_needs_verification(self):
        """Types outside the enum are treated conservatively."""
        assert requires_verification("REFERRAL_BONUS") is True

    def test_accepts_string_values(self):
        assert requires_verification("ACADEMY") is False

    def test_policy_covers_every_type(self):
        """Every commission type has an explicit policy entry."""
        assert set(VERIFICATION_POLICY) == set(CommissionType)
