"""
Unit tests for the tier engine.

Tests cover:
- Tier brackets and their boundaries
- Rejection of negative counts
- apply_tier writes only on change
"""

from decimal import Decimal

import pytest

from tradehub.models.enums import AffiliateTier
from tradehub.services.affiliate.tier_engine import apply_tier, tier_for


class TestTierFor:
    """Test tier_for brackets."""

    @pytest.mark.parametrize(
        "count,tier,rate",
        [
            (0, AffiliateTier.BRONZE, Decimal("10")),
            (10, AffiliateTier.BRONZE, Decimal("10")),
            (11, AffiliateTier.SILVER, Decimal("12")),
            (25, AffiliateTier.SILVER, Decimal("12")),
            (26, AffiliateTier.GOLD, Decimal("15")),
            (50, AffiliateTier.GOLD, Decimal("15")),
            (51, AffiliateTier.PLATINUM, Decimal("20")),
            (10_000, AffiliateTier.PLATINUM, Decimal("20")),
        ],
    )
    def test_bracket_boundaries(self, count, tier, rate):
        """Each boundary maps to the expected tier and rate."""
        assert tier_for(count) == (tier, rate)

    def test_negative_count_rejected(self):
        """Negative referral counts are invalid."""
        with pytest.raises(ValueError):
            tier_for(-1)


class TestApplyTier:
    """Test apply_tier."""

    def test_no_change_keeps_program(self, mock_program):
        """Same tier: nothing is written."""
        mock_program.total_referrals = 10
        mock_program.commission_rate = Decimal("10")

        assert apply_tier(mock_program) is False
        assert mock_program.tier == "BRONZE"

    def test_promotion_updates_tier_and_rate(self, mock_program):
        """Crossing a boundary updates tier and rate."""
        mock_program.total_referrals = 11

        assert apply_tier(mock_program) is True
        assert mock_program.tier == AffiliateTier.SILVER.value
        assert mock_program.commission_rate == Decimal("12")

    def test_jump_to_platinum(self, mock_program):
        """Several brackets can be skipped at once."""
        mock_program.total_referrals = 60

        assert apply_tier(mock_program) is True
        assert mock_program.tier == AffiliateTier.PLATINUM.value
        assert mock_program.commission_rate == Decimal("20")
