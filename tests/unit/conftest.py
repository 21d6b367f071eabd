"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Mock affiliate program objects
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def mock_program():
    """
    Create mock affiliate program with default values.

    Default values:
    - id: 1
    - user_id: 100
    - tier: BRONZE, commission_rate: 10
    - total_referrals: 0
    - no earnings

    Returns:
        MagicMock: Mock affiliate program
    """
    program = MagicMock()
    program.id = 1
    program.user_id = 100
    program.affiliate_code = "XEN-JODO-1234"
    program.tier = "BRONZE"
    program.commission_rate = Decimal("10")
    program.total_referrals = 0
    program.total_earnings = Decimal("0")
    program.pending_earnings = Decimal("0")
    program.paid_earnings = Decimal("0")
    program.is_active = True
    return program
