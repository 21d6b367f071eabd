"""Integration tests for earnings consistency queries."""

from decimal import Decimal

import pytest

from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.services.affiliate import EarningsLedger


class TestFindInconsistent:
    """Test AffiliateProgramRepository.find_inconsistent."""

    @pytest.mark.asyncio
    async def test_ledger_operations_stay_consistent(self, session, affiliate):
        ledger = EarningsLedger(session)
        await ledger.apply_approved(affiliate.id, Decimal("75"))
        await ledger.credit_reward(affiliate.id, Decimal("1000"))
        await ledger.settle_direct_payout(affiliate.id, Decimal("500"))
        await session.commit()

        assert await AffiliateProgramRepository(session).find_inconsistent() == []

    @pytest.mark.asyncio
    async def test_reports_drift(self, session, affiliate):
        repo = AffiliateProgramRepository(session)
        await repo.update(affiliate.id, total_earnings=Decimal("100"))
        await session.commit()

        drifting = await repo.find_inconsistent()

        assert [p.id for p in drifting] == [affiliate.id]
        assert drifting[0].earnings_drift == Decimal("100")

    @pytest.mark.asyncio
    async def test_increment_rejects_unknown_column(self, session, affiliate):
        with pytest.raises(ValueError):
            await AffiliateProgramRepository(session).increment(
                affiliate.id, total_referrals=Decimal("1")
            )
