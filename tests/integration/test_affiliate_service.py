"""
Integration tests for the AffiliateService facade.

Domain errors must come back as failed results with stable error codes.
"""

from decimal import Decimal

import pytest

from tradehub.models import CommissionType, PayoutStatus
from tradehub.services import AffiliateService


@pytest.fixture
def service(session):
    return AffiliateService(session)


class TestAffiliateService:
    """Test end-to-end flows through the facade."""

    @pytest.mark.asyncio
    async def test_full_affiliate_flow(self, service, make_user):
        owner = await make_user(name="Frank Miller")
        registered = await service.register_affiliate(owner.id, payment_method="USDT")
        assert registered.success is True
        code = registered.data.affiliate_code

        referred = []
        for name in ("Gina Lee", "Hank Hill", "Ivy Chen"):
            user = await make_user(name=name)
            result = await service.attach_signup_referral(user.id, code)
            assert result.success is True
            referred.append(user)

        for user in referred:
            recorded = await service.record_commission(
                user.id, Decimal("100"), CommissionType.SUBSCRIPTION
            )
            assert recorded.success is True
            await service.record_subscription(user.id)

        claimed = await service.claim_challenge_reward(owner.id)
        assert claimed.success is True
        assert claimed.data.amount == Decimal("1000")

        dashboard = await service.get_dashboard(owner.id)
        assert dashboard.success is True
        assert dashboard.data["total_referrals"] == 3
        assert dashboard.data["converted_referrals"] == 3
        assert dashboard.data["total_earnings"] == Decimal("1030")
        assert dashboard.data["pending_earnings"] == Decimal("1030")
        assert dashboard.data["commissions"]["APPROVED"]["count"] == 3
        assert dashboard.data["commissions"]["APPROVED"]["amount"] == Decimal("30")

        paid = await service.update_payout_status(claimed.data.id, PayoutStatus.COMPLETED)
        assert paid.success is True

        dashboard = await service.get_dashboard(owner.id)
        assert dashboard.data["pending_earnings"] == Decimal("30")
        assert dashboard.data["paid_earnings"] == Decimal("1000")

    @pytest.mark.asyncio
    async def test_errors_become_results(self, service, affiliate, affiliate_user):
        program_id, user_id = affiliate.id, affiliate_user.id

        again = await service.register_affiliate(user_id)
        assert again.success is False
        assert again.error == "Already registered as affiliate"
        assert again.error_code == "already_registered"

        claim = await service.claim_challenge_reward(user_id, "2025-10")
        assert claim.success is False
        assert claim.error_code == "not_eligible"

        verify = await service.verify_commission(404, True, admin_id=1)
        assert verify.error_code == "commission_not_found"

        process = await service.process_payout(program_id, Decimal("5"), "BANK", "tx")
        assert process.error_code == "insufficient_pending_earnings"

    @pytest.mark.asyncio
    async def test_dashboard_without_program(self, service, make_user):
        user = await make_user()

        result = await service.get_dashboard(user.id)

        assert result.success is False
        assert result.error_code == "no_affiliate_account"

    @pytest.mark.asyncio
    async def test_unknown_payout_status(self, service, affiliate):
        created = await service.create_payout(affiliate.id, Decimal("10"), "BANK")
        payout_id = created.data.id

        update = await service.update_payout_status(payout_id, "PAID")
        assert update.success is False
        assert update.error_code == "invalid_payout_transition"

        listed = await service.list_payouts("PAID")
        assert listed.success is False
        assert listed.error_code == "invalid_payout_status"

        pending = await service.list_payouts("PENDING")
        assert [p.id for p in pending.data] == [payout_id]
        assert pending.data[0].status == PayoutStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_malformed_month(self, service, affiliate_user):
        user_id = affiliate_user.id

        progress = await service.get_challenge_progress(user_id, "2025-13")
        assert progress.success is False
        assert progress.error_code == "invalid_month"

        claim = await service.claim_challenge_reward(user_id, "October")
        assert claim.error_code == "invalid_month"

        overview = await service.get_challenge_overview("2025-1")
        assert overview.error_code == "invalid_month"
