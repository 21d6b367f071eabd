"""
Integration tests for registration, referral resolution and tracking.

Tests cover:
- Affiliate registration and code format
- Strict (signup) and lenient (track) code resolution
- Referral idempotency and tier promotion
"""

import re

import pytest

from tradehub.models import AffiliateTier, ReferralStatus
from tradehub.repositories.affiliate_program_repository import (
    AffiliateProgramRepository,
)
from tradehub.services.affiliate import (
    AffiliateRegistrationManager,
    ReferralResolver,
    ReferralTracker,
)
from tradehub.utils.exceptions import (
    AffiliateCodeUnavailable,
    AlreadyRegisteredAffiliate,
    InvalidReferralCode,
    UserNotFound,
)


class TestRegistration:
    """Test AffiliateRegistrationManager."""

    @pytest.mark.asyncio
    async def test_register_creates_bronze_program(self, affiliate, affiliate_user):
        assert affiliate.user_id == affiliate_user.id
        assert re.match(r"^XEN-ALSM-\d{4}$", affiliate.affiliate_code)
        assert affiliate.tier == AffiliateTier.BRONZE.value
        assert affiliate.commission_rate == 10
        assert affiliate.total_referrals == 0
        assert affiliate.is_active is True
        assert affiliate.payment_method == "BANK"

    @pytest.mark.asyncio
    async def test_register_twice_rejected(self, session, affiliate, affiliate_user):
        with pytest.raises(AlreadyRegisteredAffiliate):
            await AffiliateRegistrationManager(session).register(affiliate_user.id)

    @pytest.mark.asyncio
    async def test_register_concurrent_duplicate(self, session, affiliate, affiliate_user, monkeypatch):
        """Losing the insert to a concurrent registration reports the duplicate."""
        user_id = affiliate_user.id
        manager = AffiliateRegistrationManager(session)
        get_by_user_id = manager.program_repo.get_by_user_id
        calls = []

        async def missed_first_lookup(user_id, for_update=False):
            calls.append(user_id)
            if len(calls) == 1:
                return None
            return await get_by_user_id(user_id, for_update=for_update)

        monkeypatch.setattr(manager.program_repo, "get_by_user_id", missed_first_lookup)

        with pytest.raises(AlreadyRegisteredAffiliate):
            await manager.register(user_id)

        assert len(calls) == 2
        assert await AffiliateProgramRepository(session).count(user_id=user_id) == 1

    @pytest.mark.asyncio
    async def test_register_unknown_user(self, session):
        with pytest.raises(UserNotFound):
            await AffiliateRegistrationManager(session).register(12345)

    @pytest.mark.asyncio
    async def test_code_collisions_exhaust_attempts(self, session, make_user, monkeypatch):
        """Every candidate taken: registration fails instead of looping."""
        manager = AffiliateRegistrationManager(session)
        user = await make_user(name="Carl Brown")

        async def always_taken(code):
            return True

        monkeypatch.setattr(manager.program_repo, "code_exists", always_taken)

        with pytest.raises(AffiliateCodeUnavailable):
            await manager.register(user.id)


class TestReferralResolver:
    """Test ReferralResolver."""

    @pytest.mark.asyncio
    async def test_resolves_exact_code(self, session, affiliate):
        program = await ReferralResolver(session).resolve(affiliate.affiliate_code)
        assert program.id == affiliate.id

    @pytest.mark.asyncio
    async def test_lookup_is_case_sensitive(self, session, affiliate):
        with pytest.raises(InvalidReferralCode):
            await ReferralResolver(session).resolve(affiliate.affiliate_code.lower())

    @pytest.mark.asyncio
    async def test_unknown_code(self, session, affiliate):
        resolver = ReferralResolver(session)
        with pytest.raises(InvalidReferralCode):
            await resolver.resolve("XEN-NONE-0000")
        assert await resolver.find("XEN-NONE-0000") is None

    @pytest.mark.asyncio
    async def test_inactive_program(self, session, affiliate):
        affiliate.is_active = False
        await session.commit()
        resolver = ReferralResolver(session)

        with pytest.raises(InvalidReferralCode):
            await resolver.resolve(affiliate.affiliate_code)

        program = await resolver.resolve(affiliate.affiliate_code, require_active=False)
        assert program.id == affiliate.id


class TestReferralTracking:
    """Test ReferralTracker."""

    @pytest.mark.asyncio
    async def test_signup_with_valid_code(self, session, affiliate, make_user):
        user = await make_user(name="Bob Jones")

        referral = await ReferralTracker(session).attach_signup_referral(
            user.id, affiliate.affiliate_code
        )

        assert referral is not None
        assert referral.status == ReferralStatus.PENDING.value
        assert user.referred_by_code == affiliate.affiliate_code
        program = await AffiliateProgramRepository(session).reload(affiliate.id)
        assert program.total_referrals == 1

    @pytest.mark.asyncio
    async def test_signup_with_invalid_code_ignored(self, session, affiliate, make_user):
        user = await make_user(name="Bob Jones")

        referral = await ReferralTracker(session).attach_signup_referral(
            user.id, "XEN-NONE-0000"
        )

        assert referral is None
        assert user.referred_by_code is None

    @pytest.mark.asyncio
    async def test_signup_with_inactive_code_ignored(self, session, affiliate, make_user):
        affiliate.is_active = False
        await session.commit()
        user = await make_user(name="Bob Jones")

        referral = await ReferralTracker(session).attach_signup_referral(
            user.id, affiliate.affiliate_code
        )

        assert referral is None
        assert user.referred_by_code is None

    @pytest.mark.asyncio
    async def test_signup_keeps_existing_referred_by_code(self, session, affiliate, make_user):
        user = await make_user(name="Bob Jones", referred_by_code="XEN-OLDC-1111")

        referral = await ReferralTracker(session).attach_signup_referral(
            user.id, affiliate.affiliate_code
        )

        assert referral is not None
        assert user.referred_by_code == "XEN-OLDC-1111"

    @pytest.mark.asyncio
    async def test_track_accepts_inactive_program(self, session, affiliate, make_user):
        affiliate.is_active = False
        await session.commit()
        user = await make_user(name="Bob Jones")

        referral = await ReferralTracker(session).track_referral(
            affiliate.affiliate_code, user.id
        )

        assert referral.affiliate_program_id == affiliate.id
        assert user.referred_by_code == affiliate.affiliate_code

    @pytest.mark.asyncio
    async def test_track_is_idempotent(self, session, affiliate, make_user):
        user = await make_user(name="Bob Jones")
        tracker = ReferralTracker(session)

        first = await tracker.track_referral(affiliate.affiliate_code, user.id)
        second = await tracker.track_referral(affiliate.affiliate_code, user.id)

        assert first.id == second.id
        program = await AffiliateProgramRepository(session).reload(affiliate.id)
        assert program.total_referrals == 1

    @pytest.mark.asyncio
    async def test_concurrent_track_reuses_referral(self, session, affiliate, make_user, monkeypatch):
        user = await make_user(name="Bob Jones")
        tracker = ReferralTracker(session)
        first = await tracker.track_referral(affiliate.affiliate_code, user.id)

        get_pair = tracker.referral_repo.get_pair
        calls = []

        async def missed_first_lookup(program_id, user_id):
            calls.append(user_id)
            if len(calls) == 1:
                return None
            return await get_pair(program_id, user_id)

        monkeypatch.setattr(tracker.referral_repo, "get_pair", missed_first_lookup)

        second = await tracker.track_referral(affiliate.affiliate_code, user.id)

        assert len(calls) == 2
        assert second.id == first.id
        program = await AffiliateProgramRepository(session).reload(affiliate.id)
        assert program.total_referrals == 1

    @pytest.mark.asyncio
    async def test_track_unknown_code(self, session, affiliate, make_user):
        user = await make_user()
        with pytest.raises(InvalidReferralCode):
            await ReferralTracker(session).track_referral("XEN-NONE-0000", user.id)

    @pytest.mark.asyncio
    async def test_self_referral_rejected(self, session, affiliate, affiliate_user):
        with pytest.raises(InvalidReferralCode):
            await ReferralTracker(session).track_referral(
                affiliate.affiliate_code, affiliate_user.id
            )

    @pytest.mark.asyncio
    async def test_eleventh_referral_promotes_to_silver(self, session, affiliate, make_referred_user):
        for _ in range(10):
            await make_referred_user()

        program = await AffiliateProgramRepository(session).reload(affiliate.id)
        assert program.total_referrals == 10
        assert program.tier == AffiliateTier.BRONZE.value

        await make_referred_user()

        program = await AffiliateProgramRepository(session).reload(affiliate.id)
        assert program.total_referrals == 11
        assert program.tier == AffiliateTier.SILVER.value
        assert program.commission_rate == 12
