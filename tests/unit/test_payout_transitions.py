"""
Unit tests for payout status transitions.

Tests cover:
- Transition table contents
- Rejected transitions leave earnings untouched and roll back
- Allowed transitions dispatch to the earnings ledger
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from tradehub.models.enums import PayoutStatus
from tradehub.services.payout import (
    PAYOUT_TRANSITIONS,
    PayoutProcessor,
    is_allowed_transition,
)
from tradehub.utils.exceptions import (
    InvalidPayoutStatus,
    InvalidPayoutTransition,
    PayoutNotFound,
)


def make_payout(status: PayoutStatus) -> MagicMock:
    payout = MagicMock()
    payout.id = 7
    payout.affiliate_program_id = 1
    payout.amount = Decimal("500")
    payout.status = status.value
    payout.paid_at = None
    return payout


@pytest.fixture
def processor(mock_session):
    processor = PayoutProcessor(mock_session)
    processor.ledger = MagicMock()
    processor.ledger.settle_completed_payout = AsyncMock()
    processor.ledger.restore_failed_payout = AsyncMock()
    return processor


class TestTransitionTable:
    """Test the transition table."""

    def test_only_pending_payouts_move(self):
        assert set(PAYOUT_TRANSITIONS) == {
            (PayoutStatus.PENDING, PayoutStatus.COMPLETED),
            (PayoutStatus.PENDING, PayoutStatus.FAILED),
        }

    def test_completed_is_terminal(self):
        assert not is_allowed_transition(PayoutStatus.COMPLETED, PayoutStatus.FAILED)
        assert not is_allowed_transition(PayoutStatus.COMPLETED, PayoutStatus.PENDING)

    def test_failed_cannot_be_retried_in_place(self):
        assert not is_allowed_transition(PayoutStatus.FAILED, PayoutStatus.COMPLETED)

    def test_same_status_not_allowed(self):
        assert not is_allowed_transition("PENDING", "PENDING")

    def test_accepts_strings(self):
        assert is_allowed_transition("PENDING", "COMPLETED")

    def test_unknown_status_not_allowed(self):
        assert not is_allowed_transition("PENDING", "PAID")
        assert not is_allowed_transition("PAID", "COMPLETED")


class TestTransition:
    """Test PayoutProcessor.transition with a mocked session."""

    @pytest.mark.asyncio
    async def test_missing_payout(self, processor, mock_session):
        processor.payout_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(PayoutNotFound):
            await processor.transition(99, PayoutStatus.COMPLETED)

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_transition_touches_nothing(self, processor, mock_session):
        payout = make_payout(PayoutStatus.COMPLETED)
        processor.payout_repo.get_by_id = AsyncMock(return_value=payout)

        with pytest.raises(InvalidPayoutTransition):
            await processor.transition(payout.id, PayoutStatus.FAILED)

        assert payout.status == PayoutStatus.COMPLETED.value
        processor.ledger.settle_completed_payout.assert_not_awaited()
        processor.ledger.restore_failed_payout.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_completed_settles_earnings(self, processor, mock_session):
        payout = make_payout(PayoutStatus.PENDING)
        processor.payout_repo.get_by_id = AsyncMock(return_value=payout)

        result = await processor.transition(
            payout.id, PayoutStatus.COMPLETED, transaction_id="tx-1"
        )

        assert result.status == PayoutStatus.COMPLETED.value
        assert result.transaction_id == "tx-1"
        assert result.paid_at is not None
        processor.ledger.settle_completed_payout.assert_awaited_once_with(
            1, Decimal("500")
        )
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_restores_pending(self, processor, mock_session):
        payout = make_payout(PayoutStatus.PENDING)
        processor.payout_repo.get_by_id = AsyncMock(return_value=payout)

        result = await processor.transition(payout.id, PayoutStatus.FAILED)

        assert result.status == PayoutStatus.FAILED.value
        assert result.paid_at is None
        processor.ledger.restore_failed_payout.assert_awaited_once_with(
            1, Decimal("500")
        )
        processor.ledger.settle_completed_payout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_target_status(self, processor, mock_session):
        processor.payout_repo.get_by_id = AsyncMock()

        with pytest.raises(InvalidPayoutTransition):
            await processor.transition(7, "PAID")

        processor.payout_repo.get_by_id.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_stored_status(self, processor, mock_session):
        payout = make_payout(PayoutStatus.PENDING)
        payout.status = "PAID"
        processor.payout_repo.get_by_id = AsyncMock(return_value=payout)

        with pytest.raises(InvalidPayoutTransition):
            await processor.transition(payout.id, PayoutStatus.COMPLETED)

        assert payout.status == "PAID"
        processor.ledger.settle_completed_payout.assert_not_awaited()


class TestListPayouts:
    """Test PayoutProcessor.list_payouts status filter."""

    @pytest.mark.asyncio
    async def test_unknown_status_filter(self, processor):
        processor.payout_repo.list_recent = AsyncMock()

        with pytest.raises(InvalidPayoutStatus):
            await processor.list_payouts("PAID")

        processor.payout_repo.list_recent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_string_filter_is_converted(self, processor):
        processor.payout_repo.list_recent = AsyncMock(return_value=[])

        await processor.list_payouts("FAILED", limit=5)

        processor.payout_repo.list_recent.assert_awaited_once_with(
            status=PayoutStatus.FAILED, program_id=None, limit=5
        )
