"""Create affiliate program tables.

Revision ID: 20251020_000001
Revises:
Create Date: 2025-10-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20251020_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, affiliate and monthly challenge tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('referred_by_code', sa.String(32), nullable=True, comment='Affiliate code used at signup'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_referred_by_code', 'users', ['referred_by_code'])

    op.create_table(
        'affiliate_programs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('affiliate_code', sa.String(32), nullable=False, comment='XEN-XXYY-NNNN'),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('tier', sa.String(20), nullable=False, server_default='BRONZE'),
        sa.Column('commission_rate', sa.DECIMAL(5, 2), nullable=False, server_default='10', comment='Percent, derived from tier'),
        sa.Column('total_referrals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('pending_earnings', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('paid_earnings', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payout_details', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('total_earnings >= 0', name='check_affiliate_total_earnings_non_negative'),
        sa.CheckConstraint('pending_earnings >= 0', name='check_affiliate_pending_earnings_non_negative'),
        sa.CheckConstraint('paid_earnings >= 0', name='check_affiliate_paid_earnings_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('affiliate_code'),
    )
    op.create_index('ix_affiliate_programs_user_id', 'affiliate_programs', ['user_id'])
    op.create_index('ix_affiliate_programs_affiliate_code', 'affiliate_programs', ['affiliate_code'])
    op.create_index('ix_affiliate_programs_is_active', 'affiliate_programs', ['is_active'])

    op.create_table(
        'affiliate_referrals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_program_id', sa.Integer(), nullable=False),
        sa.Column('referred_user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('conversion_date', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['affiliate_program_id'], ['affiliate_programs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referred_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('affiliate_program_id', 'referred_user_id', name='uq_affiliate_referral_pair'),
    )
    op.create_index('ix_affiliate_referrals_affiliate_program_id', 'affiliate_referrals', ['affiliate_program_id'])
    op.create_index('ix_affiliate_referrals_referred_user_id', 'affiliate_referrals', ['referred_user_id'])

    op.create_table(
        'affiliate_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_program_id', sa.Integer(), nullable=False),
        sa.Column('referred_user_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('requires_verification', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('verification_data', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verified_by', sa.Integer(), nullable=True, comment='Admin who approved or rejected'),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('related_entity_type', sa.String(40), nullable=True),
        sa.Column('related_entity_id', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('amount >= 0', name='check_affiliate_commission_amount_non_negative'),
        sa.ForeignKeyConstraint(['affiliate_program_id'], ['affiliate_programs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referred_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_affiliate_commissions_affiliate_program_id', 'affiliate_commissions', ['affiliate_program_id'])
    op.create_index('ix_affiliate_commissions_referred_user_id', 'affiliate_commissions', ['referred_user_id'])
    op.create_index('ix_affiliate_commissions_type', 'affiliate_commissions', ['type'])
    op.create_index('ix_affiliate_commissions_status', 'affiliate_commissions', ['status'])
    op.create_index('idx_affiliate_commission_related', 'affiliate_commissions', ['related_entity_type', 'related_entity_id'])

    op.create_table(
        'affiliate_payouts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_program_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('method', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('transaction_id', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount > 0', name='check_affiliate_payout_amount_positive'),
        sa.ForeignKeyConstraint(['affiliate_program_id'], ['affiliate_programs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_affiliate_payouts_affiliate_program_id', 'affiliate_payouts', ['affiliate_program_id'])
    op.create_index('ix_affiliate_payouts_status', 'affiliate_payouts', ['status'])

    op.create_table(
        'monthly_challenges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.String(7), nullable=False, comment='YYYY-MM'),
        sa.Column('referral_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('qualified_referrals', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('reward_claimed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('reward_amount', sa.DECIMAL(18, 8), nullable=False, server_default='1000'),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'month', name='uq_monthly_challenge_user_month'),
    )
    op.create_index('ix_monthly_challenges_user_id', 'monthly_challenges', ['user_id'])
    op.create_index('ix_monthly_challenges_month', 'monthly_challenges', ['month'])


def downgrade() -> None:
    """Drop affiliate tables."""

    op.drop_table('monthly_challenges')
    op.drop_table('affiliate_payouts')
    op.drop_table('affiliate_commissions')
    op.drop_table('affiliate_referrals')
    op.drop_table('affiliate_programs')
    op.drop_table('users')
