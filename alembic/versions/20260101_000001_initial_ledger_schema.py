"""Initial ledger schema

Revision ID: 20260101_000001
Revises:
Create Date: 2026-01-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20260101_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('referral_code', sa.String(length=32), nullable=True),
        sa.Column(
            'balance_cents', sa.BigInteger(),
            nullable=False, server_default='0'
        ),
        sa.Column('referred_by_id', sa.Integer(), nullable=True),
        sa.Column(
            'is_admin', sa.Boolean(),
            nullable=False, server_default=sa.false()
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'balance_cents >= 0', name='check_user_balance_non_negative'
        ),
        sa.ForeignKeyConstraint(
            ['referred_by_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=False)
    op.create_index(
        'ix_users_referral_code', 'users', ['referral_code'], unique=True
    )
    op.create_index(
        'ix_users_referred_by_id', 'users', ['referred_by_id'], unique=False
    )

    # Plans
    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('daily_roi_bps', sa.Integer(), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=True),
        sa.Column('min_amount_cents', sa.BigInteger(), nullable=True),
        sa.Column('max_amount_cents', sa.BigInteger(), nullable=True),
        sa.Column(
            'is_active', sa.Boolean(),
            nullable=False, server_default=sa.true()
        ),
        sa.CheckConstraint(
            'daily_roi_bps >= 0', name='check_plan_daily_roi_non_negative'
        ),
        sa.CheckConstraint(
            'duration_days IS NULL OR duration_days > 0',
            name='check_plan_duration_positive'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_plans_slug', 'plans', ['slug'], unique=True)

    # Investments
    op.create_table(
        'investments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column(
            'status', sa.String(length=20),
            nullable=False, server_default='ACTIVE'
        ),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'last_roi_accrued_at', sa.DateTime(timezone=True), nullable=False
        ),
        sa.Column(
            'accrued_return_cents', sa.BigInteger(),
            nullable=False, server_default='0'
        ),
        sa.Column(
            'accrued_days', sa.Integer(),
            nullable=False, server_default='0'
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'amount_cents > 0', name='check_investment_amount_positive'
        ),
        sa.CheckConstraint(
            'accrued_return_cents >= 0',
            name='check_investment_accrued_return_non_negative'
        ),
        sa.CheckConstraint(
            'accrued_days >= 0',
            name='check_investment_accrued_days_non_negative'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(
            ['plan_id'], ['plans.id'], ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_investments_user_id', 'investments', ['user_id'], unique=False
    )
    op.create_index(
        'ix_investments_plan_id', 'investments', ['plan_id'], unique=False
    )
    op.create_index(
        'ix_investments_status', 'investments', ['status'], unique=False
    )
    op.create_index(
        'idx_investment_user_plan', 'investments',
        ['user_id', 'plan_id'], unique=False
    )

    # Transactions (append-only ledger)
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column(
            'status', sa.String(length=20),
            nullable=False, server_default='PENDING'
        ),
        sa.Column(
            'asset', sa.String(length=10),
            nullable=False, server_default='USDT'
        ),
        sa.Column('reference', sa.String(length=255), nullable=True),
        sa.Column(
            'meta', postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'amount_cents > 0', name='check_transaction_amount_positive'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_transactions_user_id', 'transactions', ['user_id'], unique=False
    )
    op.create_index(
        'idx_transaction_user_status', 'transactions',
        ['user_id', 'status'], unique=False
    )
    op.create_index(
        'idx_transaction_type_status', 'transactions',
        ['type', 'status'], unique=False
    )

    # Withdrawals
    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('asset', sa.String(length=10), nullable=False),
        sa.Column('network', sa.String(length=10), nullable=True),
        sa.Column('target_address', sa.String(length=255), nullable=False),
        sa.Column(
            'status', sa.String(length=20),
            nullable=False, server_default='PENDING'
        ),
        sa.Column('reject_reason', sa.Text(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'amount_cents > 0', name='check_withdrawal_amount_positive'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(
            ['reviewed_by_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_withdrawals_user_id', 'withdrawals', ['user_id'], unique=False
    )
    op.create_index(
        'ix_withdrawals_status', 'withdrawals', ['status'], unique=False
    )
    op.create_index(
        'idx_withdrawal_user_status', 'withdrawals',
        ['user_id', 'status'], unique=False
    )

    # Referral earnings
    op.create_table(
        'referral_earnings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('earner_id', sa.Integer(), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.BigInteger(), nullable=False),
        sa.Column('source_investment_id', sa.Integer(), nullable=True),
        sa.Column('source_transaction_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'level IN (1, 2)', name='check_referral_earning_level'
        ),
        sa.CheckConstraint(
            'amount_cents > 0', name='check_referral_earning_amount_positive'
        ),
        sa.ForeignKeyConstraint(
            ['earner_id'], ['users.id'], ondelete='RESTRICT'
        ),
        sa.ForeignKeyConstraint(
            ['from_user_id'], ['users.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['source_investment_id'], ['investments.id'], ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['source_transaction_id'], ['transactions.id'],
            ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_referral_earnings_earner_id', 'referral_earnings',
        ['earner_id'], unique=False
    )
    op.create_index(
        'ix_referral_earnings_from_user_id', 'referral_earnings',
        ['from_user_id'], unique=False
    )

    # Wallet addresses
    op.create_table(
        'wallet_addresses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('asset', sa.String(length=10), nullable=False),
        sa.Column(
            'network', sa.String(length=10),
            nullable=False, server_default=''
        ),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'user_id', 'asset', 'network',
            name='uq_wallet_address_user_asset_network'
        )
    )
    op.create_index(
        'ix_wallet_addresses_user_id', 'wallet_addresses',
        ['user_id'], unique=False
    )

    # Platform settings (singleton row id=1)
    op.create_table(
        'platform_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(
            'level1_bps', sa.Integer(), nullable=False, server_default='500'
        ),
        sa.Column(
            'level2_bps', sa.Integer(), nullable=False, server_default='200'
        ),
        sa.Column('btc_deposit_address', sa.String(length=255), nullable=True),
        sa.Column('eth_deposit_address', sa.String(length=255), nullable=True),
        sa.Column(
            'usdt_trc20_deposit_address', sa.String(length=255), nullable=True
        ),
        sa.Column(
            'usdt_bep20_deposit_address', sa.String(length=255), nullable=True
        ),
        sa.Column(
            'usdt_erc20_deposit_address', sa.String(length=255), nullable=True
        ),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'level1_bps >= 0 AND level1_bps <= 10000',
            name='check_settings_level1_bps_range'
        ),
        sa.CheckConstraint(
            'level2_bps >= 0 AND level2_bps <= 10000',
            name='check_settings_level2_bps_range'
        ),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('platform_settings')
    op.drop_index(
        'ix_wallet_addresses_user_id', table_name='wallet_addresses'
    )
    op.drop_table('wallet_addresses')
    op.drop_index(
        'ix_referral_earnings_from_user_id', table_name='referral_earnings'
    )
    op.drop_index(
        'ix_referral_earnings_earner_id', table_name='referral_earnings'
    )
    op.drop_table('referral_earnings')
    op.drop_index('idx_withdrawal_user_status', table_name='withdrawals')
    op.drop_index('ix_withdrawals_status', table_name='withdrawals')
    op.drop_index('ix_withdrawals_user_id', table_name='withdrawals')
    op.drop_table('withdrawals')
    op.drop_index('idx_transaction_type_status', table_name='transactions')
    op.drop_index('idx_transaction_user_status', table_name='transactions')
    op.drop_index('ix_transactions_user_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('idx_investment_user_plan', table_name='investments')
    op.drop_index('ix_investments_status', table_name='investments')
    op.drop_index('ix_investments_plan_id', table_name='investments')
    op.drop_index('ix_investments_user_id', table_name='investments')
    op.drop_table('investments')
    op.drop_index('ix_plans_slug', table_name='plans')
    op.drop_table('plans')
    op.drop_index('ix_users_referred_by_id', table_name='users')
    op.drop_index('ix_users_referral_code', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
