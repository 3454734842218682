"""Create lease lifecycle tables

Revision ID: 20260301_000001
Revises: None
Create Date: 2026-03-01

Creates lease agreements, the rent payment schedule and its applied
transactions, maintenance requests, renewal offers, notifications,
notification preferences and the scheduled job claim table.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20260301_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all lease lifecycle tables."""
    op.create_table(
        'lease_agreements',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('property_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('agent_id', sa.String(36), nullable=False),
        sa.Column(
            'lease_type',
            sa.Enum('fixed', 'periodic', 'month_to_month', name='lease_type'),
            nullable=False
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('draft', 'pending_signature', 'active', 'terminated', 'expired', name='lease_status'),
            nullable=False
        ),
        sa.Column('terms', sa.JSON(), nullable=False),
        sa.Column('documents', sa.JSON(), nullable=False),
        sa.Column('signatures', sa.JSON(), nullable=False),
        sa.Column('termination_date', sa.DateTime(), nullable=True),
        sa.Column('termination_reason', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_lease_agreements_property_id', 'lease_agreements', ['property_id'])
    op.create_index('ix_lease_agreements_tenant_id', 'lease_agreements', ['tenant_id'])
    op.create_index('ix_lease_agreements_agent_id', 'lease_agreements', ['agent_id'])
    op.create_index('ix_lease_agreements_end_date', 'lease_agreements', ['end_date'])
    op.create_index('ix_lease_agreements_status', 'lease_agreements', ['status'])

    op.create_table(
        'rent_payments',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('lease_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('late_fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'paid', 'overdue', 'partial', 'cancelled', name='rent_payment_status'),
            nullable=False
        ),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('transaction_id', sa.String(255), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['lease_agreements.id'],
            name='fk_rent_payments_lease_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_rent_payments_lease_id', 'rent_payments', ['lease_id'])
    op.create_index('ix_rent_payments_tenant_id', 'rent_payments', ['tenant_id'])
    op.create_index('ix_rent_payments_due_date', 'rent_payments', ['due_date'])
    op.create_index('ix_rent_payments_status', 'rent_payments', ['status'])

    op.create_table(
        'rent_payment_transactions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('payment_id', sa.String(36), nullable=False),
        sa.Column('transaction_id', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('received_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['payment_id'],
            ['rent_payments.id'],
            name='fk_rent_payment_transactions_payment_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_rent_payment_transactions_payment_id', 'rent_payment_transactions', ['payment_id'])
    op.create_index(
        'ix_rent_payment_transactions_transaction_id',
        'rent_payment_transactions',
        ['transaction_id'],
        unique=True
    )

    op.create_table(
        'maintenance_requests',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('lease_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('agent_id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column(
            'category',
            sa.Enum(
                'plumbing', 'electrical', 'hvac', 'appliance', 'structural', 'other',
                name='maintenance_category'
            ),
            nullable=False
        ),
        sa.Column(
            'priority',
            sa.Enum('low', 'medium', 'high', 'emergency', name='maintenance_priority'),
            nullable=False
        ),
        sa.Column(
            'status',
            sa.Enum(
                'submitted', 'acknowledged', 'in_progress', 'completed', 'cancelled',
                name='maintenance_status'
            ),
            nullable=False
        ),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('estimated_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('scheduled_date', sa.DateTime(), nullable=True),
        sa.Column('completed_date', sa.DateTime(), nullable=True),
        sa.Column('contractor_info', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['lease_agreements.id'],
            name='fk_maintenance_requests_lease_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_maintenance_requests_lease_id', 'maintenance_requests', ['lease_id'])
    op.create_index('ix_maintenance_requests_tenant_id', 'maintenance_requests', ['tenant_id'])
    op.create_index('ix_maintenance_requests_agent_id', 'maintenance_requests', ['agent_id'])
    op.create_index('ix_maintenance_requests_priority', 'maintenance_requests', ['priority'])
    op.create_index('ix_maintenance_requests_status', 'maintenance_requests', ['status'])

    op.create_table(
        'lease_renewal_offers',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('original_lease_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('agent_id', sa.String(36), nullable=False),
        sa.Column('property_id', sa.String(36), nullable=False),
        sa.Column('proposed_start_date', sa.Date(), nullable=False),
        sa.Column('proposed_end_date', sa.Date(), nullable=False),
        sa.Column('proposed_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'status',
            sa.Enum(
                'pending_tenant_response', 'accepted', 'declined', 'expired',
                name='renewal_offer_status'
            ),
            nullable=False
        ),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['original_lease_id'],
            ['lease_agreements.id'],
            name='fk_lease_renewal_offers_original_lease_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_lease_renewal_offers_original_lease_id', 'lease_renewal_offers', ['original_lease_id'])
    op.create_index('ix_lease_renewal_offers_status', 'lease_renewal_offers', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('action_url', sa.String(500), nullable=True),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'notification_preferences',
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('notification_types', sa.JSON(), nullable=False),
        sa.Column('quiet_hours', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )

    op.create_table(
        'job_runs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_name', sa.String(100), nullable=False),
        sa.Column('run_key', sa.String(32), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('processed', sa.Integer(), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('finished_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_name', 'run_key', name='uq_job_runs_job_name_run_key'),
    )


def downgrade() -> None:
    """Drop all lease lifecycle tables."""
    op.drop_table('job_runs')
    op.drop_table('notification_preferences')

    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('ix_lease_renewal_offers_status', table_name='lease_renewal_offers')
    op.drop_index('ix_lease_renewal_offers_original_lease_id', table_name='lease_renewal_offers')
    op.drop_table('lease_renewal_offers')

    for column in ('status', 'priority', 'agent_id', 'tenant_id', 'lease_id'):
        op.drop_index(f'ix_maintenance_requests_{column}', table_name='maintenance_requests')
    op.drop_table('maintenance_requests')

    op.drop_index('ix_rent_payment_transactions_transaction_id', table_name='rent_payment_transactions')
    op.drop_index('ix_rent_payment_transactions_payment_id', table_name='rent_payment_transactions')
    op.drop_table('rent_payment_transactions')

    for column in ('status', 'due_date', 'tenant_id', 'lease_id'):
        op.drop_index(f'ix_rent_payments_{column}', table_name='rent_payments')
    op.drop_table('rent_payments')

    for column in ('status', 'end_date', 'agent_id', 'tenant_id', 'property_id'):
        op.drop_index(f'ix_lease_agreements_{column}', table_name='lease_agreements')
    op.drop_table('lease_agreements')
