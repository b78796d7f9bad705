"""create card, clinic and appointment tables

Revision ID: 3f1c9a2b7d41
Revises:
Create Date: 2026-10-17 09:12:44.218031
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


batch_status = sa.Enum('active', 'completed', 'archived', name='batchstatus')
card_status = sa.Enum('unassigned', 'assigned', 'activated', 'expired', 'suspended', name='cardstatus')
generation_method = sa.Enum('auto', 'manual', 'range', name='generationmethod')
perk_type = sa.Enum('consultation', 'cleaning', 'xray', 'extraction', 'filling', name='perktype')
clinic_status = sa.Enum('active', 'inactive', 'suspended', name='clinicstatus')
transaction_type = sa.Enum(
    'created', 'assigned', 'reassigned', 'activated', 'suspended', 'expired', 'perk_claimed',
    name='cardtransactiontype'
)
performed_by = sa.Enum('admin', 'clinic', 'system', name='performedby')
appointment_status = sa.Enum(
    'scheduled', 'confirmed', 'completed', 'cancelled', 'no_show',
    name='appointmentstatus'
)


def upgrade() -> None:
    op.create_table(
        'admin_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=30), server_default='admin', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_admin_accounts_username'), 'admin_accounts', ['username'], unique=True)

    op.create_table(
        'clinics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('clinic_code', sa.String(length=20), nullable=False),
        sa.Column('clinic_name', sa.String(length=150), nullable=False),
        sa.Column('contact_email', sa.String(length=120), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('status', clinic_status, server_default='active', nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('last_password_change', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_clinics_clinic_code'), 'clinics', ['clinic_code'], unique=True)

    op.create_table(
        'location_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=3), nullable=False),
        sa.Column('location_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_location_codes_code'), 'location_codes', ['code'], unique=True)

    op.create_table(
        'card_batches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('batch_number', sa.String(length=32), nullable=False),
        sa.Column('total_cards', sa.Integer(), nullable=False),
        sa.Column('cards_assigned', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', batch_status, server_default='active', nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_card_batches_batch_number'), 'card_batches', ['batch_number'], unique=True)

    op.create_table(
        'cards',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('batch_id', sa.Integer(), sa.ForeignKey('card_batches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('clinic_id', sa.Integer(), sa.ForeignKey('clinics.id'), nullable=True),
        sa.Column('control_number', sa.String(length=64), nullable=False),
        sa.Column('control_number_v2', sa.String(length=20), nullable=True),
        sa.Column('passcode', sa.String(length=16), nullable=False),
        sa.Column('location_code', sa.String(length=3), nullable=False),
        sa.Column('status', card_status, server_default='unassigned', nullable=False),
        sa.Column('generation_method', generation_method, server_default='auto', nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('control_number_v2', name='uq_cards_control_number_v2'),
        sa.UniqueConstraint('passcode', name='uq_cards_passcode'),
    )
    op.create_index(op.f('ix_cards_control_number'), 'cards', ['control_number'], unique=True)
    op.create_index(op.f('ix_cards_batch_id'), 'cards', ['batch_id'])
    op.create_index(op.f('ix_cards_clinic_id'), 'cards', ['clinic_id'])
    op.create_index(op.f('ix_cards_status'), 'cards', ['status'])

    op.create_table(
        'card_perks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('card_id', sa.Integer(), sa.ForeignKey('cards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('perk_type', perk_type, nullable=False),
        sa.Column('perk_value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('claimed', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('claimed_by_clinic_id', sa.Integer(), sa.ForeignKey('clinics.id'), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('card_id', 'perk_type', name='uq_card_perks_card_type'),
    )
    op.create_index(op.f('ix_card_perks_card_id'), 'card_perks', ['card_id'])

    op.create_table(
        'card_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('card_id', sa.Integer(), sa.ForeignKey('cards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('performed_by', performed_by, nullable=False),
        sa.Column('performed_by_id', sa.String(length=64), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), server_default='{}', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_card_transactions_card_id'), 'card_transactions', ['card_id'])

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('card_id', sa.Integer(), sa.ForeignKey('cards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('clinic_id', sa.Integer(), sa.ForeignKey('clinics.id'), nullable=False),
        sa.Column('patient_name', sa.String(length=100), nullable=False),
        sa.Column('patient_phone', sa.String(length=30), nullable=True),
        sa.Column('patient_email', sa.String(length=120), nullable=True),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('appointment_time', sa.Time(), nullable=False),
        sa.Column('service_type', sa.String(length=50), nullable=False),
        sa.Column('status', appointment_status, server_default='scheduled', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_appointments_card_id'), 'appointments', ['card_id'])
    op.create_index(op.f('ix_appointments_clinic_id'), 'appointments', ['clinic_id'])


def downgrade() -> None:
    op.drop_table('appointments')
    op.drop_table('card_transactions')
    op.drop_table('card_perks')
    op.drop_table('cards')
    op.drop_table('card_batches')
    op.drop_table('location_codes')
    op.drop_table('clinics')
    op.drop_table('admin_accounts')

    for enum_type in (
        appointment_status, performed_by, transaction_type, clinic_status,
        perk_type, generation_method, card_status, batch_status,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
