"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create call_logs table
    op.create_table(
        'call_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('call_sid', sa.String(), nullable=False),
        sa.Column('patient_phone_number', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('retry_count', sa.Integer(), nullable=False),
        sa.Column('last_transcript', sa.Text(), nullable=True),
        sa.Column('adherence_status', sa.String(), nullable=False),
        sa.Column('recording_url', sa.String(), nullable=True),
        sa.Column('fallback_sent', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_call_logs_id'), 'call_logs', ['id'], unique=False)
    op.create_index(op.f('ix_call_logs_call_sid'), 'call_logs', ['call_sid'], unique=True)
    op.create_index(op.f('ix_call_logs_patient_phone_number'), 'call_logs', ['patient_phone_number'], unique=False)
    op.create_index(op.f('ix_call_logs_status'), 'call_logs', ['status'], unique=False)
    op.create_index(op.f('ix_call_logs_adherence_status'), 'call_logs', ['adherence_status'], unique=False)
    op.create_index(op.f('ix_call_logs_created_at'), 'call_logs', ['created_at'], unique=False)
    op.create_index('ix_call_logs_phone_created', 'call_logs', ['patient_phone_number', 'created_at'], unique=False)
    op.create_index('ix_call_logs_adherence_created', 'call_logs', ['adherence_status', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_call_logs_adherence_created', table_name='call_logs')
    op.drop_index('ix_call_logs_phone_created', table_name='call_logs')
    op.drop_table('call_logs')
