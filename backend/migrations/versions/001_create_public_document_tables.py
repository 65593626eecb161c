"""Create document, document_service, job, job_task and activity_log tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create document table
    op.create_table(
        'document',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('kind', sa.String(32), nullable=False),
        sa.Column('document_number', sa.Text(), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('facility_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('scheduled_start_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('scheduled_end_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status', sa.String(32), server_default='draft', nullable=False),
        sa.Column('public_token', sa.String(64), nullable=True),
        sa.Column('public_token_expires_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('viewed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('accepted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('signature_name', sa.Text(), nullable=True),
        sa.Column('signature_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('signature_ip', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("kind IN ('quotation', 'contract', 'proposal')", name='document_kind'),
        sa.CheckConstraint(
            "status IN ('draft', 'sent', 'viewed', 'accepted', 'rejected')",
            name='document_status'
        ),
    )
    op.create_index('ix_document_public_token', 'document', ['public_token'], unique=True)
    op.create_index('ix_document_account_id', 'document', ['account_id'])
    op.create_index('ix_document_kind_status', 'document', ['kind', 'status'])

    # Create document_service table
    op.create_table(
        'document_service',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('document_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('service_name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('included_tasks', postgresql.JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_document_service_document_id', 'document_service', ['document_id'])

    # Create job table
    op.create_table(
        'job',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('job_number', sa.Text(), nullable=False),
        sa.Column('sequence_key', sa.Text(), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(32), server_default='scheduled', nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('facility_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('scheduled_start_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('scheduled_end_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('source_document_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['source_document_id'], ['document.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('job_number', name='uq_job_job_number'),
        sa.UniqueConstraint('source_document_id', name='uq_job_source_document_id'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed', 'canceled')",
            name='job_status'
        ),
    )
    op.create_index('ix_job_sequence', 'job', ['sequence_key', 'sequence_number'])
    op.create_index('ix_job_account_id', 'job', ['account_id'])

    # Create job_task table
    op.create_table(
        'job_task',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('task_name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('included_tasks', postgresql.JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['job.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_job_task_job_id', 'job_task', ['job_id'])

    # Create activity_log table (append-only)
    op.create_table(
        'activity_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('entity_type', sa.String(32), nullable=False),
        sa.Column('entity_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('actor_description', sa.Text(), nullable=False),
        sa.Column('metadata_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("entity_type IN ('job', 'document')", name='activity_entity_type'),
    )
    op.create_index('ix_activity_log_entity', 'activity_log', ['entity_type', 'entity_id', 'created_at'])
    op.create_index('ix_activity_log_action', 'activity_log', ['action'])

    # Reject UPDATE and DELETE on activity_log at the database level too
    op.execute("""
        CREATE OR REPLACE FUNCTION activity_log_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'activity_log is append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER activity_log_no_update_delete
        BEFORE UPDATE OR DELETE ON activity_log
        FOR EACH ROW
        EXECUTE FUNCTION activity_log_immutable();
    """)


def downgrade():
    op.execute('DROP TRIGGER IF EXISTS activity_log_no_update_delete ON activity_log')
    op.execute('DROP FUNCTION IF EXISTS activity_log_immutable()')

    op.drop_table('activity_log')
    op.drop_table('job_task')
    op.drop_table('job')
    op.drop_table('document_service')
    op.drop_table('document')
