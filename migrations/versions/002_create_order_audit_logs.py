"""Create order_audit_logs table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'order_audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=True),
        sa.Column('session_id', sa.Text(), nullable=False),
        sa.Column('order_data', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('validation_errors', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('severity', sa.Text(), nullable=False),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('additional_context', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "event_type IN ('validation_failure', 'validation_warning', 'order_blocked', 'suspicious_activity')",
            name='ck_order_audit_logs_event_type'
        ),
        sa.CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')",
            name='ck_order_audit_logs_severity'
        )
    )

    op.create_index('idx_order_audit_logs_timestamp', 'order_audit_logs', ['timestamp'])
    op.create_index('idx_order_audit_logs_user_id', 'order_audit_logs', ['user_id'])
    op.create_index('idx_order_audit_logs_event_type', 'order_audit_logs', ['event_type'])
    op.create_index('idx_order_audit_logs_severity', 'order_audit_logs', ['severity'])
    op.create_index('idx_order_audit_logs_session_id', 'order_audit_logs', ['session_id'])
    op.create_index('idx_order_audit_logs_user_timestamp', 'order_audit_logs', ['user_id', sa.text('timestamp DESC')])
    op.create_index('idx_order_audit_logs_severity_timestamp', 'order_audit_logs', ['severity', sa.text('timestamp DESC')])

    # Append-only: deletes are rejected, updates may only touch additional_context
    op.execute("""
        CREATE OR REPLACE FUNCTION reject_order_audit_log_changes()
        RETURNS TRIGGER AS $$
        BEGIN
          IF TG_OP = 'DELETE' THEN
            RAISE EXCEPTION 'order_audit_logs rows cannot be deleted';
          END IF;
          IF NEW.id IS DISTINCT FROM OLD.id
             OR NEW.timestamp IS DISTINCT FROM OLD.timestamp
             OR NEW.event_type IS DISTINCT FROM OLD.event_type
             OR NEW.user_id IS DISTINCT FROM OLD.user_id
             OR NEW.session_id IS DISTINCT FROM OLD.session_id
             OR NEW.order_data IS DISTINCT FROM OLD.order_data
             OR NEW.validation_errors IS DISTINCT FROM OLD.validation_errors
             OR NEW.severity IS DISTINCT FROM OLD.severity
             OR NEW.ip_address IS DISTINCT FROM OLD.ip_address
             OR NEW.user_agent IS DISTINCT FROM OLD.user_agent
             OR NEW.created_at IS DISTINCT FROM OLD.created_at THEN
            RAISE EXCEPTION 'order_audit_logs rows are immutable (only additional_context may be corrected)';
          END IF;
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER reject_order_audit_log_changes
        BEFORE UPDATE OR DELETE ON order_audit_logs
        FOR EACH ROW
        EXECUTE FUNCTION reject_order_audit_log_changes();
    """)
    op.execute("""
        CREATE TRIGGER update_order_audit_logs_updated_at
        BEFORE UPDATE ON order_audit_logs
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)

    # Monitoring view of high and critical violations
    op.execute("""
        CREATE OR REPLACE VIEW critical_order_violations AS
        SELECT id, timestamp, event_type, user_id, session_id,
               validation_errors, ip_address, user_agent, created_at
        FROM order_audit_logs
        WHERE severity IN ('high', 'critical')
        ORDER BY timestamp DESC;
    """)


def downgrade():
    op.execute('DROP VIEW IF EXISTS critical_order_violations')
    op.execute('DROP TRIGGER IF EXISTS update_order_audit_logs_updated_at ON order_audit_logs')
    op.execute('DROP TRIGGER IF EXISTS reject_order_audit_log_changes ON order_audit_logs')
    op.execute('DROP FUNCTION IF EXISTS reject_order_audit_log_changes()')

    op.drop_index('idx_order_audit_logs_severity_timestamp', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_user_timestamp', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_session_id', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_severity', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_event_type', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_user_id', table_name='order_audit_logs')
    op.drop_index('idx_order_audit_logs_timestamp', table_name='order_audit_logs')

    op.drop_table('order_audit_logs')
