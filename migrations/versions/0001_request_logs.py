"""request log table

Revision ID: 0001_request_logs
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_request_logs'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'request_logs',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('path', sa.String(length=2000), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=1000), nullable=True),
        sa.Column('category', sa.SmallInteger(), nullable=False, server_default='0'),
        sa.Column('detected_client', sa.String(length=100), nullable=True),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('processing_time_ms', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('referer', sa.String(length=2000), nullable=True),
        sa.Column('query_string', sa.String(length=1000), nullable=True),
    )
    op.create_index('ix_request_logs_timestamp', 'request_logs', ['timestamp'], unique=False)
    op.create_index('ix_request_logs_category', 'request_logs', ['category'], unique=False)
    op.create_index('ix_request_logs_ip_address', 'request_logs', ['ip_address'], unique=False)


def downgrade():
    op.drop_index('ix_request_logs_ip_address', table_name='request_logs')
    op.drop_index('ix_request_logs_category', table_name='request_logs')
    op.drop_index('ix_request_logs_timestamp', table_name='request_logs')
    op.drop_table('request_logs')
