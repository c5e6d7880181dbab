"""create fills and positions tables

Revision ID: 0001_create_fills_and_positions
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_create_fills_and_positions'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # positions first: fills.position_id points here
    op.create_table(
        'positions',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('symbol', sa.String(length=32), nullable=False),
        sa.Column('market_id', sa.Integer(), nullable=True),
        sa.Column('side', sa.String(length=8), nullable=False),
        sa.Column('status', sa.String(length=8), nullable=False),
        sa.Column('total_quantity', sa.Numeric(30, 12), nullable=False, server_default='0'),
        sa.Column('avg_entry_price', sa.Numeric(30, 12), nullable=True),
        sa.Column('avg_exit_price', sa.Numeric(30, 12), nullable=True),
        sa.Column('total_entry_cost', sa.Numeric(30, 12), nullable=False, server_default='0'),
        sa.Column('total_exit_revenue', sa.Numeric(30, 12), nullable=False, server_default='0'),
        sa.Column('realized_pnl', sa.Numeric(30, 12), nullable=True),
        sa.Column('realized_pnl_percent', sa.Numeric(30, 12), nullable=True),
        sa.Column('opened_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('closed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('journal', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('fills_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('exchange', sa.String(length=32), nullable=False, server_default='Lighter'),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_positions_symbol', 'positions', ['symbol'])
    op.create_index('ix_positions_status', 'positions', ['status'])

    op.create_table(
        'fills',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('exchange_trade_id', sa.String(length=128), nullable=True, unique=True),
        sa.Column('symbol', sa.String(length=32), nullable=False, server_default=''),
        sa.Column('market_id', sa.Integer(), nullable=True),
        sa.Column('side', sa.Enum('BUY', 'SELL', name='fill_side_enum'), nullable=False),
        sa.Column('price', sa.Numeric(30, 12), nullable=False),
        sa.Column('quantity', sa.Numeric(30, 12), nullable=False),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('exchange', sa.String(length=32), nullable=False, server_default='Lighter'),
        sa.Column(
            'position_id',
            sa.String(length=64),
            sa.ForeignKey('positions.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_fills_symbol', 'fills', ['symbol'])
    op.create_index('ix_fills_timestamp', 'fills', ['timestamp'])


def downgrade():
    op.drop_index('ix_fills_timestamp', table_name='fills')
    op.drop_index('ix_fills_symbol', table_name='fills')
    op.drop_table('fills')
    op.drop_index('ix_positions_status', table_name='positions')
    op.drop_index('ix_positions_symbol', table_name='positions')
    op.drop_table('positions')

    # Drop enums (Postgres)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute('DROP TYPE IF EXISTS fill_side_enum')
