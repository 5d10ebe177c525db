"""Initial ordering schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_SESSION_CLAUSE = sa.text("status NOT IN ('completed', 'cleared')")


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table('restaurant_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_restaurant_settings_id', 'restaurant_settings', ['id'])
    op.create_index('ix_restaurant_settings_setting_key', 'restaurant_settings',
                    ['setting_key'], unique=True)
    op.create_index('ix_restaurant_settings_created_at', 'restaurant_settings', ['created_at'])

    op.create_table('delivery_zones',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('estimated_time', sa.String(length=50), nullable=True),
        sa.Column('max_distance', sa.Numeric(6, 2), nullable=False),
        sa.Column('min_order_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_delivery_zones_id', 'delivery_zones', ['id'])
    op.create_index('ix_delivery_zones_max_distance', 'delivery_zones', ['max_distance'])
    op.create_index('ix_delivery_zones_created_at', 'delivery_zones', ['created_at'])

    op.create_table('customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('total_orders', sa.Integer(), nullable=False),
        sa.Column('total_spent', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_id', 'customers', ['id'])
    op.create_index('ix_customers_phone', 'customers', ['phone'], unique=True)
    op.create_index('ix_customers_created_at', 'customers', ['created_at'])

    op.create_table('customer_addresses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('landmark', sa.String(length=255), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_customer_addresses_id', 'customer_addresses', ['id'])
    op.create_index('ix_customer_addresses_customer_id', 'customer_addresses', ['customer_id'])
    op.create_index('ix_customer_addresses_created_at', 'customer_addresses', ['created_at'])

    op.create_table('table_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_id', sa.Integer(), nullable=False),
        sa.Column('customer_name', sa.String(length=100), nullable=True),
        sa.Column('customer_phone', sa.String(length=20), nullable=True),
        sa.Column('session_start', sa.DateTime(), nullable=False),
        sa.Column('session_end', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_amount', sa.DECIMAL(10, 2), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_table_sessions_id', 'table_sessions', ['id'])
    op.create_index('ix_table_sessions_table_id', 'table_sessions', ['table_id'])
    op.create_index('ix_table_sessions_status', 'table_sessions', ['status'])
    op.create_index('ix_table_sessions_created_at', 'table_sessions', ['created_at'])
    # One active session per table
    op.create_index('uq_table_sessions_active_table', 'table_sessions', ['table_id'],
                    unique=True,
                    postgresql_where=ACTIVE_SESSION_CLAUSE,
                    sqlite_where=ACTIVE_SESSION_CLAUSE)

    op.create_table('table_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_session_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=100), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('gateway_response', sa.JSON(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['table_session_id'], ['table_sessions.id'],
                                ondelete='CASCADE'),
    )
    op.create_index('ix_table_payments_id', 'table_payments', ['id'])
    op.create_index('ix_table_payments_table_session_id', 'table_payments',
                    ['table_session_id'])
    op.create_index('ix_table_payments_transaction_id', 'table_payments', ['transaction_id'])
    op.create_index('ix_table_payments_payment_status', 'table_payments', ['payment_status'])
    op.create_index('ix_table_payments_created_at', 'table_payments', ['created_at'])

    op.create_table('orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=50), nullable=False),
        sa.Column('order_type', sa.String(length=20), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('customer_name', sa.String(length=100), nullable=False),
        sa.Column('customer_phone', sa.String(length=20), nullable=False),
        sa.Column('table_id', sa.Integer(), nullable=True),
        sa.Column('table_session_id', sa.Integer(), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('delivery_latitude', sa.Float(), nullable=True),
        sa.Column('delivery_longitude', sa.Float(), nullable=True),
        sa.Column('delivery_landmark', sa.String(length=255), nullable=True),
        sa.Column('delivery_distance', sa.Numeric(6, 2), nullable=True),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('discount', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['table_session_id'], ['table_sessions.id'],
                                ondelete='SET NULL'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_order_type', 'orders', ['order_type'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_customer_phone', 'orders', ['customer_phone'])
    op.create_index('ix_orders_table_id', 'orders', ['table_id'])
    op.create_index('ix_orders_table_session_id', 'orders', ['table_session_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table('order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('menu_item_id', sa.String(length=50), nullable=True),
        sa.Column('item_name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_created_at', 'order_items', ['created_at'])


def downgrade():
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('table_payments')
    op.drop_index('uq_table_sessions_active_table', table_name='table_sessions')
    op.drop_table('table_sessions')
    op.drop_table('customer_addresses')
    op.drop_table('customers')
    op.drop_table('delivery_zones')
    op.drop_table('restaurant_settings')
