"""Create storefront tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

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
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Reusable updated_at trigger function
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), server_default='customer', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("role IN ('customer', 'admin')", name='ck_profiles_role')
    )

    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('is_available', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.execute("""
        CREATE TRIGGER update_products_updated_at
        BEFORE UPDATE ON products
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)

    op.create_table(
        'addresses',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('street_address', sa.Text(), nullable=False),
        sa.Column('city', sa.Text(), nullable=False),
        sa.Column('province', sa.Text(), nullable=False),
        sa.Column('postal_code', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE')
    )
    op.create_index('ix_addresses_user_id', 'addresses', ['user_id'])

    op.create_table(
        'cart_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('quantity', sa.Integer(), server_default='1', nullable=False),
        sa.Column('size', sa.Text(), nullable=True),
        sa.Column('color', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE')
    )
    op.create_index('ix_cart_items_user_id', 'cart_items', ['user_id'])

    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('order_number', sa.Text(), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('address_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_guest_order', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('guest_name', sa.Text(), nullable=True),
        sa.Column('guest_email', sa.Text(), nullable=True),
        sa.Column('guest_phone', sa.Text(), nullable=True),
        sa.Column('guest_address_line1', sa.Text(), nullable=True),
        sa.Column('guest_address_line2', sa.Text(), nullable=True),
        sa.Column('guest_city', sa.Text(), nullable=True),
        sa.Column('guest_province', sa.Text(), nullable=True),
        sa.Column('guest_postal_code', sa.Text(), nullable=True),
        sa.Column('delivery_method', sa.Text(), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('discount_code', sa.Text(), nullable=True),
        sa.Column('discount_amount', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('payment_status', sa.Text(), server_default='awaiting_payment', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['address_id'], ['addresses.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "(user_id IS NOT NULL AND is_guest_order = false) OR "
            "(user_id IS NULL AND is_guest_order = true AND guest_name IS NOT NULL AND guest_email IS NOT NULL)",
            name='check_user_or_guest'
        )
    )
    op.create_index('idx_orders_is_guest', 'orders', ['is_guest_order'])
    op.create_index('idx_orders_guest_email', 'orders', ['guest_email'])
    op.execute("""
        CREATE TRIGGER update_orders_updated_at
        BEFORE UPDATE ON orders
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)

    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('size', sa.Text(), nullable=True),
        sa.Column('color', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])


def downgrade():
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')

    op.execute('DROP TRIGGER IF EXISTS update_orders_updated_at ON orders')
    op.drop_index('idx_orders_guest_email', table_name='orders')
    op.drop_index('idx_orders_is_guest', table_name='orders')
    op.drop_table('orders')

    op.drop_index('ix_cart_items_user_id', table_name='cart_items')
    op.drop_table('cart_items')

    op.drop_index('ix_addresses_user_id', table_name='addresses')
    op.drop_table('addresses')

    op.execute('DROP TRIGGER IF EXISTS update_products_updated_at ON products')
    op.drop_table('products')

    op.drop_table('profiles')

    op.execute('DROP FUNCTION IF EXISTS update_updated_at_column()')
