"""initial restaurant schema

Revision ID: 5b1d2e7f9a10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '5b1d2e7f9a10'
down_revision = None
branch_labels = None
depends_on = None

BIGINT = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade():
    op.create_table(
        'user_profile',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100)),
        sa.Column('phone', sa.String(20)),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_user_profile_email', 'user_profile', ['email'], unique=True)
    op.create_table(
        'user_role',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('user_id', BIGINT, sa.ForeignKey('user_profile.id'), nullable=False, unique=True),
        sa.Column('role', sa.String(30), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_table(
        'password_reset_token',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('user_id', BIGINT, sa.ForeignKey('user_profile.id'), nullable=False),
        sa.Column('token', sa.String(128), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('used', sa.Boolean()),
    )
    op.create_table(
        'platform_settings',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('platform_name', sa.String(100)),
        sa.Column('support_email', sa.String(255)),
        sa.Column('enable_registration', sa.Boolean()),
        sa.Column('require_email_verification', sa.Boolean()),
        sa.Column('maintenance_mode', sa.Boolean()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_table(
        'restaurant',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('owner_id', BIGINT, sa.ForeignKey('user_profile.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('address', sa.String(200)),
        sa.Column('phone', sa.String(20)),
        sa.Column('email', sa.String(255)),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('logo_path', sa.String(300)),
        sa.Column('timezone', sa.String(64)),
        sa.Column('currency', sa.String(8)),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_restaurant_slug', 'restaurant', ['slug'], unique=True)
    op.create_index('ix_restaurant_owner_id', 'restaurant', ['owner_id'])
    op.create_table(
        'restaurant_permission',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('user_id', BIGINT, sa.ForeignKey('user_profile.id'), nullable=False),
        sa.Column('restaurant_id', BIGINT, sa.ForeignKey('restaurant.id'), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.UniqueConstraint('user_id', 'restaurant_id', name='uq_restaurant_permission_user'),
    )
    op.create_table(
        'restaurant_table',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('restaurant_id', BIGINT, sa.ForeignKey('restaurant.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('qr_code_token', sa.String(64), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_restaurant_table_restaurant_id', 'restaurant_table', ['restaurant_id'])
    op.create_table(
        'payment_method',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('restaurant_id', BIGINT, sa.ForeignKey('restaurant.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_enabled', sa.Boolean()),
        sa.Column('position', sa.Integer()),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_payment_method_restaurant_id', 'payment_method', ['restaurant_id'])
    op.create_table(
        'menu',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('restaurant_id', BIGINT, sa.ForeignKey('restaurant.id'), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_menu_restaurant_id', 'menu', ['restaurant_id'])
    op.create_table(
        'category',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('menu_id', BIGINT, sa.ForeignKey('menu.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('position', sa.Integer()),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_category_menu_id', 'category', ['menu_id'])
    op.create_table(
        'menu_item',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('menu_id', BIGINT, sa.ForeignKey('menu.id'), nullable=False),
        sa.Column('category_id', BIGINT, sa.ForeignKey('category.id')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('image_url', sa.String(500)),
        sa.Column('image_path', sa.String(300)),
        sa.Column('prep_time_minutes', sa.Integer()),
        sa.Column('is_available', sa.Boolean()),
        sa.Column('position', sa.Integer()),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_menu_item_menu_id', 'menu_item', ['menu_id'])
    op.create_table(
        'order',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('restaurant_id', BIGINT, sa.ForeignKey('restaurant.id'), nullable=False),
        sa.Column('table_id', BIGINT, sa.ForeignKey('restaurant_table.id', ondelete='SET NULL')),
        sa.Column('order_number', sa.String(20), nullable=False),
        sa.Column('customer_name', sa.String(100), nullable=False),
        sa.Column('customer_phone', sa.String(30)),
        sa.Column('notes', sa.Text()),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('order_status', sa.String(20)),
        sa.Column('payment_status', sa.String(20)),
        sa.Column('payment_method', sa.String(100)),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('restaurant_id', 'order_number', name='uq_order_restaurant_number'),
    )
    op.create_index('ix_order_restaurant_status', 'order', ['restaurant_id', 'order_status'])
    op.create_index('ix_order_restaurant_created', 'order', ['restaurant_id', 'created_at'])
    op.create_table(
        'order_item',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('order_id', BIGINT, sa.ForeignKey('order.id'), nullable=False),
        sa.Column('menu_item_id', BIGINT, sa.ForeignKey('menu_item.id', ondelete='SET NULL')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('options', sa.JSON()),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
    )
    op.create_index('ix_order_item_order_id', 'order_item', ['order_id'])
    op.create_table(
        'order_status_log',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('order_id', BIGINT, sa.ForeignKey('order.id'), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('updated_by', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime()),
    )


def downgrade():
    for table in (
        'order_status_log',
        'order_item',
        'order',
        'menu_item',
        'category',
        'menu',
        'payment_method',
        'restaurant_table',
        'restaurant_permission',
        'restaurant',
        'platform_settings',
        'password_reset_token',
        'user_role',
        'user_profile',
    ):
        op.drop_table(table)
