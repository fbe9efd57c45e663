# alembic/versions/3f1c9a2b7d10_create_products_orders_and_join_table.py
"""Create products, orders and orders_products

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2, asdecimal=False), nullable=False),
        sa.CheckConstraint('price >= 0', name=op.f('ck_products_price_non_negative')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
    )
    op.create_index(op.f('ix_orders_user_id'), 'orders', ['user_id'], unique=False)
    op.create_table(
        'orders_products',
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name=op.f('fk_orders_products_order_id_orders'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name=op.f('fk_orders_products_product_id_products'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('order_id', 'product_id', name=op.f('pk_orders_products')),
    )
    op.create_index(op.f('ix_orders_products_product_id'), 'orders_products', ['product_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_orders_products_product_id'), table_name='orders_products')
    op.drop_table('orders_products')
    op.drop_index(op.f('ix_orders_user_id'), table_name='orders')
    op.drop_table('orders')
    op.drop_table('products')
