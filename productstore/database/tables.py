# productstore/database/tables.py
# SQLAlchemy Core metadata and table definitions: products, orders and their join table.
#
# The repositories talk to these tables through plain SQL text; the Table
# objects exist so create_all and Alembic know the schema.

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Numeric, Table, Text, CheckConstraint

PRODUCTS_TABLE = 'products'
ORDERS_TABLE = 'orders'
JOIN_TABLE = 'orders_products'

# Constraint names must match the ones in alembic/versions
metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
})

products = Table(
    PRODUCTS_TABLE,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("price", Numeric(12, 2, asdecimal=False), nullable=False),
    CheckConstraint("price >= 0", name="price_non_negative"),
)

orders = Table(
    ORDERS_TABLE,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=True, index=True),  # users live outside this store
)

# Composite primary key: a given (order, product) pair appears at most once
orders_products = Table(
    JOIN_TABLE,
    metadata,
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True, index=True),
)
