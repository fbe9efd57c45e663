# alembic/env.py
# Migration environment for the ProductStore schema (products, orders, orders_products).
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from productstore.config import config as app_config  # noqa: E402
from productstore.database.tables import metadata  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = metadata

def _database_url() -> str:
    """`alembic -x db_url=...` wins over the application's configured URI."""
    url = context.get_x_argument(as_dictionary=True).get('db_url') or app_config.SQLALCHEMY_DATABASE_URI
    if not url:
        sys.exit("No database URL: set DATABASE_URL / POSTGRES_* in .env or pass -x db_url=...")
    return url

def _include_object(obj, name, type_, reflected, compare_to):
    # Autogenerate only manages the store's own tables
    if type_ == "table":
        return name in target_metadata.tables
    return True

def _configure_options(url: str) -> dict:
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        include_object=_include_object,
        # SQLite cannot ALTER constraints in place
        render_as_batch=url.startswith("sqlite"),
    )

def run_migrations_offline() -> None:
    url = _database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    url = _database_url()
    # ConfigParser interpolation: escape percent-encoded password characters
    config.set_main_option('sqlalchemy.url', url.replace('%', '%%'))
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
