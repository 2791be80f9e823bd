from __future__ import annotations
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv
import os, sys

# Allow importing labtrack models when alembic runs from backend/
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from labtrack.models import Base  # noqa: E402

load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Same source of truth as create_app
config.set_main_option('sqlalchemy.url', os.getenv('DATABASE_URL', 'sqlite:///dev.db'))

# SQLite cannot ALTER most columns in place; batch mode rebuilds the table.
MIGRATION_OPTS = dict(target_metadata=Base.metadata, render_as_batch=True, compare_type=True)


def run_migrations_offline():
    context.configure(url=config.get_main_option('sqlalchemy.url'), literal_binds=True, **MIGRATION_OPTS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = engine_from_config(config.get_section(config.config_ini_section, {}), prefix='sqlalchemy.',
                                poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **MIGRATION_OPTS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
