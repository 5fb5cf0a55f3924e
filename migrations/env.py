"""Alembic environment. Migrations run on a synchronous psycopg2 engine."""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlmodel import SQLModel

import coachbook.models  # noqa: F401 - registers every table on SQLModel.metadata
from coachbook.core.config import settings
from coachbook.core.db import to_driver_url

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

SYNC_URL = to_driver_url(settings.database_url, "psycopg2")


def run() -> None:
    if context.is_offline_mode():
        # Emit SQL to stdout instead of executing it
        context.configure(
            url=SYNC_URL,
            target_metadata=SQLModel.metadata,
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    with create_engine(SYNC_URL).connect() as connection:
        context.configure(connection=connection, target_metadata=SQLModel.metadata)
        with context.begin_transaction():
            context.run_migrations()


run()
