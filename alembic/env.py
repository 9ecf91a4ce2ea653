from logging.config import fileConfig
from typing import Any

from sqlalchemy import engine_from_config, pool
from sqlalchemy.schema import CreateSchema

from alembic import context  # type: ignore[attr-defined]
from channel_sync.config import DATABASE_URL, SCHEMA
from channel_sync.models.base import Base
from channel_sync.models.channex import ChannexProperty  # noqa: F401
from channel_sync.models.credentials import CredentialRecord  # noqa: F401
from channel_sync.models.smart_locks import SmartLock  # noqa: F401
from channel_sync.models.sync_records import SyncRecord  # noqa: F401
from channel_sync.models.units import Property, Unit  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# `alembic -x db_url=... upgrade head` targets another database, e.g. a test one
config.set_main_option(
    "sqlalchemy.url", context.get_x_argument(as_dictionary=True).get("db_url", DATABASE_URL)
)


def include_object(
    object_: Any,
    name: str,
    type_: str,
    reflected: bool,
    compare_to: Any,
) -> bool:
    """Only compare objects in the channel_sync schema; the PMS owns everything else."""
    return getattr(object_, "schema", SCHEMA) == SCHEMA


def _configure(**kwargs: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        include_schemas=True,
        include_object=include_object,
        version_table_schema=SCHEMA,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live connection, creating the schema first."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        connection.execute(CreateSchema(SCHEMA, if_not_exists=True))
        connection.commit()
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
