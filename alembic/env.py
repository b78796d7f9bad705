from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

from mocards.db.base import Base
from mocards.db.models.admin_model import AdminAccount
from mocards.db.models.appointment_model import Appointment
from mocards.db.models.card_batch_model import CardBatch
from mocards.db.models.card_model import Card
from mocards.db.models.card_perk_model import CardPerk
from mocards.db.models.card_transaction_model import CardTransaction
from mocards.db.models.clinic_model import Clinic
from mocards.db.models.location_code_model import LocationCode
from mocards.core.config import settings

# Alembic Config object
config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Alembic runs on a plain sync engine, so the asyncpg driver suffix is dropped.
DATABASE_URL = settings.database_url.replace("+asyncpg", "")


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode (sync engine for Alembic)."""
    connectable = create_engine(
        DATABASE_URL,
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
