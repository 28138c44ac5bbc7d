from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import event, inspect
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from policydesk.config import settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy drive BEGIN itself so SAVEPOINTs work on SQLite.

    The sqlite3 driver defers BEGIN until the first DML statement, which breaks
    nested transactions. Audit writes and per-row imports rely on them.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_async_engine(settings.DATABASE_URL, echo=False)
enable_sqlite_savepoints(engine)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


MIGRATIONS_DIR = Path(__file__).parent / "migrations"
BASELINE_REVISION = "001"


def run_migrations(connection: Connection) -> None:
    """Upgrade the schema to head on an open synchronous connection."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.attributes["connection"] = connection

    # Databases created before migrations existed already hold the baseline tables
    tables = set(inspect(connection).get_table_names())
    if "contracts" in tables and "alembic_version" not in tables:
        command.stamp(config, BASELINE_REVISION)
    command.upgrade(config, "head")


async def init_db() -> None:
    if engine.dialect.name == "sqlite":
        Path(settings.DATA_DIR).mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(run_migrations)
