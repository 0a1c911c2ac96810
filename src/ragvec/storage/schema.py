"""Lifecycle of the documents table.

``SchemaManager.initialize`` runs once while the application starts, before
any request is served. It creates the table when it is missing and checks
the column shape when it already exists. ``reset_table`` is the only
destructive operation and is reached at startup only when the reset switch
has been explicitly acknowledged in configuration.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy import func, inspect, select, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from ragvec.core.config import StoreConfig
from ragvec.core.exceptions import ConfigurationError, SchemaError
from ragvec.models.document import REQUIRED_COLUMNS, document_table
from ragvec.storage.metrics import MIN_EXTENSION_VERSION, parse_version

logger = logging.getLogger(__name__)

UNDEFINED_TABLE = "42P01"
DUPLICATE_TABLE = "42P07"
DUPLICATE_OBJECT = "42710"
UNIQUE_VIOLATION = "23505"  # concurrent CREATE on the same catalog row


def sqlstate(exc: DBAPIError) -> str | None:
    """Extract the PostgreSQL SQLSTATE from a wrapped driver error."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


class SchemaManager:
    def __init__(self, engine: AsyncEngine, config: StoreConfig) -> None:
        self._engine = engine
        self._config = config
        self.table = document_table(config.table_name, config.dimensions)

    async def initialize(self) -> int:
        """Make sure the table exists with the expected shape. Returns the row count."""
        await self.ensure_extension()
        await self.check_extension_version()

        if self._config.reset_on_startup:
            await self.reset_table()
            return 0

        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(select(func.count()).select_from(self.table))
                count = result.scalar_one()
        except (SQLAlchemyError, OSError) as e:
            if not isinstance(e, DBAPIError) or sqlstate(e) != UNDEFINED_TABLE:
                raise SchemaError(f"Cannot read table '{self.table.name}': {e}") from e
            logger.info("Table %s does not exist yet", self.table.name)
            await self.create_table()
            return 0

        await self.verify_columns()
        logger.info("Table %s exists with %d documents", self.table.name, count)
        return count

    async def ensure_extension(self) -> None:
        await self._run_ddl(
            "CREATE EXTENSION vector",
            lambda conn: conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector")),
            tolerated={DUPLICATE_OBJECT, UNIQUE_VIOLATION},
        )

    async def check_extension_version(self) -> None:
        """Refuse a metric whose operator the installed extension does not have."""
        required = MIN_EXTENSION_VERSION.get(self._config.metric)
        if required is None:
            return
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    text("SELECT extversion FROM pg_extension WHERE extname = 'vector'")
                )
                installed = result.scalar_one()
        except (SQLAlchemyError, OSError) as e:
            raise SchemaError(f"Cannot read vector extension version: {e}") from e

        if parse_version(str(installed)) < required:
            raise ConfigurationError(
                f"Distance metric {self._config.metric} needs vector extension "
                f"{'.'.join(map(str, required))} or newer, server has {installed}"
            )
        logger.info("vector extension %s supports %s", installed, self._config.metric)

    async def create_table(self) -> None:
        await self._run_ddl(
            f"CREATE TABLE {self.table.name}",
            lambda conn: conn.run_sync(self.table.create, checkfirst=True),
            tolerated={DUPLICATE_TABLE, DUPLICATE_OBJECT, UNIQUE_VIOLATION},
        )
        logger.info("Created table %s (vector dimensions: %d)", self.table.name, self._config.dimensions)

    async def drop_table(self) -> None:
        await self._run_ddl(
            f"DROP TABLE {self.table.name}",
            lambda conn: conn.run_sync(self.table.drop, checkfirst=True),
            tolerated={UNDEFINED_TABLE},
        )

    async def reset_table(self) -> None:
        """Drop and recreate the table. Every stored document is lost."""
        logger.warning(
            "Resetting table %s: all stored documents will be deleted", self.table.name
        )
        await self.drop_table()
        await self.create_table()

    async def verify_columns(self) -> None:
        name = self.table.name
        try:
            async with self._engine.connect() as conn:
                columns = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_columns(name)
                )
        except (SQLAlchemyError, OSError) as e:
            raise SchemaError(f"Cannot inspect table '{name}': {e}") from e

        by_name = {column["name"]: column for column in columns}
        missing = [column for column in REQUIRED_COLUMNS if column not in by_name]
        if missing:
            raise SchemaError(f"Table '{name}' is missing columns: {', '.join(missing)}")

        # Reflected as pgvector.sqlalchemy.Vector when the extension type is known.
        width = getattr(by_name["embedding"].get("type"), "dim", None)
        if width is not None and width != self._config.dimensions:
            raise SchemaError(
                f"Table '{name}' stores {width}-dimension embeddings, "
                f"configured embedding_dimensions is {self._config.dimensions}"
            )

    async def _run_ddl(
        self,
        description: str,
        statement: Callable[[AsyncConnection], Awaitable[object]],
        tolerated: set[str],
    ) -> None:
        try:
            async with self._engine.begin() as conn:
                await statement(conn)
        except DBAPIError as e:
            code = sqlstate(e)
            if code in tolerated:
                logger.info("%s skipped (SQLSTATE %s)", description, code)
                return
            logger.error("%s failed: %s", description, e)
            raise SchemaError(f"{description} failed: {e}") from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("%s failed: %s", description, e)
            raise SchemaError(f"{description} failed: {e}") from e
