"""
MySQL Metadata Connector
========================

Read-only catalog queries against a MySQL source:
- Table inventory (rows, data + index size)
- Column listing
- Primary key columns in constraint order
- Max value of a key column

All queries run on a bounded, pre-pinged connection pool. Each query checks a
connection out for its own duration unless the caller passes one in.
"""

import logging
import math
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator, List, Optional, Set

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from ..errors import CatalogQueryError, NonNumericKeyError, SourceConnectionError
from ..models import CatalogTable, MaxValue, MaxValueResult, NonNumericKey
from ..settings import ConnectionSettings, PoolSettings

logger = logging.getLogger(__name__)

TABLE_INVENTORY_QUERY = """
    SELECT table_name AS table_name,
           table_rows AS table_rows,
           data_length AS data_length,
           index_length AS index_length
    FROM information_schema.tables
    WHERE table_schema = :schema
      AND data_length IS NOT NULL
"""

COLUMN_NAMES_QUERY = """
    SELECT column_name AS column_name
    FROM information_schema.columns
    WHERE table_schema = :schema
      AND table_name = :table
"""

PRIMARY_KEY_QUERY = """
    SELECT k.column_name AS column_name
    FROM information_schema.table_constraints t
    JOIN information_schema.key_column_usage k
      USING (constraint_name, table_schema, table_name)
    WHERE t.constraint_type = 'PRIMARY KEY'
      AND t.table_schema = :schema
      AND t.table_name = :table
    ORDER BY k.ordinal_position
"""


def create_source_engine(connection: ConnectionSettings, pool: PoolSettings = None) -> Engine:
    """
    Create the pooled engine used for all catalog queries.

    Args:
        connection: Source connection identity
        pool: Pool bounds; defaults to 5 connections and a 3 second timeout

    Returns:
        SQLAlchemy Engine
    """
    pool = pool or PoolSettings()
    engine = create_engine(
        connection.url(),
        poolclass=QueuePool,
        pool_size=pool.size,
        max_overflow=0,
        pool_timeout=pool.timeout_seconds,
        pool_pre_ping=True,
        connect_args={
            "connect_timeout": max(1, math.ceil(pool.timeout_seconds)),
            # pin the session to UTC so temporal values are read consistently
            "init_command": "SET time_zone = '+00:00'",
        },
    )
    logger.info(
        f"Created connection pool for MySQL: {connection.host}:{connection.port}/{connection.database} "
        f"(size={pool.size}, timeout={pool.timeout_seconds}s)"
    )
    return engine


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier."""
    return "`" + name.replace("`", "``") + "`"


def interpret_max_value(table: str, column: str, value: Any) -> MaxValueResult:
    """
    Interpret the raw result of a max() probe.

    Integers, and integral Decimal/float values, are accepted. NULL means the
    table has no rows. Anything else (strings, temporal types, fractions) is a
    non-numeric key.
    """
    if value is None:
        return MaxValue(None)
    if isinstance(value, bool):
        return NonNumericKey(NonNumericKeyError(table, column, value))
    if isinstance(value, int):
        return MaxValue(value)
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return MaxValue(int(value))
    elif isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return MaxValue(int(value))
    return NonNumericKey(NonNumericKeyError(table, column, value))


class MetadataClient:
    """
    Catalog client scoped to one schema.
    """

    def __init__(self, engine: Engine, schema: str):
        """
        Initialize metadata client.

        Args:
            engine: Pooled engine, created once at startup
            schema: Database/schema whose tables are planned
        """
        self.engine = engine
        self.schema = schema

    @contextmanager
    def session(self) -> Iterator[Connection]:
        """Check a connection out of the pool; it is always returned on exit."""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as e:
            raise SourceConnectionError(f"Could not obtain a connection to '{self.schema}': {e}") from e
        try:
            yield conn
        finally:
            conn.close()

    def check_connection(self):
        """Validate connectivity with a trivial query."""
        with self.session() as conn:
            try:
                conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                raise SourceConnectionError(f"Connection check failed for '{self.schema}': {e}") from e
        logger.info(f"Connected to MySQL schema: {self.schema}")

    def _fetch(self, query: str, params: dict, conn: Optional[Connection], what: str) -> list:
        if conn is None:
            with self.session() as scoped:
                return self._fetch(query, params, scoped, what)
        try:
            return conn.execute(text(query), params).fetchall()
        except SQLAlchemyError as e:
            raise CatalogQueryError(f"Catalog query failed ({what}): {e}") from e

    def list_tables(self, conn: Connection = None) -> List[CatalogTable]:
        """
        Get the table inventory of the schema.

        Tables without a size estimate (views) are excluded by the query.

        Returns:
            List of CatalogTable in catalog order
        """
        rows = self._fetch(TABLE_INVENTORY_QUERY, {"schema": self.schema}, conn, "table inventory")
        tables = [
            CatalogTable(
                name=row[0],
                row_count=int(row[1] or 0),
                size_bytes=int(row[2] or 0) + int(row[3] or 0),
            )
            for row in rows
        ]
        logger.info(f"Found {len(tables)} tables in {self.schema}")
        return tables

    def list_columns(self, table: str, conn: Connection = None) -> Set[str]:
        """Get the column names of a table."""
        rows = self._fetch(
            COLUMN_NAMES_QUERY, {"schema": self.schema, "table": table}, conn, f"columns of {table}"
        )
        return {row[0] for row in rows}

    def find_primary_key_columns(self, table: str, conn: Connection = None) -> List[str]:
        """
        Get the primary key columns of a table.

        Returns:
            Column names ordered by their position in the key; empty if none
        """
        rows = self._fetch(
            PRIMARY_KEY_QUERY, {"schema": self.schema, "table": table}, conn, f"primary key of {table}"
        )
        return [row[0] for row in rows]

    def max_value(self, table: str, column: str, conn: Connection = None) -> MaxValueResult:
        """
        Probe the maximum value of a column.

        Args:
            table: Table name as reported by the catalog
            column: Column to probe

        Returns:
            MaxValue (value None for an empty table) or NonNumericKey
        """
        query = f"SELECT max({quote_identifier(column)}) AS max_val FROM {quote_identifier(table)}"
        rows = self._fetch(query, {}, conn, f"max value of {table}.{column}")
        value = rows[0][0] if rows else None
        return interpret_max_value(table, column, value)
