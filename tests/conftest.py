"""
Shared fixtures.

The catalog is emulated with an in-memory SQLite database that has an
`information_schema` database attached, so the planner's catalog SQL runs
unchanged against it.
"""

import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sync_planner.connectors.mysql_connector import MetadataClient  # noqa: E402
from sync_planner.settings import SyncSettings  # noqa: E402

SCHEMA = "shop"

CATALOG_DDL = [
    """CREATE TABLE information_schema.tables (
        table_schema TEXT, table_name TEXT, table_rows INTEGER,
        data_length INTEGER, index_length INTEGER)""",
    """CREATE TABLE information_schema.columns (
        table_schema TEXT, table_name TEXT, column_name TEXT, ordinal_position INTEGER)""",
    """CREATE TABLE information_schema.table_constraints (
        constraint_name TEXT, table_schema TEXT, table_name TEXT, constraint_type TEXT)""",
    """CREATE TABLE information_schema.key_column_usage (
        constraint_name TEXT, table_schema TEXT, table_name TEXT,
        column_name TEXT, ordinal_position INTEGER)""",
]


class SqliteCatalog:
    """Registers tables in the emulated information_schema."""

    def __init__(self, engine, schema: str = SCHEMA):
        self.engine = engine
        self.schema = schema

    def add_table(
        self,
        name: str,
        row_count: Optional[int] = 100,
        data_length: Optional[int] = 10_000_000,
        index_length: Optional[int] = 0,
        columns: Sequence[str] = ("id", "name"),
        primary_key: Sequence[str] = ("id",),
        key_values: Optional[Iterable] = None,
        key_type: str = "INTEGER",
        schema: Optional[str] = None,
    ):
        schema = schema or self.schema
        with self.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO information_schema.tables VALUES (:s, :t, :r, :d, :i)"),
                {"s": schema, "t": name, "r": row_count, "d": data_length, "i": index_length},
            )
            for position, column in enumerate(columns, start=1):
                conn.execute(
                    text("INSERT INTO information_schema.columns VALUES (:s, :t, :c, :p)"),
                    {"s": schema, "t": name, "c": column, "p": position},
                )
            if primary_key:
                conn.execute(
                    text("INSERT INTO information_schema.table_constraints VALUES ('PRIMARY', :s, :t, 'PRIMARY KEY')"),
                    {"s": schema, "t": name},
                )
                # reversed insert order checks that ordinal_position drives the result
                for position, column in reversed(list(enumerate(primary_key, start=1))):
                    conn.execute(
                        text("INSERT INTO information_schema.key_column_usage VALUES ('PRIMARY', :s, :t, :c, :p)"),
                        {"s": schema, "t": name, "c": column, "p": position},
                    )
            if key_values is not None:
                key_column = primary_key[0]
                others = [c for c in columns if c != key_column]
                column_ddl = ", ".join([f'"{key_column}" {key_type}'] + [f'"{c}" TEXT' for c in others])
                conn.execute(text(f'CREATE TABLE "{name}" ({column_ddl})'))
                for value in key_values:
                    conn.execute(text(f'INSERT INTO "{name}" ("{key_column}") VALUES (:v)'), {"v": value})

    def add_unique_constraint(self, table: str, column: str):
        with self.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO information_schema.table_constraints VALUES ('uq', :s, :t, 'UNIQUE')"),
                {"s": self.schema, "t": table},
            )
            conn.execute(
                text("INSERT INTO information_schema.key_column_usage VALUES ('uq', :s, :t, :c, 1)"),
                {"s": self.schema, "t": table, "c": column},
            )


@pytest.fixture
def catalog_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _attach_information_schema(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("ATTACH DATABASE ':memory:' AS information_schema")
        cursor.close()

    with engine.begin() as conn:
        for ddl in CATALOG_DDL:
            conn.execute(text(ddl))

    yield engine
    engine.dispose()


@pytest.fixture
def catalog(catalog_engine) -> SqliteCatalog:
    return SqliteCatalog(catalog_engine)


@pytest.fixture
def metadata(catalog_engine) -> MetadataClient:
    return MetadataClient(catalog_engine, SCHEMA)


@pytest.fixture
def sync_settings() -> SyncSettings:
    return SyncSettings(auto_parallelize=True, megabytes_per_partition=1)
