"""
Key Resolver
============

Decides, per admitted table, whether a key-based partitioned read is possible
and which key range it covers.
"""

import logging
import warnings

from sqlalchemy.engine import Connection

from .connectors.mysql_connector import MetadataClient
from .errors import CompositeKeyWarning
from .models import CatalogTable, KeyedTablePlan, NonNumericKey, TablePlan, UnkeyedTablePlan
from .settings import DEFAULT_SMALL_TABLE_BYTES

logger = logging.getLogger(__name__)

MUTABILITY_COLUMN = "updated_at"
KEY_FLOOR = 0


class KeyResolver:
    """
    Resolves the key fields of a TablePlan.

    Steps, in order: columns (mutability), small-table shortcut, primary key
    discovery, max-value probe. Any per-table key problem yields an unkeyed
    plan instead of an error.
    """

    def __init__(self, metadata: MetadataClient, small_table_bytes: int = DEFAULT_SMALL_TABLE_BYTES):
        self.metadata = metadata
        self.small_table_bytes = small_table_bytes

    def resolve(self, table: CatalogTable, conn: Connection = None) -> TablePlan:
        name = table.name
        columns = self.metadata.list_columns(name, conn=conn)
        immutable = MUTABILITY_COLUMN not in columns

        def unkeyed() -> UnkeyedTablePlan:
            return UnkeyedTablePlan(name=name, size_bytes=table.size_bytes, immutable=immutable)

        if table.size_bytes < self.small_table_bytes:
            logger.warning(f"Skipping key discovery for small table {name} ({table.size_bytes} bytes)")
            return unkeyed()

        key_columns = self.metadata.find_primary_key_columns(name, conn=conn)
        if not key_columns:
            logger.warning(f"Couldn't find primary key for table {name}.")
            return unkeyed()

        key_column = key_columns[0]
        if len(key_columns) > 1:
            # TODO: pick the most selective integer column of a composite key
            message = f"Table {name} has a composite primary key {key_columns}. Using only {key_column}"
            logger.warning(message)
            warnings.warn(
                message,
                CompositeKeyWarning,
                stacklevel=2,
            )

        probe = self.metadata.max_value(name, key_column, conn=conn)
        if isinstance(probe, NonNumericKey):
            logger.warning(f"Primary key {key_column} of table {name} is not a number: {probe.error}")
            return unkeyed()
        if probe.value is None:
            logger.warning(f"Table {name} has no rows in {key_column}; planning without a key.")
            return unkeyed()
        if probe.value < KEY_FLOOR:
            logger.warning(f"Max key {probe.value} of table {name} is below {KEY_FLOOR}; planning without a key.")
            return unkeyed()

        return KeyedTablePlan(
            name=name,
            size_bytes=table.size_bytes,
            immutable=immutable,
            key_column=key_column,
            min_key=KEY_FLOOR,
            max_key=probe.value,
        )
