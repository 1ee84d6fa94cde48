"""
Sync Plan Builder
=================

Main entry point: turns a schema inventory into an ordered list of TablePlan.

Planning is sequential; one inventory query, then per table
columns -> primary key -> max value.
"""

import logging
from typing import List

from .connectors.mysql_connector import MetadataClient
from .key_resolver import KeyResolver
from .models import TablePlan
from .settings import SyncSettings
from .table_filter import rejection_reason

logger = logging.getLogger(__name__)


class SyncPlanBuilder:
    """
    Builds the per-table sync plan for one schema.

    Key fields are always filled in honestly; the auto-parallelize switch is
    applied by the read side (see read_requests.plan_read), never here.
    """

    def __init__(self, metadata: MetadataClient, sync_settings: SyncSettings):
        """
        Initialize the builder.

        Args:
            metadata: Catalog client for the source schema
            sync_settings: Filtering and partitioning settings
        """
        self.metadata = metadata
        self.sync_settings = sync_settings
        self.key_resolver = KeyResolver(metadata, small_table_bytes=sync_settings.small_table_bytes)

    def build(self) -> List[TablePlan]:
        """
        Build plans for every admitted table, in inventory order.

        Raises:
            SourceConnectionError: If no pooled connection can be obtained
            CatalogQueryError: If a catalog query fails
        """
        logger.info("=" * 60)
        logger.info(f"PLANNING SYNC FOR SCHEMA {self.metadata.schema}")
        logger.info("=" * 60)

        inventory = self.metadata.list_tables()
        plans = []
        for table in inventory:
            reason = rejection_reason(
                table.name, table.row_count, self.sync_settings.whitelist, self.sync_settings.blacklist
            )
            if reason:
                logger.info(f"Skipping table {table.name}, {reason}.")
                continue

            logger.info(f"Finding keys for {table.name}")
            plans.append(self.key_resolver.resolve(table))

        keyed = sum(1 for p in plans if p.is_keyed)
        logger.info("=" * 60)
        logger.info("PLANNING COMPLETE")
        logger.info(f"  Tables: {len(plans)} planned, {len(inventory) - len(plans)} skipped")
        logger.info(f"  Keyed: {keyed}, unkeyed: {len(plans) - keyed}")
        logger.info("=" * 60)
        return plans


def build_plan(metadata: MetadataClient, sync_settings: SyncSettings) -> List[TablePlan]:
    return SyncPlanBuilder(metadata, sync_settings).build()
