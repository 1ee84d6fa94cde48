#!/usr/bin/env python3
"""
Planner Runner
==============

CLI to run the sync planner.

Usage:
    sync-planner test                       # Test the source connection
    sync-planner plan                       # Plan all tables, save logs/sync_plan.json
    sync-planner plan --output plan.csv     # Save the plan as CSV
"""

import argparse
import logging
import sys

from .connectors.mysql_connector import MetadataClient, create_source_engine
from .errors import SyncPlannerError
from .logging_setup import setup_logging
from .planner import SyncPlanBuilder
from .reporting import plans_to_frame, save_plan
from .settings import load_settings

logger = logging.getLogger(__name__)


def test_connection(config_path: str = None) -> bool:
    """Test the source connection and list the table inventory."""
    print("=" * 60)
    print("TESTING SOURCE CONNECTION")
    print("=" * 60)

    try:
        settings = load_settings(config_path)
        setup_logging(settings.logging)
        engine = create_source_engine(settings.connection, settings.pool)
        try:
            metadata = MetadataClient(engine, settings.connection.database)
            metadata.check_connection()
            print(f"\n✓ MySQL Source: {settings.connection.database}")
            for table in metadata.list_tables():
                print(f"    - {table.name}: {table.row_count:,} rows, {table.size_bytes:,} bytes")
        finally:
            engine.dispose()

        print("\n✓ Connection successful!")
        return True

    except SyncPlannerError as e:
        print(f"\n✗ Connection failed: {e}")
        return False


def run_plan(config_path: str = None, output_path: str = "logs/sync_plan.json") -> bool:
    """Build the sync plan and save it."""
    print("=" * 60)
    print("SYNC PLANNING")
    print("=" * 60)

    try:
        settings = load_settings(config_path)
        setup_logging(settings.logging)
        engine = create_source_engine(settings.connection, settings.pool)
        try:
            metadata = MetadataClient(engine, settings.connection.database)
            plans = SyncPlanBuilder(metadata, settings.sync).build()
        finally:
            engine.dispose()

        df = plans_to_frame(plans, settings.sync.auto_parallelize, settings.sync.bytes_per_partition)

        print("\n" + "=" * 60)
        print("PLAN SUMMARY")
        print("=" * 60)
        print(f"Auto-parallelize: {settings.sync.auto_parallelize}")
        print(f"Bytes per partition: {settings.sync.bytes_per_partition:,}")
        if df.empty:
            print("\nNo tables to sync")
        else:
            print("\n" + df.to_string(index=False))

        save_plan(df, output_path)
        print(f"\nPlan saved to: {output_path}")
        return True

    except SyncPlannerError as e:
        print(f"\n✗ Planning failed: {e}")
        logger.error(f"Planning failed: {e}")
        return False


def main(argv=None):
    parser = argparse.ArgumentParser(description="MySQL Sync Planner")
    parser.add_argument(
        "command",
        choices=["test", "plan"],
        help="Command to run"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to task_settings.json"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="logs/sync_plan.json",
        help="Where to save the plan (.json or .csv)"
    )

    args = parser.parse_args(argv)

    if args.command == "test":
        success = test_connection(config_path=args.config)
    else:
        success = run_plan(config_path=args.config, output_path=args.output)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
