"""
MySQL Sync Planner
==================

Plans bulk ingestion of a MySQL schema into a distributed analytics engine:
- Table discovery with empty/whitelist/blacklist filtering
- Primary key discovery and numeric key range probing
- Partition count heuristic sized against a byte budget

This package ONLY plans. Reading the data is left to an external read engine,
which receives one immutable TablePlan per table.
"""

__version__ = "1.0.0"
