"""
Source Connectors
=================

Catalog access for the sync planner.
"""

from .mysql_connector import MetadataClient, create_source_engine, interpret_max_value

__all__ = ["MetadataClient", "create_source_engine", "interpret_max_value"]
