"""
Partition Planner
=================

Turns a table's byte size and key range into a partition count.

    density    = (max_key - min_key) / max_key
    effective  = size_bytes * density
    partitions = ceil(effective / bytes_per_partition)

density scales the size down for tables whose key space is sparse relative to
the stored rows, so large key gaps do not over-partition the read.
"""

import math

from .models import TablePlan


def megabytes_to_bytes(megabytes: float) -> int:
    return int(megabytes * 1024 * 1024)


def key_density(min_key: int, max_key: int) -> float:
    """Fraction of the key space assumed live; 0 when max_key is 0."""
    if max_key == 0:
        return 0.0
    return (max_key - min_key) / max_key


def partition_count(size_bytes: int, min_key: int, max_key: int, bytes_per_partition: int) -> int:
    """
    Compute the number of read partitions for a key range.

    Args:
        size_bytes: Data + index size of the table
        min_key: Lower bound of the key range (inclusive)
        max_key: Upper bound of the key range (inclusive)
        bytes_per_partition: Target bytes per partition

    Returns:
        Partition count; 0 when max_key is 0

    Raises:
        ValueError: If max_key < min_key, size_bytes < 0 or bytes_per_partition <= 0
    """
    if bytes_per_partition <= 0:
        raise ValueError(f"bytes_per_partition must be > 0, got {bytes_per_partition}")
    if size_bytes < 0:
        raise ValueError(f"size_bytes must be >= 0, got {size_bytes}")
    if max_key < min_key:
        raise ValueError(f"max_key ({max_key}) must be >= min_key ({min_key})")

    effective_size = size_bytes * key_density(min_key, max_key)
    return math.ceil(effective_size / bytes_per_partition)


def partition_count_for(plan: TablePlan, bytes_per_partition: int) -> int:
    """Partition count for a plan; unkeyed plans get 0."""
    if not plan.is_keyed:
        return 0
    return partition_count(plan.size_bytes, plan.min_key, plan.max_key, bytes_per_partition)
