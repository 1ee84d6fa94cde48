"""
Read Requests
=============

Maps TablePlans onto the external read engine.

A table is read partitioned only when auto-parallelize is on, the plan is
keyed, and the computed partition count is at least 2.
"""

import logging
from typing import Iterable, List, Protocol

from .models import PartitionedRead, ReadRequest, TablePlan, UnpartitionedRead
from .partitioning import partition_count_for

logger = logging.getLogger(__name__)

MIN_PARALLEL_PARTITIONS = 2


class ReadEngine(Protocol):
    """Interface of the engine that executes the actual table reads."""

    def request_partitioned_read(
        self, table: str, key_column: str, min_key: int, max_key: int, num_partitions: int
    ) -> None:
        ...

    def request_unpartitioned_read(self, table: str) -> None:
        ...


def plan_read(plan: TablePlan, auto_parallelize: bool, bytes_per_partition: int) -> ReadRequest:
    """
    Decide how a single table is read.

    Args:
        plan: Table plan from SyncPlanBuilder
        auto_parallelize: Global switch; when off, key fields are ignored
        bytes_per_partition: Target bytes per partition

    Returns:
        PartitionedRead or UnpartitionedRead
    """
    if not auto_parallelize or not plan.is_keyed:
        return UnpartitionedRead(table=plan.name)

    partitions = partition_count_for(plan, bytes_per_partition)
    if partitions < MIN_PARALLEL_PARTITIONS:
        return UnpartitionedRead(table=plan.name)

    return PartitionedRead(
        table=plan.name,
        key_column=plan.key_column,
        min_key=plan.min_key,
        max_key=plan.max_key,
        num_partitions=partitions,
    )


def dispatch_plans(
    plans: Iterable[TablePlan],
    engine: ReadEngine,
    auto_parallelize: bool,
    bytes_per_partition: int,
) -> List[ReadRequest]:
    """
    Request one read per plan from the read engine, in plan order.

    Returns:
        The read requests that were issued
    """
    requests = []
    for plan in plans:
        request = plan_read(plan, auto_parallelize, bytes_per_partition)
        if isinstance(request, PartitionedRead):
            logger.info(
                f"Build a read for table {request.table} with "
                f"{request.min_key} / {request.max_key} / {request.num_partitions}"
            )
            engine.request_partitioned_read(
                request.table,
                request.key_column,
                request.min_key,
                request.max_key,
                request.num_partitions,
            )
        else:
            logger.info(f"Build a read for table {request.table} with NO parallelization.")
            engine.request_unpartitioned_read(request.table)
        requests.append(request)
    return requests
