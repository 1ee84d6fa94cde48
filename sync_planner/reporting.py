"""
Plan Reporting
==============

Tabulates a sync plan (with the read decision per table) and saves it.
"""

import json
import logging
import os
from typing import Sequence

import pandas as pd

from .models import TablePlan
from .read_requests import plan_read

logger = logging.getLogger(__name__)

PLAN_COLUMNS = [
    "name", "size_bytes", "immutable", "keyed", "key_column",
    "min_key", "max_key", "read_mode", "num_partitions",
]


def plans_to_frame(plans: Sequence[TablePlan], auto_parallelize: bool, bytes_per_partition: int) -> pd.DataFrame:
    """
    Build a DataFrame with one row per plan.

    Args:
        plans: Plans from SyncPlanBuilder
        auto_parallelize: Global switch passed to the read decision
        bytes_per_partition: Target bytes per partition

    Returns:
        DataFrame with PLAN_COLUMNS; key columns are object dtype (None when unkeyed)
    """
    rows = []
    for plan in plans:
        request = plan_read(plan, auto_parallelize, bytes_per_partition)
        row = plan.to_dict()
        row["read_mode"] = request.to_dict()["mode"]
        row["num_partitions"] = getattr(request, "num_partitions", 1)
        rows.append(row)

    df = pd.DataFrame(rows, columns=PLAN_COLUMNS)
    # object dtype keeps None and unsigned 64-bit keys exact
    for column in ("min_key", "max_key"):
        df[column] = pd.Series([row[column] for row in rows], index=df.index, dtype=object)
    return df


def save_plan(df: pd.DataFrame, path: str) -> str:
    """Write the plan to JSON, or CSV when the path ends with .csv."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    if path.lower().endswith(".csv"):
        df.to_csv(path, index=False)
    else:
        records = df.astype(object).where(df.notna(), None).to_dict(orient="records")
        with open(path, "w") as f:
            json.dump(records, f, indent=2, default=str)

    logger.info(f"Saved plan for {len(df)} tables to {path}")
    return path
