"""
Planner Models
==============

Immutable records produced and consumed by the sync planner.

A TablePlan is one of two variants:
- UnkeyedTablePlan: the table is read in one unpartitioned scan
- KeyedTablePlan: the table has a numeric key range usable for parallel scans
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union

from .errors import NonNumericKeyError


@dataclass(frozen=True)
class CatalogTable:
    """One row of the schema inventory."""

    name: str
    row_count: int
    size_bytes: int


@dataclass(frozen=True)
class _BaseTablePlan:
    name: str
    size_bytes: int
    immutable: bool

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"{type(self).__name__}.size_bytes must be >= 0, got {self.size_bytes}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the plan to a JSON-ready dict.

        Both variants produce the same keys so plans can be tabulated together.
        """
        return {
            "name": self.name,
            "size_bytes": self.size_bytes,
            "immutable": self.immutable,
            "keyed": self.is_keyed,
            "key_column": self.key_column,
            "min_key": self.min_key,
            "max_key": self.max_key,
        }


@dataclass(frozen=True)
class UnkeyedTablePlan(_BaseTablePlan):
    """Plan for a table without a usable partitioning key."""

    @property
    def is_keyed(self) -> bool:
        return False

    @property
    def key_column(self) -> None:
        return None

    @property
    def min_key(self) -> None:
        return None

    @property
    def max_key(self) -> None:
        return None


@dataclass(frozen=True)
class KeyedTablePlan(_BaseTablePlan):
    """Plan for a table whose key column spans [min_key, max_key] inclusive."""

    key_column: str
    min_key: int
    max_key: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.key_column:
            raise ValueError("KeyedTablePlan.key_column is required")
        if self.max_key < self.min_key:
            raise ValueError(
                f"KeyedTablePlan.max_key ({self.max_key}) must be >= min_key ({self.min_key})"
            )

    @property
    def is_keyed(self) -> bool:
        return True


TablePlan = Union[KeyedTablePlan, UnkeyedTablePlan]


@dataclass(frozen=True)
class MaxValue:
    """Successful max-value probe. value is None when the table has no rows."""

    value: Optional[int]


@dataclass(frozen=True)
class NonNumericKey:
    """Failed max-value probe: the key column is not integer-valued."""

    error: NonNumericKeyError


MaxValueResult = Union[MaxValue, NonNumericKey]


@dataclass(frozen=True)
class PartitionedRead:
    table: str
    key_column: str
    min_key: int
    max_key: int
    num_partitions: int

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": "partitioned", **asdict(self)}


@dataclass(frozen=True)
class UnpartitionedRead:
    table: str

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": "unpartitioned", **asdict(self)}


ReadRequest = Union[PartitionedRead, UnpartitionedRead]
