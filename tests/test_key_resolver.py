import logging
import warnings

import pytest

from sync_planner.errors import CompositeKeyWarning, NonNumericKeyError
from sync_planner.key_resolver import KeyResolver
from sync_planner.models import CatalogTable, KeyedTablePlan, MaxValue, NonNumericKey, UnkeyedTablePlan


class StubMetadata:
    """Records catalog calls and returns canned answers."""

    schema = "shop"

    def __init__(self, columns=("id",), keys=("id",), max_result=MaxValue(1_000)):
        self.columns = set(columns)
        self.keys = list(keys)
        self.max_result = max_result
        self.calls = []

    def list_columns(self, table, conn=None):
        self.calls.append(("list_columns", table))
        return set(self.columns)

    def find_primary_key_columns(self, table, conn=None):
        self.calls.append(("find_primary_key_columns", table))
        return list(self.keys)

    def max_value(self, table, column, conn=None):
        self.calls.append(("max_value", table, column))
        return self.max_result


BIG = CatalogTable(name="orders", row_count=10, size_bytes=10_000_000)
SMALL = CatalogTable(name="orders", row_count=10, size_bytes=1_000_000)


def test_large_table_with_numeric_key_is_keyed():
    plan = KeyResolver(StubMetadata()).resolve(BIG)

    assert plan == KeyedTablePlan(
        name="orders", size_bytes=10_000_000, immutable=True, key_column="id", min_key=0, max_key=1_000
    )


def test_min_key_is_fixed_at_zero():
    plan = KeyResolver(StubMetadata(max_result=MaxValue(5_000))).resolve(BIG)

    assert plan.min_key == 0
    assert plan.max_key == 5_000


def test_small_table_skips_key_discovery():
    metadata = StubMetadata()

    plan = KeyResolver(metadata).resolve(SMALL)

    assert plan == UnkeyedTablePlan(name="orders", size_bytes=1_000_000, immutable=True)
    assert (plan.key_column, plan.min_key, plan.max_key) == (None, None, None)
    assert metadata.calls == [("list_columns", "orders")]


def test_small_table_threshold_is_configurable():
    plan = KeyResolver(StubMetadata(), small_table_bytes=100).resolve(SMALL)

    assert isinstance(plan, KeyedTablePlan)


def test_table_without_primary_key_is_unkeyed():
    plan = KeyResolver(StubMetadata(keys=())).resolve(BIG)

    assert isinstance(plan, UnkeyedTablePlan)


def test_non_numeric_key_degrades_to_unkeyed_plan():
    error = NonNumericKeyError("orders", "id", "abc")
    non_numeric = KeyResolver(StubMetadata(max_result=NonNumericKey(error))).resolve(BIG)
    no_key = KeyResolver(StubMetadata(keys=())).resolve(BIG)

    assert non_numeric == no_key


def test_empty_key_range_degrades_to_unkeyed_plan():
    plan = KeyResolver(StubMetadata(max_result=MaxValue(None))).resolve(BIG)

    assert isinstance(plan, UnkeyedTablePlan)


def test_negative_max_key_degrades_to_unkeyed_plan():
    plan = KeyResolver(StubMetadata(max_result=MaxValue(-3))).resolve(BIG)

    assert isinstance(plan, UnkeyedTablePlan)


def test_composite_key_uses_first_column_and_warns():
    metadata = StubMetadata(keys=("id", "region"))

    with pytest.warns(CompositeKeyWarning, match="Using only id"):
        plan = KeyResolver(metadata).resolve(BIG)

    assert plan.key_column == "id"
    assert ("max_value", "orders", "id") in metadata.calls


def test_composite_key_is_logged_on_every_run(caplog):
    resolver = KeyResolver(StubMetadata(keys=("id", "region")))

    with caplog.at_level(logging.WARNING, logger="sync_planner.key_resolver"):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", CompositeKeyWarning)
            resolver.resolve(BIG)
            resolver.resolve(BIG)

    messages = [r.getMessage() for r in caplog.records if "composite primary key" in r.getMessage()]
    assert len(messages) == 2


@pytest.mark.parametrize(
    "size_bytes,keyed",
    [(4_999_999, False), (5_000_000, True), (5_000_001, True)],
)
def test_small_table_boundary(size_bytes, keyed):
    table = CatalogTable(name="orders", row_count=10, size_bytes=size_bytes)

    assert KeyResolver(StubMetadata()).resolve(table).is_keyed is keyed


def test_single_column_key_emits_no_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error", CompositeKeyWarning)
        KeyResolver(StubMetadata()).resolve(BIG)


@pytest.mark.parametrize(
    "columns,immutable",
    [
        (("id", "updated_at"), False),
        (("id", "created_at"), True),
        (("id", "Updated_At"), True),
    ],
)
def test_immutability_flag_follows_updated_at(columns, immutable):
    assert KeyResolver(StubMetadata(columns=columns)).resolve(BIG).immutable is immutable
    assert KeyResolver(StubMetadata(columns=columns)).resolve(SMALL).immutable is immutable
