"""
Table Filter
============

Inclusion/exclusion policy applied to the schema inventory.

Configured names are lowercased once at load time; the catalog's table name is
lowercased on every comparison. Catalog queries keep the name as reported.
"""

from typing import AbstractSet, FrozenSet, Iterable, Optional

NO_ROWS = "table has no rows"
NOT_WHITELISTED = "not on whitelist"
BLACKLISTED = "table on blacklist"


def normalize_table_names(names: Iterable[str]) -> FrozenSet[str]:
    """Lowercase and strip configured table names, dropping blanks."""
    return frozenset(n.strip().lower() for n in names if n and n.strip())


def rejection_reason(
    table: str,
    row_count: int,
    whitelist: AbstractSet[str],
    blacklist: AbstractSet[str],
) -> Optional[str]:
    """
    Return why a table is not synced, or None when it is admitted.

    Rules are evaluated in order and the first match wins:
    empty table, whitelist miss, blacklist hit.
    """
    if row_count == 0:
        return NO_ROWS
    lowered = table.lower()
    if whitelist and lowered not in whitelist:
        return NOT_WHITELISTED
    if blacklist and lowered in blacklist:
        return BLACKLISTED
    return None


def admit(
    table: str,
    row_count: int,
    whitelist: AbstractSet[str],
    blacklist: AbstractSet[str],
) -> bool:
    return rejection_reason(table, row_count, whitelist, blacklist) is None
