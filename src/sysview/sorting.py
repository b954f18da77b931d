"""Process table ordering."""

from collections.abc import Callable, Iterable
from functools import cmp_to_key
from typing import Any

from sysview.models import ProcessRow, SortKey

_FIELDS: dict[SortKey, Callable[[ProcessRow], Any]] = {
    SortKey.PID: lambda row: row.pid,
    SortKey.NAME: lambda row: row.name,
    SortKey.CPU: lambda row: row.cpu,
    SortKey.MEM: lambda row: row.mem_mb,
    SortKey.READ: lambda row: row.read_bytes,
    SortKey.WRITE: lambda row: row.write_bytes,
    SortKey.TOTAL_READ: lambda row: row.total_read,
    SortKey.TOTAL_WRITTEN: lambda row: row.total_written,
    SortKey.USER: lambda row: row.user,
}


def compare_values(a: Any, b: Any) -> int:
    """
    Three-way compare where None is lower than any value.

    Pairs that are neither less nor greater (e.g. NaN) compare equal.
    """
    if a is None or b is None:
        return (a is not None) - (b is not None)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def sort_rows(
    rows: Iterable[ProcessRow],
    key: SortKey,
    descending: bool = False,
) -> list[ProcessRow]:
    """Stable sort of rows by key. Descending reverses the whole ordering."""
    field = _FIELDS[key]
    result = sorted(rows, key=cmp_to_key(lambda a, b: compare_values(field(a), field(b))))
    if descending:
        # Reverse after sorting so ties flip too; sorted(reverse=True) keeps them.
        result.reverse()
    return result
