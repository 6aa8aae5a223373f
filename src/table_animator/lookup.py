"""Name and id lookups over a table collection.

Collections hold at most a handful of small tables, so plain linear scans
are used throughout.
"""

from __future__ import annotations

from typing import Sequence

from table_animator.model import Column, Table


def find_table_by_name(name: str, tables: Sequence[Table]) -> Table | None:
    """Return the first table whose name matches exactly."""
    for table in tables:
        if table.name == name:
            return table
    return None


def find_table_by_id(table_id: str, tables: Sequence[Table]) -> Table | None:
    for table in tables:
        if table.id == table_id:
            return table
    return None


def find_column(table: Table, column_name: str) -> Column | None:
    return table.column_named(column_name)


def find_column_by_name(
    table_name: str, column_name: str, tables: Sequence[Table]
) -> tuple[Table, Column] | None:
    """Return ``(table, column)`` for a table/column name pair, or None."""
    table = find_table_by_name(table_name, tables)
    if table is None:
        return None
    column = find_column(table, column_name)
    if column is None:
        return None
    return table, column


def table_index(table_id: str, tables: Sequence[Table]) -> int | None:
    """Return the position of a table in the collection, or None."""
    for i, table in enumerate(tables):
        if table.id == table_id:
            return i
    return None
