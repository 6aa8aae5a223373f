"""Table data model for the table_animator library."""

from __future__ import annotations

import itertools
import json
import uuid as uuid_module
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

# Collections larger than this are rejected by the table editor
MAX_TABLES = 3

IdFactory = Callable[[], str]


def new_id() -> str:
    """Return a fresh random identifier."""
    return uuid_module.uuid4().hex


def counter_ids(prefix: str = "id") -> IdFactory:
    """Return an id factory yielding ``prefix-1``, ``prefix-2``, ...

    Useful wherever reproducible identifiers are wanted (tests, JSON output
    that is diffed between runs).
    """
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@dataclass
class Column:
    """A named column of a table."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Row:
    """A row of a table, holding one string per column id."""

    id: str
    cells: dict[str, str] = field(default_factory=dict)

    def get(self, column_id: str) -> str:
        """Return the cell value for a column, '' when the entry is missing."""
        return self.cells.get(column_id, "")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "cells": dict(self.cells)}


@dataclass
class Table:
    """A user-defined table with ordered columns and rows."""

    id: str
    name: str
    columns: list[Column] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def column_named(self, name: str) -> Column | None:
        """Return the column with exactly this name, or None."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def row_at(self, position: int) -> Row | None:
        """Return the row at a 0-based position, or None if out of range."""
        if 0 <= position < len(self.rows):
            return self.rows[position]
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "rows": [r.to_dict() for r in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        """Build a Table from its JSON form.

        Raises ValueError on missing keys, wrongly shaped entries or
        duplicate column names.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Table must be an object, got {type(data).__name__}")
        for key in ("id", "name"):
            if key not in data:
                raise ValueError(f"Table is missing '{key}'")

        raw_columns = data.get("columns", [])
        raw_rows = data.get("rows", [])
        if not isinstance(raw_columns, list) or not isinstance(raw_rows, list):
            raise ValueError(f"Table '{data['name']}' needs 'columns' and 'rows' arrays")

        columns: list[Column] = []
        seen: set[str] = set()
        for col in raw_columns:
            if not isinstance(col, dict) or "id" not in col or "name" not in col:
                raise ValueError(f"Column in table '{data['name']}' needs 'id' and 'name'")
            name = str(col["name"])
            if name in seen:
                raise ValueError(f"Duplicate column '{name}' in table '{data['name']}'")
            seen.add(name)
            columns.append(Column(id=str(col["id"]), name=name))

        rows: list[Row] = []
        for row in raw_rows:
            if not isinstance(row, dict) or "id" not in row:
                raise ValueError(f"Row in table '{data['name']}' must be an object with an 'id'")
            raw_cells = row.get("cells", {})
            if not isinstance(raw_cells, dict):
                raise ValueError(f"Cells of row '{row['id']}' in table '{data['name']}' must be an object")
            cells = {str(k): "" if v is None else str(v) for k, v in raw_cells.items()}
            rows.append(Row(id=str(row["id"]), cells=cells))

        return cls(id=str(data["id"]), name=str(data["name"]), columns=columns, rows=rows)


def make_table(name: str, column_names: list[str], rows: list[list[str]], id_factory: IdFactory = new_id) -> Table:
    """Build a Table from plain column names and row values.

    Rows shorter than the column list are padded with ''.
    """
    columns = [Column(id=id_factory(), name=n) for n in column_names]
    table = Table(id=id_factory(), name=name, columns=columns)
    for values in rows:
        cells = {c.id: (values[i] if i < len(values) else "") for i, c in enumerate(columns)}
        table.rows.append(Row(id=id_factory(), cells=cells))
    return table


def validate_tables(tables: list[Table]) -> None:
    """Check collection-level invariants enforced by the table editor."""
    if len(tables) > MAX_TABLES:
        raise ValueError(f"At most {MAX_TABLES} tables are allowed, got {len(tables)}")
    names = [t.name for t in tables]
    for name in names:
        if names.count(name) > 1:
            raise ValueError(f"Duplicate table name '{name}'")


def tables_from_json(text: str) -> list[Table]:
    """Parse a JSON table collection."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Table collection must be a JSON array")
    tables = [Table.from_dict(t) for t in data]
    validate_tables(tables)
    return tables


def tables_to_json(tables: list[Table], indent: int | None = 2) -> str:
    return json.dumps([t.to_dict() for t in tables], indent=indent)


def load_tables(path: Path) -> list[Table]:
    """Load a table collection from a JSON file."""
    return tables_from_json(Path(path).read_text())
