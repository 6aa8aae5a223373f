"""Actions produced by the script compiler and the frames derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from table_animator.model import Table


@dataclass(frozen=True)
class Highlight:
    """Emphasize rows, a column, or a single cell of a table. No mutation."""

    table_id: str
    row_ids: tuple[str, ...] | None = None
    column_id: str | None = None


@dataclass(frozen=True)
class AddColumn:
    """Append a column, optionally seeding cells.

    ``cell_values`` holds ``(row position, value)`` pairs, 0-based and
    sorted by position.
    """

    table_id: str
    column_name: str
    cell_values: tuple[tuple[int, str], ...] | None = None


@dataclass(frozen=True)
class AddRow:
    """Append a row; one value per existing column, in column order."""

    table_id: str
    cell_values: tuple[str, ...] = ()


Action = Union[Highlight, AddColumn, AddRow]


@dataclass(frozen=True)
class FrameHighlight:
    """Which table, rows and column a frame emphasizes.

    The empty highlight (``table_id == ""``) marks nothing.
    """

    table_id: str = ""
    row_ids: tuple[str, ...] | None = None
    column_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.table_id

    def column_header_highlighted(self, table_id: str, column_id: str) -> bool:
        """Whole-column emphasis: the column matches and no rows are named."""
        if self.table_id != table_id:
            return False
        return self.column_id == column_id and not self.row_ids

    def row_highlighted(self, table_id: str, row_id: str) -> bool:
        """Whole-row emphasis: the row is named and no column is."""
        if self.table_id != table_id:
            return False
        return bool(self.row_ids) and row_id in self.row_ids and not self.column_id

    def cell_highlighted(self, table_id: str, column_id: str, row_id: str) -> bool:
        if self.table_id != table_id:
            return False
        if self.column_id == column_id:
            if self.row_ids:
                return row_id in self.row_ids
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "tableId": self.table_id,
            "rowIds": list(self.row_ids) if self.row_ids is not None else None,
            "columnId": self.column_id,
        }


EMPTY_HIGHLIGHT = FrameHighlight()


@dataclass
class Frame:
    """A table snapshot paired with the highlight shown over it.

    Snapshots may share Table objects with neighbouring frames and must be
    treated as read-only.
    """

    tables: list[Table]
    highlight: FrameHighlight = field(default=EMPTY_HIGHLIGHT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables": [t.to_dict() for t in self.tables],
            "highlight": self.highlight.to_dict(),
        }
