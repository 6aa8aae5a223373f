"""Frame sequencer: replays Actions over a working copy of the tables.

Frame 0 shows the original tables with nothing highlighted. Every Action
then contributes exactly one frame. Structural Actions (AddColumn, AddRow)
are folded into a single working copy; each step replaces only the table it
touches, so earlier frames keep the state they were built with.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Sequence

from table_animator.actions import (
    EMPTY_HIGHLIGHT,
    Action,
    AddColumn,
    AddRow,
    Frame,
    FrameHighlight,
    Highlight,
)
from table_animator.lookup import table_index
from table_animator.model import Column, IdFactory, Row, Table, new_id

logger = logging.getLogger(__name__)


def add_column(table: Table, action: AddColumn, id_factory: IdFactory) -> tuple[Table, Column]:
    """Return a copy of ``table`` with the action's column appended."""
    column = Column(id=id_factory(), name=action.column_name)
    seeds = dict(action.cell_values or ())
    rows = [
        replace(row, cells={**row.cells, column.id: seeds.get(position, "")})
        for position, row in enumerate(table.rows)
    ]
    return replace(table, columns=table.columns + [column], rows=rows), column


def add_row(table: Table, action: AddRow, id_factory: IdFactory) -> tuple[Table, Row]:
    """Return a copy of ``table`` with the action's row appended.

    Values are matched to columns by position; missing values become ''
    and surplus values are dropped.
    """
    values = action.cell_values
    cells = {
        column.id: values[i] if i < len(values) else ""
        for i, column in enumerate(table.columns)
    }
    row = Row(id=id_factory(), cells=cells)
    return replace(table, rows=table.rows + [row]), row


def apply_action(
    tables: list[Table], action: Action, id_factory: IdFactory = new_id
) -> tuple[list[Table], FrameHighlight]:
    """Apply one Action to a snapshot.

    Returns the next snapshot (the same list when nothing changed) and the
    highlight for the frame the Action produces.
    """
    if isinstance(action, Highlight):
        return tables, FrameHighlight(
            table_id=action.table_id,
            row_ids=action.row_ids,
            column_id=action.column_id,
        )

    if isinstance(action, (AddColumn, AddRow)):
        index = table_index(action.table_id, tables)
        if index is None:
            # Unknown table: the frame repeats the snapshot with nothing highlighted
            logger.warning("Table id %r not found; %s skipped", action.table_id, type(action).__name__)
            return tables, EMPTY_HIGHLIGHT

        updated = list(tables)
        if isinstance(action, AddColumn):
            updated[index], column = add_column(tables[index], action, id_factory)
            return updated, FrameHighlight(table_id=action.table_id, column_id=column.id)
        updated[index], row = add_row(tables[index], action, id_factory)
        return updated, FrameHighlight(table_id=action.table_id, row_ids=(row.id,))

    raise TypeError(f"Unknown action type: {type(action).__name__}")


def build_frames(
    tables: Sequence[Table], actions: Sequence[Action], id_factory: IdFactory = new_id
) -> list[Frame]:
    """Derive one frame per Action, preceded by the unhighlighted original.

    The caller's tables are deep-copied first and never modified.
    """
    working = copy.deepcopy(list(tables))
    frames = [Frame(tables=working, highlight=EMPTY_HIGHLIGHT)]
    for action in actions:
        working, highlight = apply_action(working, action, id_factory)
        frames.append(Frame(tables=working, highlight=highlight))
    logger.debug("Built %d frames from %d actions", len(frames), len(actions))
    return frames
