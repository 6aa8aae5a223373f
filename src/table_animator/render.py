"""Text preview and JSON export of frames."""

from __future__ import annotations

import json
from typing import Any, Sequence

from table_animator.actions import Frame, FrameHighlight
from table_animator.model import Table

MAX_CELL_WIDTH = 24


def format_value(value: str, max_width: int = MAX_CELL_WIDTH) -> str:
    """Format a cell value for display, truncating long text."""
    if len(value) > max_width:
        return value[: max_width - 3] + "..."
    return value


def _mark(text: str, on: bool) -> str:
    return f"*{text}*" if on else text


def format_table(table: Table, highlight: FrameHighlight) -> str:
    """Render one table as a text grid.

    Highlighted headers and cells are wrapped in ``*``; highlighted rows
    are prefixed with ``>``.
    """
    header = ["#"] + [
        _mark(format_value(c.name), highlight.column_header_highlighted(table.id, c.id))
        for c in table.columns
    ]
    body: list[list[str]] = []
    markers: list[str] = []
    for number, row in enumerate(table.rows, start=1):
        row_on = highlight.row_highlighted(table.id, row.id)
        markers.append(">" if row_on else " ")
        body.append([str(number)] + [
            _mark(format_value(row.get(c.id)), row_on or highlight.cell_highlighted(table.id, c.id, row.id))
            for c in table.columns
        ])

    widths = [len(h) for h in header]
    for cells in body:
        for i, cell in enumerate(cells):
            widths[i] = max(widths[i], len(cell))

    lines = [table.name]
    header_line = "  " + " | ".join(h.ljust(widths[i]) for i, h in enumerate(header))
    lines.append(header_line.rstrip())
    lines.append("  " + "-" * (len(header_line) - 2))
    for marker, cells in zip(markers, body):
        line = f"{marker} " + " | ".join(c.ljust(widths[i]) for i, c in enumerate(cells))
        lines.append(line.rstrip())
    if not table.rows:
        lines.append("  (no rows)")
    return "\n".join(lines)


def format_frame(frame: Frame, index: int | None = None, total: int | None = None) -> str:
    """Render every table of a frame, with an optional ``Frame i/n`` title."""
    parts = []
    if index is not None:
        title = f"Frame {index + 1}" + (f"/{total}" if total is not None else "")
        parts.append(f"== {title} ==")
    if not frame.tables:
        parts.append("(no tables)")
    for table in frame.tables:
        parts.append(format_table(table, frame.highlight))
    return "\n\n".join(parts)


def frames_to_dict(frames: Sequence[Frame], frame_delay: int | None = None) -> dict[str, Any]:
    """Return the export form of a frame sequence.

    ``frame_delay`` (milliseconds) is carried through for the renderer and
    not interpreted here.
    """
    return {
        "frameDelay": frame_delay,
        "frames": [f.to_dict() for f in frames],
    }


def frames_to_json(frames: Sequence[Frame], frame_delay: int | None = None, indent: int | None = 2) -> str:
    return json.dumps(frames_to_dict(frames, frame_delay), indent=indent)
