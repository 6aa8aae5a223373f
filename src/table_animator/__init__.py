"""Table Animator - compile table scripts into highlight animation frames."""

from table_animator.actions import (
    Action,
    AddColumn,
    AddRow,
    Frame,
    FrameHighlight,
    Highlight,
)
from table_animator.compiler import (
    CompiledScript,
    Diagnostic,
    NoActionsError,
    compile_script,
    parse_script,
)
from table_animator.lookup import (
    find_column_by_name,
    find_table_by_id,
    find_table_by_name,
)
from table_animator.model import (
    MAX_TABLES,
    Column,
    Row,
    Table,
    counter_ids,
    load_tables,
    make_table,
    new_id,
)
from table_animator.parsing import FailureKind, ParseFailure, parse_line
from table_animator.sequencer import build_frames

__all__ = [
    # Main API
    "parse_line",
    "parse_script",
    "compile_script",
    "build_frames",
    # Data model
    "Column",
    "Row",
    "Table",
    "MAX_TABLES",
    "make_table",
    "load_tables",
    "new_id",
    "counter_ids",
    # Lookups
    "find_table_by_name",
    "find_table_by_id",
    "find_column_by_name",
    # Actions and frames
    "Action",
    "Highlight",
    "AddColumn",
    "AddRow",
    "Frame",
    "FrameHighlight",
    # Diagnostics
    "CompiledScript",
    "Diagnostic",
    "FailureKind",
    "NoActionsError",
    "ParseFailure",
]

__version__ = "0.1.0"
