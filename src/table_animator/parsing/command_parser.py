"""Parser for single script commands.

A command is parsed in two steps. The PLY grammar turns the text into an
unresolved command (names and 1-based row numbers), then resolution looks
the names up in the table collection and produces an Action.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

import ply.yacc as yacc

from table_animator.actions import Action, AddColumn, AddRow, Highlight
from table_animator.lookup import find_column, find_table_by_name
from table_animator.model import Table
from table_animator.parsing.script_lexer import ScriptLexer

logger = logging.getLogger(__name__)

# Position embedded in lexer/grammar error messages
_POSITION_RE = re.compile(r"(?:at position|\(position) (\d+)")


class FailureKind(Enum):
    """Why a command was rejected or only partially applied."""

    TABLE_NOT_FOUND = "table not found"
    COLUMN_NOT_FOUND = "column not found"
    COLUMN_EXISTS = "column already exists"
    INVALID_COMMAND = "invalid command"
    ROW_OUT_OF_BOUNDS = "row index out of bounds"
    TOO_MANY_VALUES = "too many values"


@dataclass
class ParseFailure:
    """A command that produced no Action."""

    kind: FailureKind
    message: str
    position: int | None = None  # offset within the command text


@dataclass
class ParseWarning:
    """A non-fatal problem in a command that still produced an Action."""

    kind: FailureKind
    message: str
    position: int | None = None


class CommandError(ValueError):
    """Raised during resolution when a command cannot be applied."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


# ---------------------------------------------------------------------------
# Unresolved commands produced by the grammar
# ---------------------------------------------------------------------------


@dataclass
class HighlightRowsCommand:
    """highlight in table 'T' row 1,2,..."""

    table: str
    rows: list[int]


@dataclass
class HighlightColumnCommand:
    """highlight in table 'T' column 'C' [row n]"""

    table: str
    column: str
    row: int | None = None


@dataclass
class CellSpec:
    """{n-'value'} entry of an add column command."""

    row: int
    value: str


@dataclass
class AddColumnCommand:
    """add in table 'T' column 'C' [cells [...]]"""

    table: str
    column: str
    cells: list[CellSpec] | None = None


@dataclass
class RowValue:
    """{'value'} or {'column'-'value'} entry of an add row command."""

    value: str
    column: str | None = None  # None for positional entries


@dataclass
class AddRowCommand:
    """add in table 'T' row [...]"""

    table: str
    values: list[RowValue] = field(default_factory=list)


Command = HighlightRowsCommand | HighlightColumnCommand | AddColumnCommand | AddRowCommand


def error_position(message: str) -> int | None:
    """Return the integer position embedded in a SyntaxError message, or None."""
    m = _POSITION_RE.search(message)
    return int(m.group(1)) if m else None


class CommandParser:
    """Parser for script commands."""

    tokens = ScriptLexer.tokens

    def __init__(self) -> None:
        self.lexer = ScriptLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.warnings: list[ParseWarning] = []

    # ---- Grammar rules ----

    def p_command(self, p: yacc.YaccProduction) -> None:
        """command : highlight_command
                   | add_column_command
                   | add_row_command"""
        p[0] = p[1]

    def p_highlight_rows(self, p: yacc.YaccProduction) -> None:
        """highlight_command : HIGHLIGHT IN TABLE STRING ROW row_list"""
        p[0] = HighlightRowsCommand(table=p[4], rows=p[6])

    def p_highlight_column(self, p: yacc.YaccProduction) -> None:
        """highlight_command : HIGHLIGHT IN TABLE STRING COLUMN STRING"""
        p[0] = HighlightColumnCommand(table=p[4], column=p[6])

    def p_highlight_cell(self, p: yacc.YaccProduction) -> None:
        """highlight_command : HIGHLIGHT IN TABLE STRING COLUMN STRING ROW INTEGER"""
        p[0] = HighlightColumnCommand(table=p[4], column=p[6], row=int(p[8]))

    def p_row_list_single(self, p: yacc.YaccProduction) -> None:
        """row_list : INTEGER"""
        p[0] = [int(p[1])]

    def p_row_list_multiple(self, p: yacc.YaccProduction) -> None:
        """row_list : row_list COMMA INTEGER"""
        p[0] = p[1] + [int(p[3])]

    def p_add_column(self, p: yacc.YaccProduction) -> None:
        """add_column_command : ADD IN TABLE STRING COLUMN STRING"""
        p[0] = AddColumnCommand(table=p[4], column=p[6])

    def p_add_column_cells(self, p: yacc.YaccProduction) -> None:
        """add_column_command : ADD IN TABLE STRING COLUMN STRING CELLS LBRACKET cell_specs RBRACKET"""
        p[0] = AddColumnCommand(table=p[4], column=p[6], cells=p[9])

    def p_cell_specs_empty(self, p: yacc.YaccProduction) -> None:
        """cell_specs : """
        p[0] = []

    def p_cell_specs_multiple(self, p: yacc.YaccProduction) -> None:
        """cell_specs : cell_specs cell_spec"""
        p[0] = p[1] + [p[2]]

    def p_cell_spec(self, p: yacc.YaccProduction) -> None:
        """cell_spec : LBRACE INTEGER DASH value RBRACE opt_comma"""
        p[0] = CellSpec(row=int(p[2]), value=p[4])

    def p_add_row(self, p: yacc.YaccProduction) -> None:
        """add_row_command : ADD IN TABLE STRING ROW"""
        p[0] = AddRowCommand(table=p[4])

    def p_add_row_values(self, p: yacc.YaccProduction) -> None:
        """add_row_command : ADD IN TABLE STRING ROW LBRACKET row_values RBRACKET"""
        p[0] = AddRowCommand(table=p[4], values=p[7])

    def p_row_values_empty(self, p: yacc.YaccProduction) -> None:
        """row_values : """
        p[0] = []

    def p_row_values_multiple(self, p: yacc.YaccProduction) -> None:
        """row_values : row_values row_value"""
        p[0] = p[1] + [p[2]]

    def p_row_value_positional(self, p: yacc.YaccProduction) -> None:
        """row_value : LBRACE value RBRACE opt_comma"""
        p[0] = RowValue(value=p[2])

    def p_row_value_blank(self, p: yacc.YaccProduction) -> None:
        """row_value : LBRACE RBRACE opt_comma"""
        p[0] = RowValue(value="")

    def p_row_value_named(self, p: yacc.YaccProduction) -> None:
        """row_value : LBRACE STRING DASH value RBRACE opt_comma"""
        p[0] = RowValue(value=p[4], column=p[2])

    def p_value(self, p: yacc.YaccProduction) -> None:
        """value : STRING
                 | INTEGER
                 | IDENTIFIER
                 | HIGHLIGHT
                 | ADD
                 | IN
                 | TABLE
                 | ROW
                 | COLUMN
                 | CELLS"""
        p[0] = p[1]

    def p_opt_comma_yes(self, p: yacc.YaccProduction) -> None:
        """opt_comma : COMMA"""
        pass

    def p_opt_comma_no(self, p: yacc.YaccProduction) -> None:
        """opt_comma : """
        pass

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        raise SyntaxError("Unexpected end of input")

    # ---- Parsing ----

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        kwargs.setdefault("debug", False)
        kwargs.setdefault("write_tables", False)
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self.parser = yacc.yacc(module=self, start="command", **kwargs)

    def parse(self, data: str) -> Command:
        """Parse one command into its unresolved form.

        Raises SyntaxError when the text matches no command shape.
        """
        if self.parser is None:
            self.build()
        self.lexer.lexer.lineno = 1
        result = self.parser.parse(data, lexer=self.lexer.lexer)
        if result is None:
            raise SyntaxError("Empty command")
        return result

    def parse_line(self, line: str, tables: Sequence[Table]) -> Action | ParseFailure:
        """Parse one command and resolve it against ``tables``.

        Never raises for malformed input. Non-fatal problems of a successful
        parse are left in ``self.warnings``.
        """
        self.warnings = []
        try:
            command = self.parse(line)
        except SyntaxError as exc:
            msg = str(exc)
            return ParseFailure(
                kind=FailureKind.INVALID_COMMAND,
                message=f"Invalid command: {line.strip()} ({msg})",
                position=error_position(msg),
            )
        try:
            return self.resolve(command, tables)
        except CommandError as exc:
            self.warnings = []
            return ParseFailure(kind=exc.kind, message=str(exc))

    # ---- Resolution ----

    def resolve(self, command: Command, tables: Sequence[Table]) -> Action:
        """Turn an unresolved command into an Action.

        Raises CommandError when a name does not resolve.
        """
        table = find_table_by_name(command.table, tables)
        if table is None:
            raise CommandError(FailureKind.TABLE_NOT_FOUND, f"Table '{command.table}' not found")

        if isinstance(command, HighlightRowsCommand):
            return self._resolve_highlight_rows(command, table)
        if isinstance(command, HighlightColumnCommand):
            return self._resolve_highlight_column(command, table)
        if isinstance(command, AddColumnCommand):
            return self._resolve_add_column(command, table)
        if isinstance(command, AddRowCommand):
            return self._resolve_add_row(command, table)
        raise TypeError(f"Unknown command type: {type(command).__name__}")

    def _resolve_highlight_rows(self, command: HighlightRowsCommand, table: Table) -> Highlight:
        # Row numbers without a row are dropped, not reported
        row_ids = []
        for number in command.rows:
            row = table.row_at(number - 1)
            if row is not None:
                row_ids.append(row.id)
        return Highlight(table_id=table.id, row_ids=tuple(row_ids))

    def _resolve_highlight_column(self, command: HighlightColumnCommand, table: Table) -> Highlight:
        column = find_column(table, command.column)
        if column is None:
            raise CommandError(
                FailureKind.COLUMN_NOT_FOUND,
                f"Column '{command.column}' not found in table '{table.name}'",
            )
        row_ids = None
        if command.row is not None:
            row = table.row_at(command.row - 1)
            if row is not None:
                row_ids = (row.id,)
        return Highlight(table_id=table.id, row_ids=row_ids, column_id=column.id)

    def _resolve_add_column(self, command: AddColumnCommand, table: Table) -> AddColumn:
        if find_column(table, command.column) is not None:
            raise CommandError(
                FailureKind.COLUMN_EXISTS,
                f"Column '{command.column}' already exists in table '{table.name}'",
            )
        if command.cells is None:
            return AddColumn(table_id=table.id, column_name=command.column)

        cell_values: dict[int, str] = {}
        for spec in command.cells:
            position = spec.row - 1
            if table.row_at(position) is None:
                self.warnings.append(ParseWarning(
                    kind=FailureKind.ROW_OUT_OF_BOUNDS,
                    message=(
                        f"Row {spec.row} is out of bounds for table '{table.name}' "
                        f"({len(table.rows)} rows); cell skipped"
                    ),
                ))
                continue
            cell_values[position] = spec.value
        return AddColumn(
            table_id=table.id,
            column_name=command.column,
            cell_values=tuple(sorted(cell_values.items())),
        )

    def _resolve_add_row(self, command: AddRowCommand, table: Table) -> AddRow:
        named = [v for v in command.values if v.column is not None]
        if named and len(named) != len(command.values):
            raise CommandError(
                FailureKind.INVALID_COMMAND,
                "Invalid command: cannot mix named and positional row values",
            )

        if named:
            by_column: dict[str, str] = {}
            for entry in named:
                column = find_column(table, entry.column)  # type: ignore[arg-type]
                if column is None:
                    raise CommandError(
                        FailureKind.COLUMN_NOT_FOUND,
                        f"Column '{entry.column}' not found in table '{table.name}'",
                    )
                by_column[column.id] = entry.value
            return AddRow(
                table_id=table.id,
                cell_values=tuple(by_column.get(c.id, "") for c in table.columns),
            )

        values = [v.value for v in command.values]
        if len(values) > len(table.columns):
            self.warnings.append(ParseWarning(
                kind=FailureKind.TOO_MANY_VALUES,
                message=(
                    f"Table '{table.name}' has {len(table.columns)} columns but "
                    f"{len(values)} values were given; extra values dropped"
                ),
            ))
            values = values[: len(table.columns)]
        values += [""] * (len(table.columns) - len(values))
        return AddRow(table_id=table.id, cell_values=tuple(values))


_default_parser: CommandParser | None = None


def parse_line(line: str, tables: Sequence[Table]) -> Action | ParseFailure:
    """Parse one command with a shared parser, logging any warnings."""
    global _default_parser
    if _default_parser is None:
        _default_parser = CommandParser()
    result = _default_parser.parse_line(line, tables)
    for warning in _default_parser.warnings:
        logger.warning(warning.message)
    return result
