"""Tests for the script lexer and command parser."""

import pytest

from table_animator.actions import AddColumn, AddRow, Highlight
from table_animator.model import Column, Row, Table
from table_animator.parsing import CommandParser, FailureKind, ParseFailure, ScriptLexer, parse_line
from table_animator.parsing.command_parser import (
    AddColumnCommand,
    AddRowCommand,
    HighlightColumnCommand,
    HighlightRowsCommand,
    error_position,
)


@pytest.fixture
def parser():
    p = CommandParser()
    p.build(debug=False, write_tables=False)
    return p


@pytest.fixture
def tables():
    users = Table(
        id="t-users",
        name="users",
        columns=[Column(id="c-name", name="name"), Column(id="c-email", name="email")],
        rows=[
            Row(id="r-alice", cells={"c-name": "Alice", "c-email": "alice@x.com"}),
            Row(id="r-bob", cells={"c-name": "Bob", "c-email": "bob@x.com"}),
            Row(id="r-carol", cells={"c-name": "Carol"}),
        ],
    )
    orders = Table(id="t-orders", name="orders", columns=[Column(id="c-total", name="total")])
    return [users, orders]


class TestScriptLexer:
    """Tests for the script lexer."""

    def test_tokenize_highlight(self):
        lexer = ScriptLexer()
        lexer.build()

        tokens = lexer.tokenize("highlight in table 'users' row 1,2")
        token_types = [t.type for t in tokens]

        assert token_types == [
            "HIGHLIGHT", "IN", "TABLE", "STRING", "ROW", "INTEGER", "COMMA", "INTEGER",
        ]

    def test_keywords_case_insensitive(self):
        lexer = ScriptLexer()
        lexer.build()

        tokens = lexer.tokenize("HighLight IN Table")
        assert [t.type for t in tokens] == ["HIGHLIGHT", "IN", "TABLE"]

    def test_string_quotes_stripped(self):
        lexer = ScriptLexer()
        lexer.build()

        tokens = lexer.tokenize("'single' \"double\"")
        assert [t.value for t in tokens] == ["single", "double"]

    def test_cell_spec_tokens(self):
        lexer = ScriptLexer()
        lexer.build()

        tokens = lexer.tokenize("[{1-'a'}]")
        assert [t.type for t in tokens] == [
            "LBRACKET", "LBRACE", "INTEGER", "DASH", "STRING", "RBRACE", "RBRACKET",
        ]

    def test_comments_ignored(self):
        lexer = ScriptLexer()
        lexer.build()

        tokens = lexer.tokenize("add -- trailing comment\nrow")
        assert [t.type for t in tokens] == ["ADD", "ROW"]

    def test_illegal_character(self):
        lexer = ScriptLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Illegal character '@'"):
            lexer.tokenize("highlight @")


class TestGrammar:
    """Tests for the unresolved command shapes."""

    def test_highlight_rows(self, parser):
        cmd = parser.parse("highlight in table 'users' row 1, 3")
        assert cmd == HighlightRowsCommand(table="users", rows=[1, 3])

    def test_highlight_column(self, parser):
        cmd = parser.parse('highlight in table "users" column "email"')
        assert cmd == HighlightColumnCommand(table="users", column="email")

    def test_highlight_cell(self, parser):
        cmd = parser.parse("highlight in table 'users' column 'email' row 2")
        assert cmd == HighlightColumnCommand(table="users", column="email", row=2)

    def test_add_column_without_cells(self, parser):
        cmd = parser.parse("add in table 'users' column 'age'")
        assert cmd == AddColumnCommand(table="users", column="age")
        assert cmd.cells is None

    def test_add_column_with_cells(self, parser):
        cmd = parser.parse("add in table 'users' column 'age' cells [{1-'30'} {3-41}, {2-young}]")
        assert [(c.row, c.value) for c in cmd.cells] == [(1, "30"), (3, "41"), (2, "young")]

    def test_add_column_empty_cells(self, parser):
        cmd = parser.parse("add in table 'users' column 'age' cells []")
        assert cmd.cells == []

    def test_add_row_without_values(self, parser):
        cmd = parser.parse("add in table 'users' row")
        assert cmd == AddRowCommand(table="users")

    def test_add_row_positional(self, parser):
        cmd = parser.parse("add in table 'users' row [{'Dave'} {} {42}]")
        assert [(v.column, v.value) for v in cmd.values] == [(None, "Dave"), (None, ""), (None, "42")]

    def test_add_row_named(self, parser):
        cmd = parser.parse("add in table 'users' row [{'email'-'d@x.com'}]")
        assert [(v.column, v.value) for v in cmd.values] == [("email", "d@x.com")]

    def test_keyword_as_bare_value(self, parser):
        cmd = parser.parse("add in table 'users' row [{Table}]")
        assert cmd.values[0].value == "Table"

    def test_integer_value_keeps_text(self, parser):
        cmd = parser.parse("add in table 'users' row [{007}]")
        assert cmd.values[0].value == "007"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "highlight in table 'users'",
            "highlight table 'users' row 1",
            "highlight in table users row 1",
            "highlight in table 'users' row",
            "delete in table 'users' row 1",
            "add in table 'users' column 'x' cells [{'a'}]",
        ],
    )
    def test_invalid_shapes(self, parser, text):
        with pytest.raises(SyntaxError):
            parser.parse(text)

    def test_syntax_error_reports_position(self, parser):
        with pytest.raises(SyntaxError) as exc_info:
            parser.parse("highlight in tabel 'users' row 1")
        assert error_position(str(exc_info.value)) == 13


class TestHighlightResolution:
    def test_rows_to_ids(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' row 1,3", tables)
        assert action == Highlight(table_id="t-users", row_ids=("r-alice", "r-carol"))

    def test_out_of_range_rows_dropped(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' row 1,5", tables)
        assert isinstance(action, Highlight)
        assert action.row_ids == ("r-alice",)

    def test_row_zero_dropped(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' row 0,2", tables)
        assert action.row_ids == ("r-bob",)

    def test_all_rows_out_of_range(self, parser, tables):
        action = parser.parse_line("highlight in table 'orders' row 1", tables)
        assert action == Highlight(table_id="t-orders", row_ids=())

    def test_column(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' column 'email'", tables)
        assert action == Highlight(table_id="t-users", column_id="c-email")

    def test_cell(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' column 'email' row 2", tables)
        assert action == Highlight(table_id="t-users", row_ids=("r-bob",), column_id="c-email")

    def test_cell_out_of_range_falls_back_to_column(self, parser, tables):
        action = parser.parse_line("highlight in table 'users' column 'email' row 9", tables)
        assert action == Highlight(table_id="t-users", column_id="c-email")

    def test_unknown_table(self, parser, tables):
        result = parser.parse_line("highlight in table 'ghost' row 1", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.TABLE_NOT_FOUND
        assert "ghost" in result.message

    def test_table_name_is_case_sensitive(self, parser, tables):
        result = parser.parse_line("highlight in table 'Users' row 1", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.TABLE_NOT_FOUND

    def test_unknown_column(self, parser, tables):
        result = parser.parse_line("highlight in table 'users' column 'phone'", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.COLUMN_NOT_FOUND

    def test_invalid_command(self, parser, tables):
        result = parser.parse_line("make everything blue", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.INVALID_COMMAND

    def test_reparse_is_stable(self, parser, tables):
        first = parser.parse_line("highlight in table 'users' row 2,1", tables)
        second = parser.parse_line("highlight in table 'users' row 2,1", tables)
        assert first == second


class TestAddColumnResolution:
    def test_plain(self, parser, tables):
        action = parser.parse_line("add in table 'users' column 'age'", tables)
        assert action == AddColumn(table_id="t-users", column_name="age")
        assert parser.warnings == []

    def test_seeded_cells_zero_based(self, parser, tables):
        action = parser.parse_line("add in table 'users' column 'age' cells [{1-'30'} {3-'41'}]", tables)
        assert action.cell_values == ((0, "30"), (2, "41"))

    def test_out_of_bounds_cell_is_warning(self, parser, tables):
        action = parser.parse_line("add in table 'users' column 'age' cells [{1-'30'} {7-'99'}]", tables)
        assert isinstance(action, AddColumn)
        assert action.cell_values == ((0, "30"),)
        assert len(parser.warnings) == 1
        assert parser.warnings[0].kind == FailureKind.ROW_OUT_OF_BOUNDS

    def test_duplicate_column(self, parser, tables):
        result = parser.parse_line("add in table 'users' column 'email'", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.COLUMN_EXISTS
        assert [c.name for c in tables[0].columns] == ["name", "email"]

    def test_warnings_reset_between_calls(self, parser, tables):
        parser.parse_line("add in table 'users' column 'age' cells [{9-'x'}]", tables)
        assert parser.warnings
        parser.parse_line("highlight in table 'users' row 1", tables)
        assert parser.warnings == []


class TestAddRowResolution:
    def test_positional_values(self, parser, tables):
        action = parser.parse_line("add in table 'users' row [{'Dave'} {'d@x.com'}]", tables)
        assert action == AddRow(table_id="t-users", cell_values=("Dave", "d@x.com"))

    def test_fewer_values_padded(self, parser, tables):
        action = parser.parse_line("add in table 'users' row [{'Dave'}]", tables)
        assert action.cell_values == ("Dave", "")
        assert parser.warnings == []

    def test_no_values(self, parser, tables):
        action = parser.parse_line("add in table 'users' row", tables)
        assert action.cell_values == ("", "")

    def test_extra_values_dropped_with_warning(self, parser, tables):
        action = parser.parse_line("add in table 'orders' row [{'1'} {'2'}]", tables)
        assert action.cell_values == ("1",)
        assert parser.warnings[0].kind == FailureKind.TOO_MANY_VALUES

    def test_named_values_in_column_order(self, parser, tables):
        action = parser.parse_line("add in table 'users' row [{'email'-'d@x.com'} {'name'-'Dave'}]", tables)
        assert action.cell_values == ("Dave", "d@x.com")

    def test_named_unknown_column(self, parser, tables):
        result = parser.parse_line("add in table 'users' row [{'phone'-'123'}]", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.COLUMN_NOT_FOUND

    def test_mixed_named_and_positional(self, parser, tables):
        result = parser.parse_line("add in table 'users' row [{'Dave'} {'email'-'d@x.com'}]", tables)
        assert isinstance(result, ParseFailure)
        assert result.kind == FailureKind.INVALID_COMMAND


class TestModuleParseLine:
    def test_shared_parser(self, tables):
        action = parse_line("highlight in table 'users' row 2", tables)
        assert action == Highlight(table_id="t-users", row_ids=("r-bob",))

    def test_failure_never_raises(self, tables):
        result = parse_line("highlight in table 'users' row 'x'", tables)
        assert isinstance(result, ParseFailure)
