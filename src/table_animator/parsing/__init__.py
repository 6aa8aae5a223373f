"""Parsing module for the table animation script language."""

from table_animator.parsing.command_parser import (
    CommandError,
    CommandParser,
    FailureKind,
    ParseFailure,
    ParseWarning,
    parse_line,
)
from table_animator.parsing.script_lexer import ScriptLexer

__all__ = [
    "CommandError",
    "CommandParser",
    "FailureKind",
    "ParseFailure",
    "ParseWarning",
    "ScriptLexer",
    "parse_line",
]
