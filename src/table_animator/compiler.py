"""Script compiler: turns a ';'-separated script into an ordered Action list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from table_animator.actions import Action, AddColumn
from table_animator.model import Table
from table_animator.parsing.command_parser import (
    CommandParser,
    FailureKind,
    ParseFailure,
)

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"


class NoActionsError(ValueError):
    """Raised when a script compiles to zero actions."""


@dataclass
class Diagnostic:
    """A problem found while compiling one command of a script."""

    kind: FailureKind
    severity: str  # "error" (command skipped) or "warning" (command kept)
    message: str
    command: str
    offset: int  # start of the command within the script
    position: int | None = None  # exact offset of a syntax error, if known

    @property
    def end(self) -> int:
        return self.offset + len(self.command)


@dataclass
class CompiledScript:
    """Result of compiling a script."""

    actions: list[Action] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    command_count: int = 0

    @property
    def is_empty_script(self) -> bool:
        """True when the script held no commands at all."""
        return self.command_count == 0

    @property
    def has_actions(self) -> bool:
        return bool(self.actions)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == WARNING]

    def require_actions(self) -> list[Action]:
        """Return the actions, raising NoActionsError if there are none."""
        if self.is_empty_script:
            raise NoActionsError("Script contains no commands")
        if not self.actions:
            raise NoActionsError(
                f"No valid actions found ({len(self.errors)} of {self.command_count} commands rejected)"
            )
        return self.actions


def split_commands(script: str) -> list[tuple[int, str]]:
    """Split a script on ';' into ``(offset, command)`` pairs.

    Semicolons inside quoted literals or ``--`` comments do not end a
    command. A quote with no closing partner (see ``_literal_end``) is an
    ordinary character, so a stray quote only spoils its own command.
    Commands are stripped; empty ones are dropped. ``offset`` is the
    position of the stripped command's first character in ``script``.
    """
    commands: list[tuple[int, str]] = []
    start = 0
    i = 0

    def flush(end: int) -> None:
        segment = script[start:end]
        stripped = segment.strip()
        if stripped and not _only_comments(stripped):
            lead = len(segment) - len(segment.lstrip())
            commands.append((start + lead, stripped))

    while i < len(script):
        ch = script[i]

        if ch in ("'", '"'):
            end = _literal_end(script, i)
            if end is not None:
                i = end + 1
                continue
        elif ch == "-" and script.startswith("--", i):
            # Skip comment to end of line
            newline = script.find("\n", i)
            i = len(script) if newline == -1 else newline
            continue
        elif ch == ";":
            flush(i)
            start = i + 1
        i += 1

    flush(len(script))
    return commands


# Characters that may follow the closing quote of a literal
_LITERAL_FOLLOW = frozenset(" \t\r\n;,-[]{}")


def _literal_end(script: str, start: int) -> int | None:
    """Return the index of the quote closing the literal opened at ``start``.

    The literal must close on the same line, and its closing quote must be
    followed by a token boundary. Otherwise None: the opening quote is stray.
    """
    quote = script[start]
    end = script.find(quote, start + 1)
    if end == -1:
        return None
    newline = script.find("\n", start + 1)
    if newline != -1 and newline < end:
        return None
    if end + 1 < len(script) and script[end + 1] not in _LITERAL_FOLLOW:
        return None
    return end


def _only_comments(text: str) -> bool:
    return all(not line.strip() or line.strip().startswith("--") for line in text.split("\n"))


def compile_script(
    script: str, tables: Sequence[Table], parser: CommandParser | None = None
) -> CompiledScript:
    """Parse every command of ``script`` against ``tables``.

    Invalid commands are skipped and reported; the remaining Actions keep
    their source order.
    """
    if parser is None:
        parser = CommandParser()

    result = CompiledScript()
    # Column names added earlier in this script, per table id
    added_columns: dict[str, set[str]] = {}

    for offset, command in split_commands(script):
        result.command_count += 1
        outcome = parser.parse_line(command, tables)

        if isinstance(outcome, ParseFailure):
            position = offset + outcome.position if outcome.position is not None else None
            _report(result, outcome.kind, ERROR, outcome.message, command, offset, position)
            continue

        if isinstance(outcome, AddColumn):
            names = added_columns.setdefault(outcome.table_id, set())
            if outcome.column_name in names:
                _report(
                    result,
                    FailureKind.COLUMN_EXISTS,
                    ERROR,
                    f"Column '{outcome.column_name}' is already added earlier in the script",
                    command,
                    offset,
                )
                continue
            names.add(outcome.column_name)

        for warning in parser.warnings:
            _report(result, warning.kind, WARNING, warning.message, command, offset)
        result.actions.append(outcome)

    if result.is_empty_script:
        logger.info("Script contains no commands")
    elif not result.actions:
        logger.warning("No valid actions found in script")
    else:
        logger.debug("Compiled %d of %d commands", len(result.actions), result.command_count)
    return result


def _report(
    result: CompiledScript,
    kind: FailureKind,
    severity: str,
    message: str,
    command: str,
    offset: int,
    position: int | None = None,
) -> None:
    result.diagnostics.append(Diagnostic(
        kind=kind,
        severity=severity,
        message=message,
        command=command,
        offset=offset,
        position=position,
    ))
    if severity == ERROR:
        logger.error("Skipping command at offset %d: %s", offset, message)
    else:
        logger.warning("Command at offset %d: %s", offset, message)


def parse_script(script: str, tables: Sequence[Table]) -> list[Action]:
    """Return the Actions of ``script`` in order, skipping invalid commands."""
    return compile_script(script, tables).actions
