"""Language server for table animation scripts: diagnostics, completion, hover via pygls."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from lsprotocol import types
from pygls import uris
from pygls.lsp.server import LanguageServer

from table_animator.compiler import ERROR, Diagnostic, compile_script, split_commands
from table_animator.model import Table, load_tables
from table_animator.parsing.command_parser import CommandParser, error_position

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

TABLES_FILE = "tables.json"

KEYWORDS: dict[str, str] = {
    "highlight": "Emphasize rows, a column, or a cell of a table",
    "add": "Append a column or a row to a table",
    "in": "Used with 'in table'",
    "table": "Names the target table: table 'name'",
    "row": "Row numbers (1-based, comma-separated) or 'add … row'",
    "column": "Names a column: column 'name'",
    "cells": "Seed values of a new column: cells [{1-'value'} …]",
}

# Table name mentioned earlier on the same line
_TABLE_NAME_RE = re.compile(r"""table\s+(['"])(.*?)\1""", re.IGNORECASE)

_WORD_RE = re.compile(r"\w+")

# ---------------------------------------------------------------------------
# Helpers (module-level so they are easy to unit-test)
# ---------------------------------------------------------------------------


def lexpos_to_position(source: str, lexpos: int) -> types.Position:
    """Map a script offset (as used by commands and diagnostics) to a line/column pair."""
    before = source[:lexpos]
    line_start = before.rfind("\n") + 1
    return types.Position(line=before.count("\n"), character=len(before) - line_start)


def _word_at_position(line_text: str, character: int) -> str:
    """Return the keyword-like word under the cursor, or '' between words."""
    for m in _WORD_RE.finditer(line_text):
        if m.start() <= character < m.end():
            return m.group(0)
    return ""


def _to_lsp_diagnostic(source: str, diag: Diagnostic) -> types.Diagnostic:
    if diag.position is not None:
        start = lexpos_to_position(source, diag.position)
        end = types.Position(line=start.line, character=start.character + 1)
    else:
        start = lexpos_to_position(source, diag.offset)
        end = lexpos_to_position(source, diag.end)
    return types.Diagnostic(
        range=types.Range(start=start, end=end),
        severity=types.DiagnosticSeverity.Error if diag.severity == ERROR else types.DiagnosticSeverity.Warning,
        source="tanim",
        message=diag.message,
    )


def syntax_diagnostics(source: str) -> list[types.Diagnostic]:
    """Grammar-only checks, for documents without a tables file."""
    parser = CommandParser()
    diagnostics: list[types.Diagnostic] = []
    for offset, command in split_commands(source):
        try:
            parser.parse(command)
        except SyntaxError as exc:
            msg = str(exc)
            pos = error_position(msg)
            if pos is not None:
                start = lexpos_to_position(source, offset + pos)
                end = types.Position(line=start.line, character=start.character + 1)
            else:
                start = lexpos_to_position(source, offset)
                end = lexpos_to_position(source, offset + len(command))
            diagnostics.append(
                types.Diagnostic(
                    range=types.Range(start=start, end=end),
                    severity=types.DiagnosticSeverity.Error,
                    source="tanim",
                    message=f"Invalid command: {msg}",
                )
            )
    return diagnostics


def document_diagnostics(source: str, tables: Sequence[Table] | None) -> list[types.Diagnostic]:
    """Compile *source* and convert every compiler diagnostic for LSP."""
    if tables is None:
        return syntax_diagnostics(source)
    result = compile_script(source, tables)
    return [_to_lsp_diagnostic(source, d) for d in result.diagnostics]


def tables_for_document(path: str | None) -> list[Table] | None:
    """Load ``tables.json`` next to the document, or None when unavailable."""
    if not path:
        return None
    tables_path = Path(path).parent / TABLES_FILE
    if not tables_path.exists():
        return None
    try:
        return load_tables(tables_path)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load %s: %s", tables_path, exc)
        return None


def completion_labels(prefix: str, tables: Sequence[Table] | None) -> list[tuple[str, str]]:
    """Return ``(label, detail)`` completion candidates for a line prefix."""
    words = prefix.split()
    last = words[-1].lower() if words else ""

    if last == "table":
        return [(f"'{t.name}'", "Table") for t in tables or []]

    if last == "column":
        m = _TABLE_NAME_RE.search(prefix)
        if m is None:
            return []
        for table in tables or []:
            if table.name == m.group(2):
                return [(f"'{c.name}'", f"Column of {table.name}") for c in table.columns]
        return []

    return list(KEYWORDS.items())


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

server = LanguageServer("tanim-language-server", "0.1.0")


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: types.DidOpenTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: types.DidChangeTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


def _validate_document(uri: str) -> None:
    doc = server.workspace.get_text_document(uri)
    tables = tables_for_document(uris.to_fs_path(uri))
    diagnostics = document_diagnostics(doc.source, tables)
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=[" "]),
)
def completions(params: types.CompletionParams) -> types.CompletionList:
    doc = server.workspace.get_text_document(params.text_document.uri)
    line_text = doc.lines[params.position.line] if params.position.line < len(doc.lines) else ""
    prefix = line_text[: params.position.character]
    tables = tables_for_document(uris.to_fs_path(params.text_document.uri))

    items = [
        types.CompletionItem(
            label=label,
            kind=types.CompletionItemKind.Keyword if label in KEYWORDS else types.CompletionItemKind.Value,
            detail=detail,
        )
        for label, detail in completion_labels(prefix, tables)
    ]
    return types.CompletionList(is_incomplete=False, items=items)


@server.feature(types.TEXT_DOCUMENT_HOVER)
def hover(params: types.HoverParams) -> types.Hover | None:
    doc = server.workspace.get_text_document(params.text_document.uri)
    if params.position.line >= len(doc.lines):
        return None
    line_text = doc.lines[params.position.line]
    word = _word_at_position(line_text, params.position.character).lower()
    if word not in KEYWORDS:
        return None
    return types.Hover(
        contents=types.MarkupContent(
            kind=types.MarkupKind.Markdown,
            value=f"**{word}** — {KEYWORDS[word]}",
        )
    )


def main() -> None:
    server.start_io()


if __name__ == "__main__":
    main()
