"""Lexer for the table animation script language."""

import ply.lex as lex


class ScriptLexer:
    """Lexer for tokenizing one script command."""

    # Reserved keywords, matched case-insensitively
    reserved = {
        "highlight": "HIGHLIGHT",
        "add": "ADD",
        "in": "IN",
        "table": "TABLE",
        "row": "ROW",
        "column": "COLUMN",
        "cells": "CELLS",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "STRING",
        "INTEGER",
        "COMMA",
        "DASH",
        "LBRACKET",
        "RBRACKET",
        "LBRACE",
        "RBRACE",
    ] + list(reserved.values())

    # Simple tokens
    t_COMMA = r","
    t_DASH = r"-"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"

    t_ignore = " \t\r"

    # Comments; PLY sorts string rules longest-first so this wins over DASH
    t_ignore_COMMENT = r"--[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'[^']*'|\"[^\"]*\""
        t.lexer.lineno += t.value.count("\n")
        t.value = t.value[1:-1]
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+"
        # Kept as text; row numbers are converted by the grammar, cell values are not
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
