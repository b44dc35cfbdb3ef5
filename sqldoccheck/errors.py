"""Exception hierarchy shared by the lexer, parser and CLI."""

from __future__ import annotations


class SqlDocCheckError(Exception):
    """Base for everything sqldoccheck raises on purpose."""


class SqlSyntaxError(SqlDocCheckError):
    """A snippet could not be tokenised or parsed.  Carries a 1-based position."""

    stage = "Syntax"

    def __init__(self, msg: str, line: int, col: int):
        super().__init__(f"[{self.stage} {line}:{col}] {msg}")
        self.msg  = msg
        self.line = line
        self.col  = col


class LexError(SqlSyntaxError):
    stage = "Lex"


class ParseError(SqlSyntaxError):
    stage = "Parse"

    def __init__(self, msg: str, tok):
        got = f"got {tok.type.name}" + (f" '{tok.value}'" if tok.value is not None else "")
        super().__init__(f"{msg}  ({got})", tok.line, tok.col)
