"""
SQL tokeniser used by the example checker.

Hand-written, single pass, no regex on the hot path.  Positions are 1-based
and relative to the snippet; the checker maps them back onto the document.
"""

from __future__ import annotations
from enum import Enum, auto
from dataclasses import dataclass
from typing import Any

from .errors import LexError


class TT(Enum):
    """Token types."""
    # literals
    INT = auto(); FLOAT = auto(); STR = auto()
    TRUE = auto(); FALSE = auto(); NULL = auto()
    # identifier / bind parameter
    IDENT = auto(); PARAM = auto()
    # reserved keywords (mapped from lowercase text)
    SELECT = auto(); FROM = auto(); WHERE = auto()
    AND = auto(); OR = auto(); NOT = auto()
    INSERT = auto(); INTO = auto(); VALUES = auto()
    UPDATE = auto(); SET = auto(); DELETE = auto()
    CREATE = auto(); TABLE = auto(); DROP = auto(); ALTER = auto()
    ORDER = auto(); BY = auto(); ASC = auto(); DESC = auto()
    LIMIT = auto(); OFFSET = auto(); TOP = auto()
    JOIN = auto(); INNER = auto(); LEFT = auto(); RIGHT = auto()
    FULL = auto(); OUTER = auto(); CROSS = auto(); NATURAL = auto()
    ON = auto(); USING = auto()
    GROUP = auto(); HAVING = auto()
    AS = auto(); DISTINCT = auto(); ALL = auto(); ANY = auto(); SOME = auto()
    UNION = auto(); INTERSECT = auto(); EXCEPT = auto(); SETMINUS = auto()
    WITH = auto()
    INDEX = auto(); UNIQUE = auto()
    PRIMARY = auto(); KEY = auto(); FOREIGN = auto(); REFERENCES = auto()
    CONSTRAINT = auto(); CHECK = auto(); DEFAULT = auto()
    BEGIN = auto(); COMMIT = auto(); ROLLBACK = auto()
    LIKE = auto(); ILIKE = auto(); IN = auto(); BETWEEN = auto(); IS = auto()
    CASE = auto(); WHEN = auto(); THEN = auto(); ELSE = auto(); END = auto()
    IF = auto(); EXISTS = auto(); CAST = auto()
    TO = auto()
    # operators
    PLUS = auto(); MINUS = auto(); STAR = auto(); SLASH = auto(); PERCENT = auto()
    EQ = auto(); NEQ = auto(); LT = auto(); GT = auto(); LTE = auto(); GTE = auto()
    CONCAT = auto()
    LPAREN = auto(); RPAREN = auto()
    COMMA = auto(); SEMI = auto(); DOT = auto(); DCOLON = auto()
    AT = auto()                     # user@host in GRANT / REVOKE
    # end
    EOF = auto()


@dataclass
class Token:
    type: TT
    value: Any        # raw value for INT/FLOAT/STR/IDENT/PARAM and keywords, else None
    line: int
    col:  int

    def is_word(self, word: str) -> bool:
        """True for an unquoted identifier spelled `word` (case-insensitive)."""
        return (self.type is TT.IDENT and isinstance(self.value, str)
                and self.value.upper() == word)


KEYWORDS: dict[str, TT] = {
    "select": TT.SELECT, "from": TT.FROM, "where": TT.WHERE,
    "and": TT.AND, "or": TT.OR, "not": TT.NOT,
    "insert": TT.INSERT, "into": TT.INTO, "values": TT.VALUES,
    "update": TT.UPDATE, "set": TT.SET, "delete": TT.DELETE,
    "create": TT.CREATE, "table": TT.TABLE, "drop": TT.DROP, "alter": TT.ALTER,
    "order": TT.ORDER, "by": TT.BY, "asc": TT.ASC, "desc": TT.DESC,
    "limit": TT.LIMIT, "offset": TT.OFFSET, "top": TT.TOP,
    "join": TT.JOIN, "inner": TT.INNER, "left": TT.LEFT, "right": TT.RIGHT,
    "full": TT.FULL, "outer": TT.OUTER, "cross": TT.CROSS, "natural": TT.NATURAL,
    "on": TT.ON, "using": TT.USING,
    "group": TT.GROUP, "having": TT.HAVING,
    "as": TT.AS, "distinct": TT.DISTINCT, "all": TT.ALL,
    "any": TT.ANY, "some": TT.SOME,
    "union": TT.UNION, "intersect": TT.INTERSECT, "except": TT.EXCEPT,
    "minus": TT.SETMINUS, "with": TT.WITH,
    "index": TT.INDEX, "unique": TT.UNIQUE,
    "primary": TT.PRIMARY, "key": TT.KEY,
    "foreign": TT.FOREIGN, "references": TT.REFERENCES,
    "constraint": TT.CONSTRAINT, "check": TT.CHECK, "default": TT.DEFAULT,
    "begin": TT.BEGIN, "commit": TT.COMMIT, "rollback": TT.ROLLBACK,
    "like": TT.LIKE, "ilike": TT.ILIKE, "in": TT.IN,
    "between": TT.BETWEEN, "is": TT.IS,
    "case": TT.CASE, "when": TT.WHEN, "then": TT.THEN,
    "else": TT.ELSE, "end": TT.END,
    "if": TT.IF, "exists": TT.EXISTS, "cast": TT.CAST,
    "to": TT.TO,
    "true": TT.TRUE, "false": TT.FALSE, "null": TT.NULL,
}

# closing delimiter for each quoted-identifier style
_QUOTED_IDENT = {'"': '"', '`': '`', '[': ']'}


class Lexer:
    """Single-pass lexer.  O(n)."""

    def __init__(self, src: str):
        self.src  = src
        self.pos  = 0
        self.line = 1
        self.col  = 1

    # ── public ──────────────────────────────────────────────────────────
    def tokenise(self) -> list[Token]:
        out: list[Token] = []
        while True:
            t = self._next()
            out.append(t)
            if t.type is TT.EOF:
                break
        return out

    # ── internals ───────────────────────────────────────────────────────
    def _peek(self) -> str | None:
        return self.src[self.pos] if self.pos < len(self.src) else None

    def _peek2(self) -> str | None:
        p = self.pos + 1
        return self.src[p] if p < len(self.src) else None

    def _advance(self) -> str | None:
        if self.pos >= len(self.src):
            return None
        ch = self.src[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1; self.col = 1
        else:
            self.col += 1
        return ch

    def _skip(self):
        """Skip whitespace and comments (--, # and /* */)."""
        while self.pos < len(self.src):
            # whitespace
            if self.src[self.pos].isspace():
                self._advance(); continue
            # line comment; '#' only when it can't start a T-SQL #temp name
            if self.src[self.pos:self.pos+2] == '--' or (
                    self.src[self.pos] == '#' and self._hash_is_comment()):
                while self._advance() not in (None, '\n'):
                    pass
                continue
            # block comment
            if self.src[self.pos:self.pos+2] == '/*':
                line, col = self.line, self.col
                self._advance(); self._advance()
                while True:
                    if self.pos >= len(self.src):
                        raise LexError("unterminated block comment", line, col)
                    if self.src[self.pos:self.pos+2] == '*/':
                        self._advance(); self._advance(); break
                    self._advance()
                continue
            break

    def _hash_is_comment(self) -> bool:
        nxt = self._peek2()
        if nxt is None or nxt.isspace():
            return True
        start = self.src.rfind('\n', 0, self.pos) + 1
        return not self.src[start:self.pos].strip()

    def _next(self) -> Token:
        self._skip()
        line, col = self.line, self.col
        ch = self._peek()
        if ch is None:
            return Token(TT.EOF, None, line, col)

        # ── two-char operators ──────────────────────────────────────────
        two = self.src[self.pos:self.pos+2]
        doubles = {'!=': TT.NEQ, '<>': TT.NEQ, '<=': TT.LTE, '>=': TT.GTE,
                   '::': TT.DCOLON, '||': TT.CONCAT}
        if two in doubles:
            self._advance(); self._advance()
            return Token(doubles[two], None, line, col)

        # ── bind parameters:  ?  :name  @name  $1 ───────────────────────
        if ch == '?':
            self._advance()
            return Token(TT.PARAM, '?', line, col)
        if ch in ':@$' and self._peek2() and (self._peek2().isalnum() or self._peek2() == '_'):
            buf = self._advance()
            while self._peek() and (self._peek().isalnum() or self._peek() == '_'):
                buf += self._advance()
            return Token(TT.PARAM, buf, line, col)

        # ── single-char operators ───────────────────────────────────────
        singles = {
            '+': TT.PLUS, '-': TT.MINUS, '*': TT.STAR, '/': TT.SLASH, '%': TT.PERCENT,
            '(': TT.LPAREN, ')': TT.RPAREN, ',': TT.COMMA,
            ';': TT.SEMI, '=': TT.EQ, '<': TT.LT, '>': TT.GT, '@': TT.AT,
        }
        if ch in singles:
            self._advance()
            return Token(singles[ch], None, line, col)

        # ── number, including a bare leading dot (.5) ───────────────────
        if ch.isdigit() or (ch == '.' and self._peek2() and self._peek2().isdigit()):
            return self._lex_number(line, col)
        if ch == '.':
            self._advance()
            return Token(TT.DOT, None, line, col)

        # ── string literal ──────────────────────────────────────────────
        if ch == "'":
            return self._lex_string(line, col)

        # ── quoted identifier ───────────────────────────────────────────
        if ch in _QUOTED_IDENT:
            return self._lex_quoted_ident(line, col)

        # ── identifier / keyword ────────────────────────────────────────
        if ch.isalpha() or ch == '_':
            return self._lex_ident(line, col)

        raise LexError(f"unexpected character '{ch}'", line, col)

    # ── number ──────────────────────────────────────────────────────────
    def _lex_number(self, line: int, col: int) -> Token:
        buf = ''
        while self._peek() and self._peek().isdigit():
            buf += self._advance()
        is_float = False
        # decimal part
        if self._peek() == '.' and (not buf or not self._peek2() or not self._peek2().isalpha()):
            is_float = True
            buf += self._advance()  # '.'
            while self._peek() and self._peek().isdigit():
                buf += self._advance()
        # exponent
        if self._peek() in ('e', 'E') and self._peek2() and (self._peek2().isdigit() or self._peek2() in '+-'):
            is_float = True
            buf += self._advance()
            if self._peek() in ('+', '-'):
                buf += self._advance()
            if not (self._peek() and self._peek().isdigit()):
                raise LexError("malformed exponent", line, col)
            while self._peek() and self._peek().isdigit():
                buf += self._advance()
        if self._peek() and (self._peek().isalpha() or self._peek() == '_'):
            raise LexError(f"malformed number '{buf}{self._peek()}'", line, col)
        if is_float:
            return Token(TT.FLOAT, float(buf), line, col)
        return Token(TT.INT, int(buf), line, col)

    # ── string ──────────────────────────────────────────────────────────
    def _lex_string(self, line: int, col: int) -> Token:
        self._advance()  # opening '
        buf = ''
        while True:
            ch = self._advance()
            if ch is None:
                raise LexError("unterminated string", line, col)
            if ch == "'":
                if self._peek() == "'":       # escaped ''
                    self._advance()
                    buf += "'"
                else:
                    break
            else:
                buf += ch
        return Token(TT.STR, buf, line, col)

    def _lex_quoted_ident(self, line: int, col: int) -> Token:
        close = _QUOTED_IDENT[self._advance()]
        buf = ''
        while True:
            ch = self._advance()
            if ch is None:
                raise LexError("unterminated quoted identifier", line, col)
            if ch == close:
                if close != ']' and self._peek() == close:   # doubled quote
                    buf += self._advance()
                    continue
                break
            buf += ch
        if not buf:
            raise LexError("empty quoted identifier", line, col)
        # quoted names are never keywords
        return Token(TT.IDENT, buf, line, col)

    # ── ident ───────────────────────────────────────────────────────────
    def _lex_ident(self, line: int, col: int) -> Token:
        buf = ''
        while self._peek() and (self._peek().isalnum() or self._peek() in '_$'):
            buf += self._advance()
        low = buf.lower()
        if low in KEYWORDS:
            return Token(KEYWORDS[low], buf, line, col)
        return Token(TT.IDENT, buf, line, col)

    def _lex_temp_name(self, line: int, col: int) -> Token:
        buf = ''
        while self._peek() == '#':
            buf += self._advance()
        if not (self._peek() and (self._peek().isalnum() or self._peek() == '_')):
            raise LexError("unexpected character '#'", line, col)
        while self._peek() and (self._peek().isalnum() or self._peek() in '_$'):
            buf += self._advance()
        return Token(TT.IDENT, buf, line, col)


def tokenise(src: str) -> list[Token]:
    return Lexer(src).tokenise()
