"""Unit tests for the SQL tokeniser."""

import pytest

from sqldoccheck.errors import LexError
from sqldoccheck.lexer import TT, tokenise


def types(src: str) -> list[TT]:
    return [t.type for t in tokenise(src)]


def test_keywords_are_case_insensitive() -> None:
    toks = tokenise("select Name FROM t")
    assert [t.type for t in toks] == [TT.SELECT, TT.IDENT, TT.FROM, TT.IDENT, TT.EOF]
    assert toks[1].value == "Name"


def test_two_char_operators() -> None:
    assert types("a <> b != c <= d >= e || f") == [
        TT.IDENT, TT.NEQ, TT.IDENT, TT.NEQ, TT.IDENT, TT.LTE, TT.IDENT,
        TT.GTE, TT.IDENT, TT.CONCAT, TT.IDENT, TT.EOF,
    ]


def test_minus_is_always_an_operator() -> None:
    assert types("a-1") == [TT.IDENT, TT.MINUS, TT.INT, TT.EOF]


def test_numbers() -> None:
    toks = tokenise("42 3.14 .5 1e3 2E-2")
    assert [(t.type, t.value) for t in toks[:-1]] == [
        (TT.INT, 42), (TT.FLOAT, 3.14), (TT.FLOAT, 0.5),
        (TT.FLOAT, 1000.0), (TT.FLOAT, 0.02),
    ]


def test_string_with_doubled_quote() -> None:
    toks = tokenise("'it''s'")
    assert toks[0].type == TT.STR
    assert toks[0].value == "it's"


def test_quoted_identifiers_are_never_keywords() -> None:
    toks = tokenise('"order" `group` [select]')
    assert [(t.type, t.value) for t in toks[:-1]] == [
        (TT.IDENT, "order"), (TT.IDENT, "group"), (TT.IDENT, "select"),
    ]


def test_comments_are_skipped() -> None:
    assert types("SELECT 1 -- trailing\n# mysql style\n/* block\n comment */ ;") == [
        TT.SELECT, TT.INT, TT.SEMI, TT.EOF,
    ]


def test_bind_parameters() -> None:
    toks = tokenise("? :name @id $1 x::INT")
    assert [t.value for t in toks[:4]] == ["?", ":name", "@id", "$1"]
    assert all(t.type == TT.PARAM for t in toks[:4])
    assert toks[5].type == TT.DCOLON


def test_positions_are_one_based() -> None:
    toks = tokenise("SELECT\n  x")
    assert (toks[1].line, toks[1].col) == (2, 3)


def test_unterminated_string_reports_start() -> None:
    with pytest.raises(LexError) as exc:
        tokenise("SELECT 'abc")
    assert (exc.value.line, exc.value.col) == (1, 8)
    assert str(exc.value).startswith("[Lex 1:8]")
    assert exc.value.msg == "unterminated string"


@pytest.mark.parametrize("src", [
    "SELECT 1 /* never closed",
    "SELECT ^ FROM t",
    "SELECT 12abc",
    'SELECT "unclosed',
])
def test_lex_errors(src: str) -> None:
    with pytest.raises(LexError):
        tokenise(src)


def test_hash_comment_or_temp_table_name() -> None:
    assert types("SELECT 1 # note") == [TT.SELECT, TT.INT, TT.EOF]
    assert types("SELECT 1\n#note on its own line\n;") == [TT.SELECT, TT.INT, TT.SEMI, TT.EOF]
    toks = tokenise("SELECT * FROM #orders JOIN ##totals")
    assert [(t.type, t.value) for t in toks[3:6]] == [
        (TT.IDENT, "#orders"), (TT.JOIN, "JOIN"), (TT.IDENT, "##totals"),
    ]


def test_account_host_separator() -> None:
    assert types("'app'@'localhost'") == [TT.STR, TT.AT, TT.STR, TT.EOF]
    assert types("`app`@`%`") == [TT.IDENT, TT.AT, TT.IDENT, TT.EOF]
