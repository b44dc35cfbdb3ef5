"""Unit tests for example checking and document-position mapping."""

from sqldoccheck.checker import Status, check_document, check_example
from sqldoccheck.config import Settings
from sqldoccheck.extractor import iter_examples
from sqldoccheck.nodes import Category


def only_example(doc: str):
    (ex,) = iter_examples(doc, "doc.md")
    return ex


def test_passing_example_lists_statements(settings) -> None:
    ex = only_example(
        "```sql\n"
        "CREATE TABLE t (id INT);\n"
        "INSERT INTO t VALUES (1);\n"
        "SELECT * FROM t;\n"
        "```\n"
    )
    result = check_example(ex, settings)
    assert result.status is Status.PASSED
    assert result.ok
    assert result.error is None
    assert result.statements == [
        ("CREATE TABLE", Category.DDL),
        ("INSERT", Category.DML),
        ("SELECT", Category.DQL),
    ]


def test_error_is_reported_at_document_position(settings) -> None:
    ex = only_example("# T\n\n```sql\nSELECT *\nFROM\n```\n")
    result = check_example(ex, settings)
    assert result.status is Status.FAILED
    assert not result.ok
    assert (result.error.line, result.error.col) == (5, 5)
    assert "expected identifier" in result.error.message


def test_error_column_accounts_for_fence_indent(settings) -> None:
    ex = only_example("  ```sql\n  SELECT * FROM\n  ```\n")
    result = check_example(ex, settings)
    assert (result.error.line, result.error.col) == (2, 16)


def test_lex_error_becomes_failed_result(settings) -> None:
    result = check_example(only_example("```sql\nSELECT 'oops\n```\n"), settings)
    assert result.status is Status.FAILED
    assert result.error.message == "unterminated string"
    assert (result.error.line, result.error.col) == (2, 8)


def test_skipped_example_is_not_parsed(settings) -> None:
    result = check_example(only_example("```sql nocheck\nSELECT col1, ... FROM t;\n```\n"), settings)
    assert result.status is Status.SKIPPED
    assert result.ok


def test_empty_example_fails(settings) -> None:
    result = check_example(only_example("```sql\n-- nothing here\n```\n"), settings)
    assert result.status is Status.FAILED
    assert result.error.message == "empty example"
    assert result.error.line == 2


def test_require_semicolon_setting() -> None:
    ex = only_example("```sql\nSELECT 1\n```\n")
    assert check_example(ex, Settings()).status is Status.PASSED
    assert check_example(ex, Settings(require_semicolon=True)).status is Status.FAILED


def test_check_document_checks_every_sql_block(settings) -> None:
    doc = (
        "```sql\nSELECT 1;\n```\n"
        "```bash\nls -la\n```\n"
        "```postgresql\nSELEC 2;\n```\n"
    )
    results = list(check_document(doc, "doc.md", settings))
    assert [r.status for r in results] == [Status.PASSED, Status.FAILED]
    assert results[1].example.lang == "postgresql"


def test_error_column_uses_the_width_actually_stripped(settings) -> None:
    # the content line is indented less than its fence
    ex = only_example("  ```sql\n SELECT * FROM\n  ```\n")
    result = check_example(ex, settings)
    assert (result.error.line, result.error.col) == (2, 15)


def test_deeply_nested_example_fails_cleanly(settings) -> None:
    depth = 150
    ex = only_example("```sql\nSELECT " + "(" * depth + "1" + ")" * depth + ";\n```\n")
    result = check_example(ex, settings)
    assert result.status is Status.FAILED
    assert result.error.message.startswith("expression nested too deeply")
    assert result.error.line == 2
