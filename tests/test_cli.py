"""End-to-end tests for the command-line entry point."""

import io
import json

import pytest

from sqldoccheck.cli import EXIT_ERROR, EXIT_FAILED, EXIT_OK, main

GOOD = """# SQL Tutorial

- [Select](#select)
- [Joins](#joins)

## Select

```sql
SELECT * FROM Customers;
```

## Joins

```sql
SELECT o.id, c.name
FROM Orders o
INNER JOIN Customers c ON o.customer_id = c.id;
```
"""

BAD = """# Broken

```sql
SELECT *
FROM
WHERE x = 1;
```
"""


def test_passing_file(write_md, capsys) -> None:
    path = write_md("good.md", GOOD)
    assert main([str(path)]) == EXIT_OK
    out = capsys.readouterr().out
    assert "2 example(s): 2 passed, 0 failed, 0 skipped; 0 lint issue(s)" in out


def test_failing_file(write_md, capsys) -> None:
    path = write_md("bad.md", BAD)
    assert main([str(path)]) == EXIT_FAILED
    out = capsys.readouterr().out
    assert f"{path}:6:1: error: expected identifier" in out


def test_directory_argument(tmp_path, write_md, capsys) -> None:
    write_md("docs/a.md", GOOD)
    write_md("docs/b.md", BAD)
    assert main([str(tmp_path / "docs")]) == EXIT_FAILED
    out = capsys.readouterr().out
    assert "TOTAL" in out


def test_missing_path_is_usage_error(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.md")]) == EXIT_ERROR
    assert "error" in capsys.readouterr().err


def test_reads_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(GOOD))
    assert main([]) == EXIT_OK
    assert "<stdin>" in capsys.readouterr().out


def test_dash_reads_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(BAD))
    assert main(["-"]) == EXIT_FAILED
    assert "<stdin>:6:1: error" in capsys.readouterr().out


def test_json_output(write_md, capsys) -> None:
    path = write_md("good.md", GOOD)
    assert main(["--format", "json", str(path)]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["ok"] is True
    assert data["summary"]["passed"] == 2


def test_lang_option_replaces_default_set(write_md, capsys) -> None:
    path = write_md("mixed.md", "```sql\nSELEC 1;\n```\n```mysql\nSELECT 1;\n```\n")
    assert main([str(path)]) == EXIT_FAILED
    capsys.readouterr()
    assert main(["--lang", "mysql", str(path)]) == EXIT_OK


def test_languages_from_environment(monkeypatch, write_md) -> None:
    path = write_md("mixed.md", "```sql\nSELEC 1;\n```\n```mysql\nSELECT 1;\n```\n")
    monkeypatch.setenv("SQLDOCCHECK_LANGUAGES", "mysql")
    assert main([str(path)]) == EXIT_OK


def test_require_semicolon(write_md) -> None:
    path = write_md("nosemi.md", "```sql\nSELECT 1\n```\n")
    assert main([str(path)]) == EXIT_OK
    assert main(["--require-semicolon", str(path)]) == EXIT_FAILED


def test_no_lint(write_md) -> None:
    path = write_md("toc.md", "[Missing](#nowhere)\n\n# Title\n")
    assert main([str(path)]) == EXIT_FAILED
    assert main(["--no-lint", str(path)]) == EXIT_OK


def test_list_prints_examples_without_checking(write_md, capsys) -> None:
    path = write_md("bad.md", BAD)
    assert main(["--list", str(path)]) == EXIT_OK
    out = capsys.readouterr().out
    assert f"{path}:4 [sql]" in out
    assert "WHERE x = 1;" in out


def test_verbose_lists_passing_examples(write_md, capsys) -> None:
    path = write_md("good.md", GOOD)
    assert main(["-v", str(path)]) == EXIT_OK
    assert f"{path}:9: ok: SELECT" in capsys.readouterr().out


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert "sqldoccheck" in capsys.readouterr().out


def test_invalid_environment_is_usage_error(monkeypatch, capsys) -> None:
    monkeypatch.setenv("SQLDOCCHECK_OUTPUT_FORMAT", "xml")
    assert main([]) == EXIT_ERROR
    assert "invalid configuration" in capsys.readouterr().err


def test_no_lint_also_silences_unclosed_fences(write_md) -> None:
    path = write_md("open.md", "# Open\n\n```sql\nSELECT 1;\n")
    assert main([str(path)]) == EXIT_FAILED
    assert main(["--no-lint", str(path)]) == EXIT_OK


def test_deep_nesting_reports_a_failure(write_md, capsys) -> None:
    path = write_md("deep.md", "```sql\nSELECT " + "(" * 150 + "1" + ")" * 150 + ";\n```\n")
    assert main([str(path)]) == EXIT_FAILED
    assert "expression nested too deeply" in capsys.readouterr().out
