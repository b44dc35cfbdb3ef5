"""Unit tests for fenced-block extraction."""

import inspect

import pytest

from sqldoccheck.extractor import discover, extract_file, iter_blocks, iter_examples

DOC = """# Title

Some text.

```sql
SELECT 1;
```

```python
print("not sql")
```

~~~SQL
SELECT 2;
~~~
"""


def test_only_sql_blocks_with_line_numbers() -> None:
    examples = list(iter_examples(DOC, "doc.md"))
    assert [(e.line, e.lang, e.text) for e in examples] == [
        (6, "sql", "SELECT 1;"),
        (14, "sql", "SELECT 2;"),
    ]
    assert examples[0].fence_line == 5
    assert examples[0].end_line == 7
    assert examples[0].source == "doc.md"


def test_examples_are_yielded_lazily() -> None:
    gen = iter_examples(DOC, "doc.md")
    assert inspect.isgenerator(gen)
    assert next(gen).line == 6


def test_all_blocks_regardless_of_language() -> None:
    assert [b.lang for b in iter_blocks(DOC)] == ["sql", "python", "sql"]


def test_shorter_fence_does_not_close() -> None:
    doc = "````sql\nSELECT 1;\n```\n````\n"
    (ex,) = iter_examples(doc)
    assert ex.text == "SELECT 1;\n```"
    assert not ex.unterminated


def test_other_fence_character_does_not_close() -> None:
    doc = "```sql\nA\n~~~\n```\n"
    (ex,) = iter_examples(doc)
    assert ex.text == "A\n~~~"


def test_unterminated_fence_runs_to_end() -> None:
    (ex,) = iter_examples("intro\n```sql\nSELECT 1;\n")
    assert ex.unterminated
    assert ex.text == "SELECT 1;"
    assert ex.end_line == 3


def test_fence_indentation_is_stripped() -> None:
    doc = "  ```sql\n  SELECT *\n    FROM t\n  ```\n"
    (ex,) = iter_examples(doc)
    assert ex.indent == 2
    assert ex.text == "SELECT *\n  FROM t"


def test_four_space_indent_is_not_a_fence() -> None:
    assert list(iter_examples("    ```sql\n    SELECT 1;\n    ```\n")) == []


def test_backtick_in_info_string_is_not_a_fence() -> None:
    assert list(iter_examples("```sql`x\nSELECT 1;\n```\n")) == []


@pytest.mark.parametrize("info", ["sql nocheck", "{.sql .nocheck}", "sql,nocheck"])
def test_skip_marker_in_info_string(info: str) -> None:
    (ex,) = iter_examples(f"```{info}\nSELECT column1, ... FROM table_name;\n```\n")
    assert ex.lang == "sql"
    assert ex.skip


def test_custom_skip_marker() -> None:
    (ex,) = iter_examples("```sql template\nx\n```\n", skip_marker="template")
    assert ex.skip


def test_skip_comment_applies_to_next_block_only() -> None:
    doc = (
        "<!-- sqldoccheck: skip -->\n"
        "```sql\nSELECT col1, ... FROM t;\n```\n"
        "\n"
        "```sql\nSELECT 1;\n```\n"
    )
    first, second = iter_examples(doc)
    assert first.skip
    assert not second.skip


def test_language_filter() -> None:
    doc = "```mysql\nSELECT 1;\n```\n```sql\nSELECT 2;\n```\n"
    assert [e.text for e in iter_examples(doc, languages=["MySQL"])] == ["SELECT 1;"]


def test_extract_file(write_md) -> None:
    path = write_md("tutorial.md", DOC)
    examples = list(extract_file(path))
    assert len(examples) == 2
    assert examples[0].source == str(path)


def test_discover_expands_directories(tmp_path, write_md) -> None:
    a = write_md("docs/x.md", "")
    b = write_md("docs/sub/y.md", "")
    write_md("docs/notes.txt", "")
    single = write_md("README.md", "")
    assert discover([tmp_path / "docs", single]) == sorted([a, b]) + [single]


def test_discover_missing_path(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        discover([tmp_path / "nope.md"])


def test_stripped_width_is_recorded_per_line() -> None:
    doc = "   ```sql\n   SELECT *\n FROM t\n\n```\n"
    (ex,) = iter_examples(doc)
    assert ex.indent == 3
    assert ex.line_indents == (3, 1, 0)
    assert ex.text == "SELECT *\nFROM t\n"
