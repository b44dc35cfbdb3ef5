"""Unit tests for document structure checks."""

import pytest

from sqldoccheck.config import Settings
from sqldoccheck.doclint import lint_document, slugify


@pytest.mark.parametrize("heading,slug", [
    ("Hello World", "hello-world"),
    ("SQL `SELECT` Statement", "sql-select-statement"),
    ("1. Intro & Setup", "1-intro--setup"),
    ("What is SQL?", "what-is-sql"),
    ("snake_case_name", "snake_case_name"),
    ("**Bold** heading", "bold-heading"),
    ("[Link](http://example.com) text", "link-text"),
])
def test_slugify(heading: str, slug: str) -> None:
    assert slugify(heading) == slug


def rules(doc: str, settings: Settings | None = None) -> list[tuple[int, str]]:
    return [(i.line, i.rule) for i in lint_document(doc, "doc.md", settings)]


def test_table_of_contents_resolves() -> None:
    doc = "- [Intro](#intro)\n- [Joins](#sql-joins)\n\n# Intro\n\n## SQL Joins\n"
    assert rules(doc) == []


def test_broken_anchor() -> None:
    issues = lint_document("[Missing](#nope)\n\n# Title\n", "doc.md")
    assert [(i.line, i.rule) for i in issues] == [(1, "toc-anchor")]
    assert "#nope" in issues[0].message
    assert issues[0].source == "doc.md"


def test_duplicate_headings_get_suffixes() -> None:
    base = "# A\n## Example\n## Example\n"
    assert rules(base + "[x](#example-1)\n") == []
    assert rules(base + "[y](#example-2)\n") == [(4, "toc-anchor")]


def test_html_anchor_resolves() -> None:
    assert rules('<a name="custom"></a>\n[go](#custom)\n# T\n') == []


def test_anchor_match_ignores_case_and_escapes() -> None:
    assert rules("[x](#Hello%20World)\n# Hello World\n") == [(1, "toc-anchor")]
    assert rules("[x](#Hello-World)\n# Hello World\n") == []


def test_links_in_inline_code_and_images_are_ignored() -> None:
    assert rules("`[x](#nope)` and ![img](#nope)\n# T\n") == []


def test_heading_skip() -> None:
    issues = lint_document("# A\n### C\n", "doc.md")
    assert [(i.line, i.rule) for i in issues] == [(2, "heading-skip")]
    assert "h1 -> h3" in issues[0].message


def test_heading_back_up_is_fine() -> None:
    assert rules("# A\n## B\n# C\n## D\n") == []


def test_first_heading_may_be_any_level() -> None:
    assert rules("### Start\n#### Next\n") == []


def test_fenced_content_is_ignored() -> None:
    assert rules("# A\n```sql\n### not a heading\n```\n## B\n") == []
    assert rules("```\n# Hash\n```\n[x](#hash)\n") == [(4, "toc-anchor")]


def test_unterminated_fence() -> None:
    assert rules("# A\n```sql\nSELECT 1;\n") == [(2, "unterminated-fence")]


def test_checks_can_be_disabled() -> None:
    doc = "[x](#nope)\n# A\n### C\n"
    assert rules(doc, Settings(lint_anchors=False)) == [(3, "heading-skip")]
    assert rules(doc, Settings(lint_headings=False)) == [(1, "toc-anchor")]


def test_fence_check_can_be_disabled() -> None:
    doc = "# A\n```sql\nSELECT 1;\n"
    assert rules(doc, Settings(lint_fences=False)) == []
    assert rules(doc, Settings(lint_anchors=False, lint_headings=False)) == [(2, "unterminated-fence")]
