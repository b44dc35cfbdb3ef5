"""Syntax checking of extracted examples against the reference grammar."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .config import Settings
from .errors import SqlSyntaxError
from .extractor import Example, iter_examples
from .log import get_logger
from .nodes import Category
from .parser import parse_script

logger = get_logger(__name__)


class Status(str, Enum):
    PASSED  = "passed"
    FAILED  = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SyntaxIssue:
    """Where and why an example failed, in document coordinates."""
    line:    int
    col:     int
    message: str


@dataclass
class CheckResult:
    example:    Example
    status:     Status
    statements: list[tuple[str, Category]] = field(default_factory=list)
    error:      SyntaxIssue | None = None

    @property
    def ok(self) -> bool:
        return self.status is not Status.FAILED


def _stripped_width(example: Example, snippet_line: int) -> int:
    """Columns the extractor removed from a content line (1-based)."""
    if 0 < snippet_line <= len(example.line_indents):
        return example.line_indents[snippet_line - 1]
    return example.indent


def check_example(example: Example, settings: Settings | None = None) -> CheckResult:
    """Parse one example.  Syntax errors become a failed result, never an exception."""
    settings = settings or Settings()
    if example.skip:
        logger.debug("%s:%d: skipped", example.source, example.line)
        return CheckResult(example, Status.SKIPPED)

    try:
        stmts = parse_script(example.text, require_semicolon=settings.require_semicolon)
    except SqlSyntaxError as e:
        issue = SyntaxIssue(
            line=example.line + e.line - 1,
            col=e.col + _stripped_width(example, e.line),
            message=e.msg,
        )
        logger.debug("%s:%d:%d: %s", example.source, issue.line, issue.col, issue.message)
        return CheckResult(example, Status.FAILED, error=issue)

    if not stmts:
        return CheckResult(example, Status.FAILED,
                           error=SyntaxIssue(example.line, 1, "empty example"))

    kinds = [(s.kind, s.category) for s in stmts]
    logger.debug("%s:%d: ok (%s)", example.source, example.line,
                 ", ".join(k for k, _ in kinds))
    return CheckResult(example, Status.PASSED, statements=kinds)


def check_document(text: str, source: str = "<string>",
                   settings: Settings | None = None) -> Iterator[CheckResult]:
    """Check every SQL example in a markdown document, lazily."""
    settings = settings or Settings()
    for example in iter_examples(text, source, settings.languages, settings.skip_marker):
        yield check_example(example, settings)
