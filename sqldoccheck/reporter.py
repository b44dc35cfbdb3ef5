"""Aggregation of check results and lint issues, and their text / JSON rendering."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable

from .checker import CheckResult, Status
from .doclint import LintIssue


@dataclass
class SourceSummary:
    source:  str
    passed:  int = 0
    failed:  int = 0
    skipped: int = 0
    lint:    int = 0

    @property
    def examples(self) -> int:
        return self.passed + self.failed + self.skipped


@dataclass
class Report:
    results: list[CheckResult] = field(default_factory=list)
    issues:  list[LintIssue] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)   # in the order they were checked

    # ── collection ──────────────────────────────────────────────────────
    def add_source(self, source: str):
        if source not in self.sources:
            self.sources.append(source)

    def add_result(self, result: CheckResult):
        self.add_source(result.example.source)
        self.results.append(result)

    def add_results(self, results: Iterable[CheckResult]):
        for r in results:
            self.add_result(r)

    def add_issues(self, issues: Iterable[LintIssue]):
        for issue in issues:
            self.add_source(issue.source)
            self.issues.append(issue)

    # ── totals ──────────────────────────────────────────────────────────
    def _count(self, status: Status) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def passed(self) -> int:  return self._count(Status.PASSED)
    @property
    def failed(self) -> int:  return self._count(Status.FAILED)
    @property
    def skipped(self) -> int: return self._count(Status.SKIPPED)
    @property
    def total(self) -> int:   return len(self.results)

    @property
    def ok(self) -> bool:
        """No failed example and no lint issue.  Skipped examples don't count."""
        return self.failed == 0 and not self.issues

    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if r.status is Status.FAILED]

    def by_source(self) -> list[SourceSummary]:
        summaries = {s: SourceSummary(s) for s in self.sources}
        for r in self.results:
            s = summaries[r.example.source]
            match r.status:
                case Status.PASSED:  s.passed += 1
                case Status.FAILED:  s.failed += 1
                case Status.SKIPPED: s.skipped += 1
        for issue in self.issues:
            summaries[issue.source].lint += 1
        return list(summaries.values())


# ════════════════════════════════════════════════════════════════════════════
# RENDERING
# ════════════════════════════════════════════════════════════════════════════

def format_table(headers: list[str], rows: list[list[Any]]) -> str:
    """Pretty-print rows as a bordered table."""
    if not headers:
        return ""
    # Stringify
    str_rows = []
    for r in rows:
        str_rows.append([("-" if v is None else str(v)) for v in r])
    # Column widths
    widths = [len(h) for h in headers]
    for r in str_rows:
        for i, v in enumerate(r):
            if i < len(widths):
                widths[i] = max(widths[i], len(v))
    # Build
    def line(ch="─", join="┼", left="├", right="┤"):
        return left + join.join(ch * (w + 2) for w in widths) + right
    def row_str(vals):
        cells = []
        for i, v in enumerate(vals):
            # numbers right-aligned, text left-aligned
            cells.append(f" {v:>{widths[i]}} " if v.isdigit() else f" {v:<{widths[i]}} ")
        return "│" + "│".join(cells) + "│"

    lines = []
    lines.append("┌" + "┬".join("─" * (w + 2) for w in widths) + "┐")
    lines.append(row_str(headers))
    lines.append(line())
    for r in str_rows:
        # pad if needed
        while len(r) < len(widths):
            r.append("")
        lines.append(row_str(r))
    lines.append("└" + "┴".join("─" * (w + 2) for w in widths) + "┘")
    return "\n".join(lines)


def _summary_line(report: Report) -> str:
    return (f"{report.total} example(s): {report.passed} passed, "
            f"{report.failed} failed, {report.skipped} skipped; "
            f"{len(report.issues)} lint issue(s)")


def render_text(report: Report, verbose: bool = False) -> str:
    out: list[str] = []
    for r in report.results:
        ex = r.example
        if r.status is Status.FAILED:
            err = r.error
            out.append(f"{ex.source}:{err.line}:{err.col}: error: {err.message}")
        elif verbose and r.status is Status.SKIPPED:
            out.append(f"{ex.source}:{ex.line}: skipped")
        elif verbose:
            kinds = ", ".join(k for k, _ in r.statements)
            out.append(f"{ex.source}:{ex.line}: ok: {kinds}")
    for issue in report.issues:
        out.append(f"{issue.source}:{issue.line}: {issue.rule}: {issue.message}")

    if report.sources:
        headers = ["file", "examples", "passed", "failed", "skipped", "lint"]
        rows = [[s.source, s.examples, s.passed, s.failed, s.skipped, s.lint]
                for s in report.by_source()]
        if len(rows) > 1:
            rows.append(["TOTAL", report.total, report.passed, report.failed,
                         report.skipped, len(report.issues)])
        if out:
            out.append("")
        out.append(format_table(headers, rows))
    out.append(_summary_line(report))
    return "\n".join(out)


def report_to_dict(report: Report) -> dict[str, Any]:
    return {
        "ok": report.ok,
        "summary": {
            "examples": report.total,
            "passed": report.passed,
            "failed": report.failed,
            "skipped": report.skipped,
            "lint_issues": len(report.issues),
        },
        "examples": [
            {
                "source": r.example.source,
                "line": r.example.line,
                "lang": r.example.lang,
                "status": r.status.value,
                "statements": [{"kind": k, "category": c.value} for k, c in r.statements],
                "error": None if r.error is None else {
                    "line": r.error.line, "col": r.error.col, "message": r.error.message,
                },
            }
            for r in report.results
        ],
        "lint": [
            {"source": i.source, "line": i.line, "rule": i.rule, "message": i.message}
            for i in report.issues
        ],
    }


def render_json(report: Report) -> str:
    return json.dumps(report_to_dict(report), indent=2)
