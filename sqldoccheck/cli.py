"""
Command-line entry point.

    sqldoccheck README.md docs/            check files / directories
    cat tutorial.md | sqldoccheck          read markdown from stdin
    sqldoccheck --list tutorial.md         show extracted examples only

Exit status: 0 all good, 1 failed examples or lint issues, 2 usage / I/O error.
"""

from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from . import __version__
from .checker import check_example
from .config import Settings
from .doclint import lint_document
from .extractor import discover, iter_examples
from .log import get_logger, set_level
from .reporter import Report, render_json, render_text

logger = get_logger(__name__)

EXIT_OK, EXIT_FAILED, EXIT_ERROR = 0, 1, 2

STDIN = "<stdin>"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sqldoccheck",
        description="Validate the SQL examples embedded in markdown documentation.",
    )
    p.add_argument("paths", nargs="*", metavar="PATH",
                   help="markdown files or directories; '-' or nothing reads stdin")
    p.add_argument("--format", choices=("text", "json"), dest="output_format",
                   help="report format (default: text)")
    p.add_argument("--lang", action="append", dest="languages", metavar="LANG",
                   help="fence language to check; repeatable, replaces the default set")
    p.add_argument("--require-semicolon", action="store_true", default=None,
                   help="every statement must end with ';'")
    p.add_argument("--no-lint", action="store_true",
                   help="skip anchor, heading and fence checks")
    p.add_argument("--list", action="store_true",
                   help="print the extracted examples without checking them")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true",
                           help="report passing examples and log progress")
    verbosity.add_argument("-q", "--quiet", action="store_true",
                           help="log warnings only")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings()
    update = {}
    if args.output_format:
        update["output_format"] = args.output_format
    if args.languages:
        update["languages"] = [lang.lower() for lang in args.languages]
    if args.require_semicolon:
        update["require_semicolon"] = True
    if args.no_lint:
        update["lint_anchors"] = False
        update["lint_headings"] = False
        update["lint_fences"] = False
    if args.verbose:
        update["log_level"] = "DEBUG"
    elif args.quiet:
        update["log_level"] = "WARNING"
    return settings.model_copy(update=update)


def _read_sources(paths: list[str]):
    """Yield (source name, markdown text) pairs.  Raises OSError / UnicodeDecodeError."""
    # every path is resolved before the first document is read
    plan = [None if p == "-" else discover([p]) for p in paths or ["-"]]
    for files in plan:
        if files is None:
            yield STDIN, sys.stdin.read()
            continue
        for path in files:
            yield str(path), path.read_text(encoding="utf-8")


def check_text(text: str, source: str, settings: Settings, report: Report):
    """Check one document's examples and structure into `report`."""
    report.add_source(source)
    for example in iter_examples(text, source, settings.languages, settings.skip_marker):
        report.add_result(check_example(example, settings))
    if settings.lint_anchors or settings.lint_headings or settings.lint_fences:
        report.add_issues(lint_document(text, source, settings))


def _list_examples(text: str, source: str, settings: Settings) -> None:
    for ex in iter_examples(text, source, settings.languages, settings.skip_marker):
        flags = " (skip)" if ex.skip else ""
        print(f"── {source}:{ex.line} [{ex.lang}]{flags}")
        print(ex.text)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = _settings_from_args(args)
        set_level(settings.log_level)
    except (ValidationError, ValueError) as e:
        print(f"sqldoccheck: error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    report = Report()
    try:
        for source, text in _read_sources(args.paths):
            logger.info("checking %s", source)
            if args.list:
                _list_examples(text, source, settings)
            else:
                check_text(text, source, settings, report)
    except (OSError, UnicodeDecodeError) as e:
        print(f"sqldoccheck: error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.list:
        return EXIT_OK

    if settings.output_format == "json":
        print(render_json(report))
    else:
        print(render_text(report, verbose=args.verbose))
    return EXIT_OK if report.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
