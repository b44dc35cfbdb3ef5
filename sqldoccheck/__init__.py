"""
sqldoccheck: validate the SQL examples in markdown documentation.

    Markdown → Extractor → Lexer → Parser → Checker → Reporter
"""

__version__ = "0.1.0"

from .checker import CheckResult, Status, SyntaxIssue, check_document, check_example
from .config import Settings
from .doclint import LintIssue, lint_document, slugify
from .errors import LexError, ParseError, SqlDocCheckError, SqlSyntaxError
from .extractor import Example, discover, extract_file, iter_blocks, iter_examples
from .parser import parse, parse_script
from .reporter import Report, render_json, render_text

__all__ = [
    "CheckResult", "Status", "SyntaxIssue", "check_document", "check_example",
    "Settings",
    "LintIssue", "lint_document", "slugify",
    "LexError", "ParseError", "SqlDocCheckError", "SqlSyntaxError",
    "Example", "discover", "extract_file", "iter_blocks", "iter_examples",
    "parse", "parse_script",
    "Report", "render_json", "render_text",
]
