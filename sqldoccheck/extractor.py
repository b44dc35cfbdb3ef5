"""
Fenced code block extraction from markdown.

Fence rules follow CommonMark: an opening fence is up to three spaces of
indentation followed by at least three backticks or tildes; the closing
fence uses the same character, is at least as long, and carries no info
string.  A fence that is never closed runs to the end of the document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .log import get_logger

logger = get_logger(__name__)

_OPEN_FENCE  = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_CLOSE_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$")
_SKIP_COMMENT = re.compile(r"^\s*<!--\s*sqldoccheck:\s*skip\s*-->\s*$", re.IGNORECASE)
_INFO_SPLIT = re.compile(r"[\s,{}]+")


@dataclass(frozen=True)
class Example:
    """One fenced code block.  Line numbers are 1-based document lines."""
    source:       str
    line:         int         # first content line
    fence_line:   int         # opening fence
    end_line:     int         # closing fence, or last line when unterminated
    lang:         str
    info:         str
    text:         str
    indent:       int = 0     # fence indentation
    line_indents: tuple[int, ...] = ()   # columns actually stripped, per content line
    skip:         bool = False
    unterminated: bool = False


def _info_words(info: str) -> list[str]:
    """`sql nocheck`, `{.sql .nocheck}`, `sql,nocheck` → ['sql', 'nocheck']"""
    return [w.lstrip(".").lower() for w in _INFO_SPLIT.split(info) if w.lstrip(".")]


def _strip_indent(line: str, indent: int) -> str:
    n = 0
    while n < indent and n < len(line) and line[n] == " ":
        n += 1
    return line[n:]


def iter_blocks(text: str, source: str = "<string>", skip_marker: str = "nocheck") -> Iterator[Example]:
    """Yield every fenced code block in document order, whatever its language."""
    lines = text.splitlines()
    prev_nonblank: str | None = None
    i = 0
    while i < len(lines):
        m = _OPEN_FENCE.match(lines[i])
        # backtick fences may not carry a backtick in their info string
        if m is None or (m.group(2)[0] == "`" and "`" in m.group(3)):
            if lines[i].strip():
                prev_nonblank = lines[i]
            i += 1
            continue

        indent, fence, info = len(m.group(1)), m.group(2), m.group(3).strip()
        fence_line = i + 1
        body: list[str] = []
        stripped: list[int] = []
        closed = False
        i += 1
        while i < len(lines):
            close = _CLOSE_FENCE.match(lines[i])
            if close and close.group(1)[0] == fence[0] and len(close.group(1)) >= len(fence):
                closed = True
                break
            content = _strip_indent(lines[i], indent)
            body.append(content)
            stripped.append(len(lines[i]) - len(content))
            i += 1
        end_line = i + 1 if closed else len(lines)
        i += 1

        words = _info_words(info)
        lang = words[0] if words else ""
        skip = skip_marker in words[1:] or bool(
            prev_nonblank is not None and _SKIP_COMMENT.match(prev_nonblank))
        prev_nonblank = None

        yield Example(
            source=source,
            line=fence_line + 1,
            fence_line=fence_line,
            end_line=end_line,
            lang=lang,
            info=info,
            text="\n".join(body),
            indent=indent,
            line_indents=tuple(stripped),
            skip=skip,
            unterminated=not closed,
        )


def iter_examples(
    text: str,
    source: str = "<string>",
    languages: Iterable[str] = ("sql",),
    skip_marker: str = "nocheck",
) -> Iterator[Example]:
    """Yield the fenced blocks tagged with one of `languages`, lazily."""
    wanted = {lang.lower() for lang in languages}
    for block in iter_blocks(text, source, skip_marker):
        if block.lang in wanted:
            logger.debug("%s:%d: found %s example", source, block.line, block.lang)
            yield block


def extract_file(
    path: str | Path,
    languages: Iterable[str] = ("sql",),
    skip_marker: str = "nocheck",
) -> Iterator[Example]:
    """Read a markdown file and yield its SQL examples."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    yield from iter_examples(text, str(path), languages, skip_marker)


def discover(paths: Iterable[str | Path]) -> list[Path]:
    """Expand directories to their markdown files (sorted, recursive).

    Raises FileNotFoundError for a path that does not exist.
    """
    out: list[Path] = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            found = sorted(f for f in path.rglob("*.md") if f.is_file())
            logger.info("%s: %d markdown file(s)", path, len(found))
            out.extend(found)
        elif path.is_file():
            out.append(path)
        else:
            raise FileNotFoundError(f"no such file or directory: '{path}'")
    return out
