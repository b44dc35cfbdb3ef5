"""
Document structure checks.

    toc-anchor          every [text](#anchor) link resolves to a heading
    heading-skip        no heading is more than one level below the previous one
    unterminated-fence  a fenced block runs to end of document

Only ATX headings (`#` … `######`) are recognised; headings and links inside
fenced blocks are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote

from .config import Settings
from .extractor import iter_blocks
from .log import get_logger

logger = get_logger(__name__)

_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_LOCAL_LINK = re.compile(r"(?<!!)\[(?:[^\]\\]|\\.)*\]\(\s*#([^)\s]*)(?:\s+\"[^\"]*\")?\s*\)")
_HTML_ANCHOR = re.compile(r"""<[a-zA-Z][^>]*\s(?:name|id)\s*=\s*["']([^"']+)["']""")
_INLINE_CODE = re.compile(r"`[^`]*`")

# inline markup removed before slugging: images/links keep their text
_MD_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_MD_EMPHASIS = re.compile(r"\*{1,3}([^*]+)\*{1,3}|(?<!\w)_{1,3}([^_]+)_{1,3}(?!\w)")
_HTML_TAG = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class LintIssue:
    source:  str
    line:    int
    rule:    str
    message: str


def slugify(heading: str) -> str:
    """GitHub-style heading anchor (without duplicate suffix)."""
    text = _MD_LINK.sub(r"\1", heading)
    text = _HTML_TAG.sub("", text)
    text = _MD_EMPHASIS.sub(lambda m: m.group(1) or m.group(2), text)
    text = text.replace("`", "").strip().lower()
    text = re.sub(r"[^\w\- ]", "", text)
    return text.replace(" ", "-")


class _SlugCounter:
    """Adds -1, -2 … to repeated slugs the way GitHub does."""

    def __init__(self):
        self.seen: dict[str, int] = {}

    def add(self, slug: str) -> str:
        if slug not in self.seen:
            self.seen[slug] = 0
            return slug
        self.seen[slug] += 1
        return f"{slug}-{self.seen[slug]}"


def lint_document(text: str, source: str = "<string>",
                  settings: Settings | None = None) -> list[LintIssue]:
    settings = settings or Settings()
    issues: list[LintIssue] = []

    fenced: set[int] = set()
    for block in iter_blocks(text, source, settings.skip_marker):
        fenced.update(range(block.fence_line, block.end_line + 1))
        if settings.lint_fences and block.unterminated:
            issues.append(LintIssue(source, block.fence_line, "unterminated-fence",
                                    "code fence is never closed"))

    anchors: set[str] = set()
    slugs = _SlugCounter()
    links: list[tuple[int, str]] = []
    prev_level = 0

    for lineno, line in enumerate(text.splitlines(), start=1):
        if lineno in fenced:
            continue
        m = _HEADING.match(line)
        if m:
            level = len(m.group(1))
            title = m.group(2) or ""
            anchors.add(slugs.add(slugify(title)))
            if settings.lint_headings and prev_level and level > prev_level + 1:
                issues.append(LintIssue(source, lineno, "heading-skip",
                                        f"heading level skipped: h{prev_level} -> h{level}"))
            prev_level = level
        anchors.update(a.lower() for a in _HTML_ANCHOR.findall(line))
        for target in _LOCAL_LINK.findall(_INLINE_CODE.sub("", line)):
            links.append((lineno, target))

    if settings.lint_anchors:
        for lineno, target in links:
            anchor = unquote(target).lower()
            if anchor and anchor not in anchors:
                issues.append(LintIssue(source, lineno, "toc-anchor",
                                        f"link target '#{target}' matches no heading"))

    issues.sort(key=lambda i: i.line)
    logger.debug("%s: %d heading anchor(s), %d local link(s), %d issue(s)",
                 source, len(anchors), len(links), len(issues))
    return issues
