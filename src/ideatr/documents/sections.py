"""Section-scoped edits of a document body.

A section starts at a ``## <label>`` heading and runs until the next
``## `` heading. Without a following heading, the first blank line that is
not followed by list-like content (``-``, ``*``, ``|``) closes it, which
approximates "end of this block of prose"; otherwise it runs to the end of
the body.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_NEXT_HEADING_RE = re.compile(r"^##[ \t]+", re.MULTILINE)
_LIST_LINE_RE = re.compile(r"[ \t]*[-*|]")
_BLANK_RE = re.compile(r"[ \t]*")
_LEADING_BLANKS_RE = re.compile(r"\A(?:[ \t]*\n)+")
_WS = r"[ \t]+"


class MergeMode(str, enum.Enum):
    REPLACE = "replace"
    APPEND_AFTER = "appendAfter"
    APPEND_AT_END = "appendAtEnd"


@dataclass(frozen=True)
class Span:
    start: int
    end: int


def _heading_pattern(label: str) -> re.Pattern[str]:
    words = [re.escape(word) for word in label.split()]
    pattern = "^##" + _WS + _WS.join(words) + r"[ \t]*$"
    return re.compile(pattern, re.IGNORECASE | re.MULTILINE)


def _prose_end(body: str, offset: int) -> int | None:
    """Offset of the blank line that ends the prose starting after ``offset``."""
    lines = body[offset:].split("\n")
    # lines[0] is the remainder of the heading line
    position = offset + len(lines[0])
    seen_content = False
    for index in range(1, len(lines)):
        line = lines[index]
        if _BLANK_RE.fullmatch(line):
            if seen_content:
                following = next((l for l in lines[index + 1:] if not _BLANK_RE.fullmatch(l)), None)
                if following is not None and not _LIST_LINE_RE.match(following):
                    return position
        else:
            seen_content = True
        position += 1 + len(line)
    return None


def locate(body: str, label: str) -> Span | None:
    """Find the span of the ``## label`` section, heading included."""
    if not label.strip():
        return None
    heading = _heading_pattern(label).search(body)
    if not heading:
        return None

    start = heading.start()
    heading_end = heading.end()

    next_heading = _NEXT_HEADING_RE.search(body, heading_end)
    if next_heading:
        return Span(start, next_heading.start())

    prose_end = _prose_end(body, heading_end)
    if prose_end is not None:
        return Span(start, prose_end)

    return Span(start, len(body))


def _join(*parts: str, trailing_newline: bool = False) -> str:
    """Join non-empty parts with exactly one blank line between them."""
    head, *rest = parts
    pieces = [head.rstrip()] + [_LEADING_BLANKS_RE.sub("", part).rstrip() for part in rest]
    pieces = [piece for piece in pieces if piece]
    text = "\n\n".join(pieces)
    if trailing_newline and text:
        text += "\n"
    return text


def _has_own_heading(content: str) -> bool:
    return bool(_NEXT_HEADING_RE.match(content.lstrip()))


def merge(body: str, label: str, content: str, mode: MergeMode | str = MergeMode.REPLACE) -> str:
    """Return ``body`` with ``content`` merged at the ``label`` section.

    ``REPLACE`` swaps the section for ``content``; when ``content`` has no
    ``##`` heading of its own the existing heading line is kept.
    ``APPEND_AFTER`` inserts after the section. Both fall back to
    ``APPEND_AT_END`` when the section does not exist.
    """
    mode = MergeMode(mode)
    trailing = body.endswith("\n")
    span = locate(body, label) if mode is not MergeMode.APPEND_AT_END else None

    if span is None:
        if mode is not MergeMode.APPEND_AT_END:
            logger.debug("Section '%s' not found, appending at end", label)
        return _join(body, content, trailing_newline=trailing)

    before = body[: span.start]
    after = body[span.end:]

    if mode is MergeMode.REPLACE:
        if not _has_own_heading(content):
            heading_line = body[span.start:].split("\n", 1)[0]
            content = f"{heading_line.rstrip()}\n\n{_LEADING_BLANKS_RE.sub('', content)}"
        return _join(before, content, after, trailing_newline=trailing)

    section = body[span.start: span.end]
    return _join(before, section, content, after, trailing_newline=trailing)
