"""Undo the synthetic wrapper that makes fragment input parsable."""

from __future__ import annotations

import re

FRAGMENT_OPEN = "<>\n"
FRAGMENT_CLOSE = "\n</>"

_LEADING_INDENT_RE = re.compile(r"^[ \t]*")
# An HTML comment followed by more content on the same line
_COMMENT_BEFORE_RE = re.compile(r"<!--.*?-->(?!$)")


def wrap_fragment(source: str) -> str:
    return FRAGMENT_OPEN + source + FRAGMENT_CLOSE


def unwrap_fragment(formatted: str) -> str:
    """Strip the wrapper lines and the indentation the wrapper added.

    The formatted wrapper always prints broken: its opening tag on the
    first line, its closing tag on the last line followed by a newline.
    """
    lines = formatted.split("\n")[1:-2]
    if not lines or not lines[0]:
        return "\n"

    eat = len(_LEADING_INDENT_RE.match(lines[0]).group(0))
    if eat == 0:
        return "\n".join(lines) + "\n"

    result = []
    for line in lines:
        line = line[eat:]
        fill = "\n" + _LEADING_INDENT_RE.match(line).group(0)
        result.append(_COMMENT_BEFORE_RE.sub(lambda m: m.group(0) + fill, line))
    return "\n".join(result) + "\n"
