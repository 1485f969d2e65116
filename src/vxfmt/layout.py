"""Layout engine: resolves a Doc into text under a width budget."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum, auto

from vxfmt.doc import (
    Align,
    BreakParent,
    Concat,
    Cursor,
    Doc,
    Fill,
    Group,
    IfBreak,
    Indent,
    Line,
    LineSuffix,
    LineSuffixBoundary,
    propagate_breaks,
)


class Mode(Enum):
    BREAK = auto()
    FLAT = auto()


@dataclass(frozen=True, slots=True)
class _Indentation:
    value: str = ""
    length: int = 0
    queue: tuple[int | str | None, ...] = ()  # None is one indent unit


@dataclass(frozen=True, slots=True)
class _FillRest:
    """The unprinted tail of a Fill, starting at ``start``."""

    parts: list[Doc]
    start: int


_Command = tuple[_Indentation, Mode, "Doc | _FillRest"]

_HARD_LINE = Line(hard=True)
_CURSOR_MARK = object()


def string_width(text: str, tab_width: int = 2) -> int:
    """Display width: wide East Asian characters count two columns, tabs *tab_width*."""
    if text.isascii():
        return len(text) + text.count("\t") * (tab_width - 1)
    width = 0
    for ch in text:
        if ch == "\t":
            width += tab_width
            continue
        if unicodedata.combining(ch):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


class _Indenter:
    def __init__(self, tab_width: int, use_tabs: bool) -> None:
        self._tab_width = tab_width
        self._use_tabs = use_tabs

    @property
    def tab_width(self) -> int:
        return self._tab_width

    def indent(self, ind: _Indentation) -> _Indentation:
        return self._make(ind.queue + (None,))

    def align(self, ind: _Indentation, n: int | str) -> _Indentation:
        if isinstance(n, int):
            if n == 0:
                return ind
            if n < 0:
                return self._make(ind.queue[:-1])
        return self._make(ind.queue + (n,))

    def _make(self, queue: tuple[int | str | None, ...]) -> _Indentation:
        value = ""
        length = 0
        pending_tabs = 0
        pending_spaces = 0

        def flush() -> tuple[str, int]:
            if self._use_tabs and pending_tabs:
                return "\t" * pending_tabs, self._tab_width * pending_tabs
            return " " * pending_spaces, pending_spaces

        for part in queue:
            if part is None:
                text, width = flush()
                pending_tabs = pending_spaces = 0
                if self._use_tabs:
                    value += text + "\t"
                    length += width + self._tab_width
                else:
                    value += text + " " * self._tab_width
                    length += width + self._tab_width
            elif isinstance(part, str):
                text, width = flush()
                pending_tabs = pending_spaces = 0
                value += text + part
                length += width + len(part)
            else:
                pending_tabs += 1
                pending_spaces += part
        # Trailing alignment is always spaces so columns line up.
        value += " " * pending_spaces
        length += pending_spaces
        return _Indentation(value, length, queue)


def _trim(out: list) -> int:
    """Strip trailing spaces and tabs from the output buffer."""
    trimmed = 0
    while out:
        last = out[-1]
        if not isinstance(last, str):
            break
        stripped = last.rstrip(" \t")
        trimmed += len(last) - len(stripped)
        if stripped:
            out[-1] = stripped
            break
        out.pop()
    return trimmed


def _fits(
    next_cmd: _Command,
    rest: list[_Command],
    width: int,
    indenter: _Indenter,
    has_line_suffix: bool,
    must_be_flat: bool = False,
) -> bool:
    """Simulate flat output of *next_cmd* followed by what comes after it."""
    rest_idx = len(rest)
    cmds = [next_cmd]
    while width >= 0:
        if not cmds:
            if rest_idx == 0:
                return True
            rest_idx -= 1
            cmds.append(rest[rest_idx])
            continue
        ind, mode, doc = cmds.pop()
        if isinstance(doc, str):
            newline = doc.find("\n")
            if newline >= 0:
                return width - string_width(doc[:newline], indenter.tab_width) >= 0
            width -= string_width(doc, indenter.tab_width)
        elif isinstance(doc, _FillRest):
            for part in reversed(doc.parts[doc.start :]):
                cmds.append((ind, mode, part))
        elif isinstance(doc, (Concat, Fill)):
            for part in reversed(doc.parts):
                cmds.append((ind, mode, part))
        elif isinstance(doc, Indent):
            cmds.append((indenter.indent(ind), mode, doc.contents))
        elif isinstance(doc, Align):
            cmds.append((indenter.align(ind, doc.n), mode, doc.contents))
        elif isinstance(doc, Group):
            if must_be_flat and doc.should_break:
                return False
            group_mode = Mode.BREAK if doc.should_break else mode
            contents = doc.contents
            if doc.expanded_states and group_mode is Mode.BREAK:
                contents = doc.expanded_states[-1]
            cmds.append((ind, group_mode, contents))
        elif isinstance(doc, IfBreak):
            contents = doc.break_contents if mode is Mode.BREAK else doc.flat_contents
            if contents:
                cmds.append((ind, mode, contents))
        elif isinstance(doc, Line):
            if mode is Mode.BREAK or doc.hard:
                return True
            if not doc.soft:
                width -= 1
        elif isinstance(doc, LineSuffix):
            has_line_suffix = True
        elif isinstance(doc, LineSuffixBoundary):
            if has_line_suffix:
                return True
    return False


def _print(doc: Doc, max_width: int, tab_width: int, use_tabs: bool) -> list:
    propagate_breaks(doc)
    indenter = _Indenter(tab_width, use_tabs)
    pos = 0
    cmds: list[_Command] = [(_Indentation(), Mode.BREAK, doc)]
    out: list = []
    should_remeasure = False
    line_suffix: list[_Command] = []

    while cmds:
        ind, mode, d = cmds.pop()

        if isinstance(d, str):
            out.append(d)
            newline = d.rfind("\n")
            if newline >= 0:
                pos = string_width(d[newline + 1 :], tab_width)
            else:
                pos += string_width(d, tab_width)
        elif isinstance(d, Cursor):
            out.append(_CURSOR_MARK)
        elif isinstance(d, Concat):
            for part in reversed(d.parts):
                cmds.append((ind, mode, part))
        elif isinstance(d, Indent):
            cmds.append((indenter.indent(ind), mode, d.contents))
        elif isinstance(d, Align):
            cmds.append((indenter.align(ind, d.n), mode, d.contents))
        elif isinstance(d, Group):
            if mode is Mode.FLAT and not should_remeasure:
                cmds.append((ind, Mode.BREAK if d.should_break else Mode.FLAT, d.contents))
            else:
                should_remeasure = False
                flat_cmd = (ind, Mode.FLAT, d.contents)
                remaining = max_width - pos
                has_suffix = bool(line_suffix)
                if not d.should_break and _fits(flat_cmd, cmds, remaining, indenter, has_suffix):
                    cmds.append(flat_cmd)
                elif d.expanded_states:
                    most_expanded = d.expanded_states[-1]
                    if d.should_break:
                        cmds.append((ind, Mode.BREAK, most_expanded))
                    else:
                        for state in d.expanded_states[1:]:
                            cmd = (ind, Mode.FLAT, state)
                            if _fits(cmd, cmds, remaining, indenter, has_suffix):
                                cmds.append(cmd)
                                break
                        else:
                            cmds.append((ind, Mode.BREAK, most_expanded))
                else:
                    cmds.append((ind, Mode.BREAK, d.contents))
        elif isinstance(d, (Fill, _FillRest)):
            parts = d.parts
            start = d.start if isinstance(d, _FillRest) else 0
            _fill_step(ind, mode, parts, start, max_width - pos, indenter, cmds)
        elif isinstance(d, IfBreak):
            contents = d.break_contents if mode is Mode.BREAK else d.flat_contents
            if contents:
                cmds.append((ind, mode, contents))
        elif isinstance(d, LineSuffix):
            line_suffix.append((ind, mode, d.contents))
        elif isinstance(d, LineSuffixBoundary):
            if line_suffix:
                cmds.append((ind, mode, _HARD_LINE))
        elif isinstance(d, Line):
            if mode is Mode.FLAT and not d.hard:
                if not d.soft:
                    out.append(" ")
                    pos += 1
            else:
                if mode is Mode.FLAT:
                    should_remeasure = True
                if line_suffix:
                    cmds.append((ind, mode, d))
                    cmds.extend(reversed(line_suffix))
                    line_suffix = []
                elif d.literal:
                    out.append("\n")
                    pos = 0
                else:
                    _trim(out)
                    out.append("\n" + ind.value)
                    pos = ind.length
        elif isinstance(d, BreakParent):
            pass

        if not cmds and line_suffix:
            cmds.extend(reversed(line_suffix))
            line_suffix = []

    return out


def _fill_step(
    ind: _Indentation,
    mode: Mode,
    parts: list[Doc],
    start: int,
    remaining: int,
    indenter: _Indenter,
    cmds: list[_Command],
) -> None:
    """Lay out one content/separator pair of a fill."""
    count = len(parts) - start
    if count <= 0:
        return
    content = parts[start]
    content_flat = (ind, Mode.FLAT, content)
    content_break = (ind, Mode.BREAK, content)
    content_fits = _fits(content_flat, [], remaining, indenter, False, True)
    if count == 1:
        cmds.append(content_flat if content_fits else content_break)
        return

    separator = parts[start + 1]
    separator_flat = (ind, Mode.FLAT, separator)
    separator_break = (ind, Mode.BREAK, separator)
    if count == 2:
        if content_fits:
            cmds.extend([separator_flat, content_flat])
        else:
            cmds.extend([separator_break, content_break])
        return

    rest = (ind, mode, _FillRest(parts, start + 2))
    pair = (ind, Mode.FLAT, Concat([content, separator, parts[start + 2]]))
    if _fits(pair, [], remaining, indenter, False, True):
        cmds.extend([rest, separator_flat, content_flat])
    elif content_fits:
        cmds.extend([rest, separator_break, content_flat])
    else:
        cmds.extend([rest, separator_break, content_break])


def render(doc: Doc, max_width: int = 80, tab_width: int = 2, use_tabs: bool = False) -> str:
    """Render *doc* to text, breaking groups that do not fit *max_width*."""
    out = _print(doc, max_width, tab_width, use_tabs)
    return "".join(part for part in out if isinstance(part, str))


def render_with_cursor(
    doc: Doc, max_width: int = 80, tab_width: int = 2, use_tabs: bool = False
) -> tuple[str, int | None]:
    """Render *doc* and return the output offset of its Cursor marker, if any."""
    out = _print(doc, max_width, tab_width, use_tabs)
    text: list[str] = []
    offset = 0
    cursor: int | None = None
    for part in out:
        if part is _CURSOR_MARK:
            if cursor is None:
                cursor = offset
            continue
        text.append(part)
        offset += len(part)
    return "".join(text), cursor
