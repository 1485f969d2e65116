"""Document model: layout intents built bottom-up by the printer.

A Doc is a plain ``str`` (a text leaf) or one of the container and marker
classes below. Containers compute once, at construction, whether they hold a
forced break; ``will_break`` reads that flag without walking the tree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Union

# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Line:
    """Space (or nothing, when soft) in flat mode, newline in break mode.

    Hard lines always break; literal lines break without re-indenting.
    """

    soft: bool = False
    hard: bool = False
    literal: bool = False


@dataclass(frozen=True, slots=True)
class BreakParent:
    """Forces every enclosing group into break mode."""


@dataclass(frozen=True, slots=True)
class LineSuffixBoundary:
    """Flushes pending line suffixes with a newline if any are buffered."""


@dataclass(frozen=True, slots=True)
class Cursor:
    """Marks the output position the caller wants translated."""


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(eq=False, slots=True)
class Concat:
    parts: list[Doc]
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.parts = [p for p in self.parts if not is_empty(p)]
        self.hard = any(will_break(p) for p in self.parts)


@dataclass(eq=False, slots=True)
class Indent:
    contents: Doc
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = will_break(self.contents)


@dataclass(eq=False, slots=True)
class Align:
    """Indent by a column count, a literal string, or dedent when negative."""

    n: int | str
    contents: Doc
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = will_break(self.contents)


@dataclass(eq=False, slots=True)
class Group:
    """One atomic break decision.

    ``expanded_states`` lists alternatives from flattest to most expanded;
    the layout engine takes the first one that fits.
    """

    contents: Doc
    should_break: bool = False
    expanded_states: list[Doc] | None = None
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = will_break(self.contents)


@dataclass(eq=False, slots=True)
class Fill:
    """Alternating content/separator parts packed greedily per line."""

    parts: list[Doc]
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = any(will_break(p) for p in self.parts)


@dataclass(eq=False, slots=True)
class IfBreak:
    break_contents: Doc
    flat_contents: Doc = ""
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = will_break(self.break_contents) or will_break(self.flat_contents)


@dataclass(eq=False, slots=True)
class LineSuffix:
    """Content deferred until just before the next newline."""

    contents: Doc
    hard: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.hard = will_break(self.contents)


Doc = Union[
    str,
    Concat,
    Indent,
    Align,
    Group,
    Line,
    Fill,
    IfBreak,
    LineSuffix,
    LineSuffixBoundary,
    BreakParent,
    Cursor,
]

# ---------------------------------------------------------------------------
# Break detection
# ---------------------------------------------------------------------------


def is_empty(doc: Doc) -> bool:
    return doc == "" if isinstance(doc, str) else isinstance(doc, Concat) and not doc.parts


def will_break(doc: Doc) -> bool:
    """True if *doc* holds a hard line, a break parent or a broken group."""
    if isinstance(doc, str):
        return False
    if isinstance(doc, Group):
        return doc.should_break or doc.hard
    if isinstance(doc, Line):
        return doc.hard
    if isinstance(doc, BreakParent):
        return True
    return getattr(doc, "hard", False)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

LINE = Line()
SOFTLINE = Line(soft=True)
BREAK_PARENT = BreakParent()
HARDLINE = Concat([Line(hard=True), BREAK_PARENT])
LITERALLINE = Concat([Line(hard=True, literal=True), BREAK_PARENT])
LINE_SUFFIX_BOUNDARY = LineSuffixBoundary()
CURSOR = Cursor()


def concat(parts: Iterable[Doc]) -> Concat:
    return Concat(list(parts))


def join(sep: Doc, docs: Iterable[Doc]) -> Concat:
    parts: list[Doc] = []
    for i, d in enumerate(docs):
        if i:
            parts.append(sep)
        parts.append(d)
    return Concat(parts)


def group(contents: Doc, *, should_break: bool = False) -> Group:
    return Group(contents, should_break)


def conditional_group(states: Sequence[Doc], *, should_break: bool = False) -> Group:
    return Group(states[0], should_break, list(states))


def fill(parts: Iterable[Doc]) -> Fill:
    return Fill(list(parts))


def if_break(break_contents: Doc, flat_contents: Doc = "") -> IfBreak:
    return IfBreak(break_contents, flat_contents)


def indent(contents: Doc) -> Indent:
    return Indent(contents)


def align(n: int | str, contents: Doc) -> Align:
    return Align(n, contents)


def dedent(contents: Doc) -> Align:
    return Align(-1, contents)


def line_suffix(contents: Doc) -> LineSuffix:
    return LineSuffix(contents)


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------


def _children(doc: Doc) -> list[Doc]:
    if isinstance(doc, (Concat, Fill)):
        return doc.parts
    if isinstance(doc, (Indent, Align, LineSuffix)):
        return [doc.contents]
    if isinstance(doc, Group):
        return list(doc.expanded_states) if doc.expanded_states else [doc.contents]
    if isinstance(doc, IfBreak):
        return [doc.break_contents, doc.flat_contents]
    return []


def _break_innermost(group_stack: list[Group]) -> None:
    # Groups with alternatives decide their own breaking.
    if group_stack and not group_stack[-1].expanded_states:
        group_stack[-1].should_break = True


def propagate_breaks(doc: Doc) -> None:
    """Mark every group that contains a break parent as broken."""
    visited: set[int] = set()
    group_stack: list[Group] = []
    stack: list[tuple[Doc, bool]] = [(doc, False)]
    while stack:
        d, leaving = stack.pop()
        if leaving:
            closed = group_stack.pop()
            if closed.should_break:
                _break_innermost(group_stack)
            continue
        if isinstance(d, BreakParent):
            _break_innermost(group_stack)
            continue
        if isinstance(d, Group):
            group_stack.append(d)
            stack.append((d, True))
            if id(d) in visited:
                continue
            visited.add(id(d))
        for child in reversed(_children(d)):
            stack.append((child, False))


def is_line_next(doc: Doc) -> bool:
    """True if the first leaf reached in *doc* is a line break."""
    stack = [doc]
    while stack:
        d = stack.pop()
        if isinstance(d, str):
            if d:
                return False
            continue
        if isinstance(d, Line):
            return True
        stack.extend(reversed(_children(d)))
    return False


def _rebuild(doc: Doc, kids: list[Doc]) -> Doc:
    if isinstance(doc, Concat):
        return Concat(kids)
    if isinstance(doc, Fill):
        return Fill(kids)
    if isinstance(doc, Indent):
        return Indent(kids[0])
    if isinstance(doc, Align):
        return Align(doc.n, kids[0])
    if isinstance(doc, LineSuffix):
        return LineSuffix(kids[0])
    if isinstance(doc, IfBreak):
        return IfBreak(kids[0], kids[1])
    if isinstance(doc, Group):
        if doc.expanded_states:
            return Group(kids[0], doc.should_break, kids)
        return Group(kids[0], doc.should_break)
    return doc


def map_doc(doc: Doc, fn: Callable[[Doc], Doc]) -> Doc:
    """Rebuild *doc* bottom-up, passing every rebuilt node through *fn*."""
    done: dict[int, Doc] = {}
    stack: list[tuple[Doc, bool]] = [(doc, False)]
    while stack:
        d, ready = stack.pop()
        if id(d) in done:
            continue
        kids = _children(d)
        if kids and not ready:
            stack.append((d, True))
            stack.extend((k, False) for k in kids)
            continue
        done[id(d)] = fn(_rebuild(d, [done[id(k)] for k in kids]))
    return done[id(doc)]


def remove_lines(doc: Doc) -> Doc:
    """Flatten soft and normal lines to their flat rendering."""

    def _flat(d: Doc) -> Doc:
        if isinstance(d, Line) and not d.hard:
            return "" if d.soft else " "
        if isinstance(d, IfBreak):
            return d.flat_contents
        return d

    return map_doc(doc, _flat)


def strip_trailing_hardline(doc: Doc) -> Doc:
    """Drop a hard line that ends *doc*, looking into trailing concats."""
    if isinstance(doc, Concat) and doc.parts:
        last = doc.parts[-1]
        if isinstance(last, Concat):
            if (
                len(last.parts) == 2
                and isinstance(last.parts[0], Line)
                and last.parts[0].hard
                and isinstance(last.parts[1], BreakParent)
            ):
                return Concat(doc.parts[:-1])
            return Concat(doc.parts[:-1] + [strip_trailing_hardline(last)])
    return doc
