"""--debug AST and Doc dumps to stderr."""

from __future__ import annotations

import sys
from dataclasses import fields
from typing import TextIO

from vxfmt.ast import Node
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
)


def dump_ast(root: Node, *, file: TextIO | None = None) -> None:
    """Print a human-readable syntax tree to *file*."""
    _dump_node(root, 0, "", file or sys.stderr)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, label: str, f: TextIO) -> None:
    scalars: list[str] = []
    children: list[tuple[str, Node]] = []
    for fld in fields(node):
        if fld.name in ("span", "comments"):
            continue
        value = getattr(node, fld.name)
        if isinstance(value, Node):
            children.append((fld.name, value))
        elif isinstance(value, tuple):
            for i, item in enumerate(value):
                if isinstance(item, Node):
                    children.append((f"{fld.name}[{i}]", item))
        elif value is not None and value is not False:
            scalars.append(f"{fld.name}={value!r}")

    start = node.span.start
    prefix = f"{label}: " if label else ""
    details = f" {' '.join(scalars)}" if scalars else ""
    f.write(f"{_indent(depth)}{prefix}{node.type}{details} @{start.line}:{start.column}\n")
    for comment in node.comments:
        role = "leading" if comment.leading else "trailing" if comment.trailing else "dangling"
        f.write(f"{_indent(depth + 1)}comment ({role}) {comment.text()!r}\n")
    for name, child in children:
        _dump_node(child, depth + 1, name, f)


def dump_doc(doc: Doc, *, file: TextIO | None = None) -> None:
    """Print the Doc tree to *file*, one command per line."""
    _dump_doc(doc, 0, file or sys.stderr)


def _dump_doc(doc: Doc, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    match doc:
        case str():
            f.write(f"{pad}{doc!r}\n")
        case Line():
            kind = "literalline" if doc.literal else "hardline" if doc.hard else "softline" if doc.soft else "line"
            f.write(f"{pad}{kind}\n")
        case Concat():
            for part in doc.parts:
                _dump_doc(part, depth, f)
        case Indent():
            f.write(f"{pad}indent\n")
            _dump_doc(doc.contents, depth + 1, f)
        case Align():
            f.write(f"{pad}align({doc.n!r})\n")
            _dump_doc(doc.contents, depth + 1, f)
        case Group():
            flag = " break" if doc.should_break else ""
            if doc.expanded_states:
                f.write(f"{pad}conditional_group{flag}\n")
                for i, state in enumerate(doc.expanded_states):
                    f.write(f"{_indent(depth + 1)}state {i}\n")
                    _dump_doc(state, depth + 2, f)
            else:
                f.write(f"{pad}group{flag}\n")
                _dump_doc(doc.contents, depth + 1, f)
        case Fill():
            f.write(f"{pad}fill\n")
            for part in doc.parts:
                _dump_doc(part, depth + 1, f)
        case IfBreak():
            f.write(f"{pad}if_break\n")
            _dump_doc(doc.break_contents, depth + 1, f)
            f.write(f"{pad}else\n")
            _dump_doc(doc.flat_contents, depth + 1, f)
        case LineSuffix():
            f.write(f"{pad}line_suffix\n")
            _dump_doc(doc.contents, depth + 1, f)
        case LineSuffixBoundary():
            f.write(f"{pad}line_suffix_boundary\n")
        case BreakParent():
            f.write(f"{pad}break_parent\n")
        case Cursor():
            f.write(f"{pad}cursor\n")
