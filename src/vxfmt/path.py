"""Ancestor-aware cursor over the syntax tree, and the per-call print context."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vxfmt.ast import Node
from vxfmt.doc import Doc
from vxfmt.options import FormatOptions

if TYPE_CHECKING:
    from vxfmt.comments import CommentContext


class AstPath:
    """The chain of nodes from the root down to the node being printed.

    ``names`` runs parallel to ``stack`` and records the field (and, for
    tuple fields, the index) each node was reached through.
    """

    def __init__(self, root: Node) -> None:
        self.stack: list[Any] = [root]
        self.names: list[tuple[str, int | None] | None] = [None]

    @property
    def node(self) -> Any:
        return self.stack[-1]

    @property
    def name(self) -> str | None:
        entry = self.names[-1]
        return entry[0] if entry else None

    @property
    def index(self) -> int | None:
        entry = self.names[-1]
        return entry[1] if entry else None

    def parent(self, level: int = 0) -> Any:
        """The ancestor *level* steps above the parent; None past the root."""
        idx = len(self.stack) - 2 - level
        return self.stack[idx] if idx >= 0 else None

    def grandparent(self) -> Any:
        return self.parent(1)

    def ancestors(self) -> Iterator[Any]:
        """Yield ancestors from the parent upwards."""
        for i in range(len(self.stack) - 2, -1, -1):
            yield self.stack[i]

    def _push(self, value: Any, name: str, index: int | None) -> None:
        self.stack.append(value)
        self.names.append((name, index))

    def _pop(self) -> None:
        self.stack.pop()
        self.names.pop()

    def call(self, fn: Callable[[AstPath], Doc], name: str, index: int | None = None) -> Doc:
        """Run *fn* with the path moved to ``node.<name>[index]``."""
        value = getattr(self.node, name)
        if index is not None:
            value = value[index]
        self._push(value, name, index)
        try:
            return fn(self)
        finally:
            self._pop()

    def map(self, fn: Callable[[AstPath], Doc], name: str) -> list[Doc]:
        """Run *fn* for every item of a tuple field, collecting results."""
        results: list[Doc] = []
        for i, value in enumerate(getattr(self.node, name)):
            self._push(value, name, i)
            try:
                results.append(fn(self))
            finally:
                self._pop()
        return results

    def descend(self, value: Node, name: str) -> _Descent:
        """Context manager moving the path to a node not held in a field."""
        return _Descent(self, value, name)

    def has_ancestor_types(self, types: tuple[type, ...]) -> bool:
        """True if the parent chain starts with exactly the given types."""
        for level, cls in enumerate(types):
            if not isinstance(self.parent(level), cls):
                return False
        return True


class _Descent:
    __slots__ = ("_path", "_value", "_name")

    def __init__(self, path: AstPath, value: Node, name: str) -> None:
        self._path = path
        self._value = value
        self._name = name

    def __enter__(self) -> AstPath:
        self._path._push(self._value, self._name, None)
        return self._path

    def __exit__(self, *exc: object) -> None:
        self._path._pop()


@dataclass(slots=True)
class PrintContext:
    """Everything one printer run needs besides the path.

    ``print`` is the recursive entry point; it accepts keyword flags such as
    ``expand_last_arg`` that a handler passes down to one child.
    ``text_to_doc`` runs the whole pipeline on an embedded payload.
    """

    options: FormatOptions
    source: str
    comments: CommentContext
    print: Callable[..., Doc] = field(repr=False)
    text_to_doc: Callable[[str, str], Doc] = field(repr=False)
    # Top-level markup of a fragment program is printed broken, unterminated
    fragment: bool = False
    # Node whose printed output is prefixed with the cursor marker
    cursor_node: Node | None = None
