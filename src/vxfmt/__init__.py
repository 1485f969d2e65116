"""VisionX source formatter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__version__ = "0.1.0"


@dataclass(frozen=True, slots=True)
class CursorResult:
    """Formatted text and the cursor offset translated into it."""

    formatted: str
    cursor_offset: int


def format(source: str, **options: Any) -> str:
    """Format *source* and return the canonical text.

    Options are keyword arguments such as ``print_width=100`` or
    ``single_quote=True``; unknown names raise OptionValidationError.
    """
    from vxfmt.core import format_text
    from vxfmt.options import resolve_options

    text, _ = format_text(source, resolve_options(options))
    return text


def format_fragment(source: str, **options: Any) -> str:
    """Format markup-only input, such as the body of a ``.vx`` view.

    The input is wrapped in a fragment to make it parsable and the wrapper
    is stripped from the result.
    """
    from vxfmt.core import format_text
    from vxfmt.normalize import unwrap_fragment, wrap_fragment
    from vxfmt.options import resolve_options

    text, _ = format_text(wrap_fragment(source), resolve_options(options), fragment=True)
    return unwrap_fragment(text)


def format_with_cursor(source: str, cursor_offset: int, **options: Any) -> CursorResult:
    """Format *source* and report where *cursor_offset* ended up."""
    from vxfmt.core import format_text
    from vxfmt.options import resolve_options

    text, cursor = format_text(source, resolve_options(options), cursor_offset=cursor_offset)
    return CursorResult(text, cursor if cursor is not None else 0)
