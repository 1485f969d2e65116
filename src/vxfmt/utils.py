"""Source-text scanning helpers and literal normalization shared by the printers."""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Skipping
# ---------------------------------------------------------------------------

_SPACES = " \t"
_WHITESPACE = " \t\r\n"
_NEWLINES = "\n\r\u2028\u2029"


def _skip_chars(text: str, index: int | None, chars: str, backwards: bool = False) -> int | None:
    """Move *index* past every character in *chars*; None past either end."""
    if index is None:
        return None
    step = -1 if backwards else 1
    i = index
    while 0 <= i < len(text):
        if text[i] not in chars:
            return i
        i += step
    # Ran off the start or end of the text
    if i == -1 or i == len(text):
        return i
    return None


def skip_spaces(text: str, index: int | None, backwards: bool = False) -> int | None:
    return _skip_chars(text, index, _SPACES, backwards)


def skip_whitespace(text: str, index: int | None, backwards: bool = False) -> int | None:
    return _skip_chars(text, index, _WHITESPACE, backwards)


def skip_to_line_end(text: str, index: int | None, backwards: bool = False) -> int | None:
    return _skip_chars(text, index, ",; \t", backwards)


def skip_inline_comment(text: str, index: int | None) -> int | None:
    """Skip a block comment that starts at *index*."""
    if index is None:
        return None
    if text.startswith("/*", index):
        end = text.find("*/", index + 2)
        if end >= 0:
            return end + 2
    return index


def skip_trailing_comment(text: str, index: int | None) -> int | None:
    """Skip a line comment starting at *index* up to (not past) the newline."""
    if index is None:
        return None
    if text.startswith("//", index):
        i = index
        while i < len(text) and text[i] not in _NEWLINES:
            i += 1
        return i
    return index


def skip_newline(text: str, index: int | None, backwards: bool = False) -> int | None:
    """Skip exactly one line terminator at *index*, if present."""
    if index is None:
        return None
    if backwards:
        if text[index - 1 : index + 1] == "\r\n":
            return index - 2
        if 0 <= index < len(text) and text[index] in _NEWLINES:
            return index - 1
        return index
    if text.startswith("\r\n", index):
        return index + 2
    if index < len(text) and text[index] in _NEWLINES:
        return index + 1
    return index


# ---------------------------------------------------------------------------
# Newline lookups
# ---------------------------------------------------------------------------


def has_newline(text: str, index: int, backwards: bool = False) -> bool:
    """True if only spaces separate *index* from a line terminator.

    Backwards, *index* is treated as the start of a span and the search looks
    at the characters before it.
    """
    start = index - 1 if backwards else index
    idx = skip_spaces(text, start, backwards)
    idx2 = skip_newline(text, idx, backwards)
    return idx != idx2


def has_newline_in_range(text: str, start: int, end: int) -> bool:
    return any(ch == "\n" for ch in text[start:end])


def is_previous_line_empty(text: str, start: int) -> bool:
    idx: int | None = start - 1
    idx = skip_spaces(text, idx, backwards=True)
    idx = skip_newline(text, idx, backwards=True)
    idx = skip_spaces(text, idx, backwards=True)
    idx2 = skip_newline(text, idx, backwards=True)
    return idx != idx2


def is_next_line_empty_after_index(text: str, index: int) -> bool:
    """True if the line after the one holding *index* is blank."""
    old_idx: int | None = None
    idx: int | None = index
    while idx != old_idx:
        # Trailing commas, semicolons and inline comments do not count
        old_idx = idx
        idx = skip_to_line_end(text, idx)
        idx = skip_inline_comment(text, idx)
        idx = skip_spaces(text, idx)
    idx = skip_trailing_comment(text, idx)
    idx = skip_newline(text, idx)
    return idx is not None and has_newline(text, idx)


def is_next_line_empty(text: str, end: int) -> bool:
    """True if a blank line follows the line on which a node ending at *end* ends."""
    return is_next_line_empty_after_index(text, end)


def next_non_space_non_comment_index(text: str, index: int) -> int | None:
    old_idx: int | None = None
    idx: int | None = index
    while idx != old_idx:
        old_idx = idx
        idx = skip_spaces(text, idx)
        idx = skip_inline_comment(text, idx)
        idx = skip_trailing_comment(text, idx)
        idx = skip_newline(text, idx)
    return idx


def next_non_space_non_comment_char(text: str, index: int) -> str:
    idx = next_non_space_non_comment_index(text, index)
    if idx is None or idx >= len(text):
        return ""
    return text[idx]


def get_indent_size(value: str, tab_width: int) -> int:
    """Visual width of the indentation of the last line in *value*."""
    last_newline = value.rfind("\n")
    if last_newline == -1:
        return 0
    line = value[last_newline + 1 :]
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += tab_width
        else:
            break
    return width


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


def preferred_quote(raw_content: str, prefer_single: bool) -> str:
    """Pick the quote that needs fewer escapes, falling back to the preference."""
    double, single = '"', "'"
    preferred, alternate = (single, double) if prefer_single else (double, single)
    if preferred in raw_content and raw_content.count(preferred) > raw_content.count(alternate):
        return alternate
    return preferred


_ESCAPED_OR_QUOTE = re.compile(r"""\\(.)|(["'])""", re.DOTALL)
_UNNECESSARY_ESCAPE = re.compile(r"^[^\\nrvtbfux\r\n\u2028\u2029\"'0-7]$")


def make_string(raw_content: str, enclosing_quote: str) -> str:
    """Re-quote *raw_content* with *enclosing_quote*, fixing escapes."""
    other = "'" if enclosing_quote == '"' else '"'

    def _replace(match: re.Match[str]) -> str:
        escaped, quote = match.group(1), match.group(2)
        if escaped == other:
            return escaped
        if quote == enclosing_quote:
            return "\\" + quote
        if quote:
            return quote
        if _UNNECESSARY_ESCAPE.match(escaped):
            return escaped
        return "\\" + escaped

    return enclosing_quote + _ESCAPED_OR_QUOTE.sub(_replace, raw_content) + enclosing_quote


def print_string(raw: str, single_quote: bool) -> str:
    """Print a quoted string literal using the preferred quote."""
    content = raw[1:-1]
    quote = preferred_quote(content, single_quote)
    return make_string(content, quote)


def print_number(raw: str) -> str:
    """Normalize a numeric literal the way the output style wants it."""
    value = raw.lower()
    if value.startswith(("0x", "0o", "0b")) or value.endswith("n"):
        return value
    # Remove unnecessary plus and zeroes from scientific notation
    value = re.sub(r"^([+-]?[\d.]+e)(?:\+|(-))?0*(\d)", r"\1\2\3", value)
    # Remove unnecessary scientific notation (1x)
    value = re.sub(r"^([+-]?[\d.]+)e[+-]?0+$", r"\1", value)
    # Make sure numbers always start with a digit
    value = re.sub(r"^([+-])?\.", r"\g<1>0.", value)
    # Remove extraneous trailing decimal zeroes
    value = re.sub(r"(\.\d+?)0+(?=e|$)", r"\1", value)
    # Remove trailing dot
    value = re.sub(r"\.(?=e|$)", "", value)
    return value
