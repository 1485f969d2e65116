"""Format options and their validation."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from vxfmt.errors import OptionValidationError

TRAILING_COMMA_CHOICES = ("none", "es5", "all")
ARROW_PARENS_CHOICES = ("avoid", "always")
PARSER_CHOICES = ("visionx", "script", "css", "html")


@dataclass(frozen=True, slots=True)
class FormatOptions:
    """Resolved, validated options for one format call."""

    print_width: int = 80
    tab_width: int = 2
    use_tabs: bool = False
    semi: bool = True
    single_quote: bool = False
    jsx_single_quote: bool = False
    trailing_comma: str = "none"
    jsx_bracket_same_line: bool = False
    arrow_parens: str = "avoid"
    parser: str = "visionx"


# Names accepted in addition to the snake_case field names.
_ALIASES = {
    "semicolons": "semi",
}

_CHOICES: dict[str, tuple[str, ...]] = {
    "trailing_comma": TRAILING_COMMA_CHOICES,
    "arrow_parens": ARROW_PARENS_CHOICES,
    "parser": PARSER_CHOICES,
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def option_key(name: str) -> str:
    """Map camelCase, kebab-case or snake_case spellings to a field name."""
    key = _CAMEL_RE.sub("_", name).replace("-", "_").lower()
    return _ALIASES.get(key, key)


def _check(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise OptionValidationError(name, value, "expected a boolean")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise OptionValidationError(name, value, "expected an integer")
        if value < (1 if name == "print_width" else 0):
            raise OptionValidationError(name, value, "out of range")
        return value
    choices = _CHOICES[name]
    if value not in choices:
        raise OptionValidationError(name, value, f"expected one of {', '.join(choices)}")
    return value


def resolve_options(overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> FormatOptions:
    """Validate *overrides* and keyword options into a FormatOptions.

    Unknown names and ill-typed values raise OptionValidationError.
    """
    defaults = FormatOptions()
    known = {f.name for f in fields(FormatOptions)}
    values: dict[str, Any] = {}
    merged = dict(overrides or {})
    merged.update(kwargs)
    for raw_name, value in merged.items():
        key = option_key(raw_name)
        if key not in known:
            raise OptionValidationError(raw_name, value, "unknown option")
        values[key] = _check(key, value, getattr(defaults, key))
    return FormatOptions(**values)
