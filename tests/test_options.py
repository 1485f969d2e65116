"""Option name normalization and validation."""

from __future__ import annotations

import pytest

from vxfmt.errors import OptionValidationError
from vxfmt.options import FormatOptions, option_key, resolve_options


class TestDefaults:
    def test_defaults(self) -> None:
        options = resolve_options()
        assert options == FormatOptions()
        assert options.print_width == 80
        assert options.tab_width == 2
        assert options.semi
        assert options.trailing_comma == "none"
        assert options.arrow_parens == "avoid"
        assert options.parser == "visionx"


class TestNames:
    @pytest.mark.parametrize(
        "name",
        ["print_width", "printWidth", "print-width"],
    )
    def test_spellings(self, name: str) -> None:
        assert option_key(name) == "print_width"

    def test_semicolons_alias(self) -> None:
        assert resolve_options({"semicolons": False}).semi is False

    def test_keyword_overrides_mapping(self) -> None:
        options = resolve_options({"tab_width": 4}, tab_width=8)
        assert options.tab_width == 8

    def test_unknown_option(self) -> None:
        with pytest.raises(OptionValidationError, match="unknown option") as exc_info:
            resolve_options(colour=True)
        assert exc_info.value.name == "colour"


class TestValues:
    def test_boolean_required(self) -> None:
        with pytest.raises(OptionValidationError, match="expected a boolean"):
            resolve_options(semi="yes")

    def test_integer_required(self) -> None:
        with pytest.raises(OptionValidationError, match="expected an integer"):
            resolve_options(print_width="80")

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(OptionValidationError):
            resolve_options(tab_width=True)

    def test_print_width_must_be_positive(self) -> None:
        with pytest.raises(OptionValidationError, match="out of range"):
            resolve_options(print_width=0)

    def test_tab_width_zero_allowed(self) -> None:
        assert resolve_options(tab_width=0).tab_width == 0

    def test_choices(self) -> None:
        assert resolve_options(trailing_comma="all").trailing_comma == "all"
        with pytest.raises(OptionValidationError, match="expected one of none, es5, all"):
            resolve_options(trailing_comma="some")

    def test_message(self) -> None:
        with pytest.raises(OptionValidationError) as exc_info:
            resolve_options(arrow_parens="never")
        assert str(exc_info.value).startswith("invalid option arrow_parens='never'")
