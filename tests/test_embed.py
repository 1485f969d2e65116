"""Embedded stylesheets and HTML in template literals."""

from __future__ import annotations

import re
import typing

import pytest

from vxfmt.embed import _replace_placeholders
from vxfmt.errors import EmbeddedSubstitutionError
from vxfmt.layout import render


class TestStyledComponents:
    def test_member_tag(self, fmt) -> None:
        assert fmt("const Button = styled.button`color:red;`") == (
            "const Button = styled.button`\n  color: red;\n`;\n"
        )

    def test_call_tag(self, fmt) -> None:
        assert fmt("const B = styled(A)`color:red;`") == "const B = styled(A)`\n  color: red;\n`;\n"

    def test_css_tag(self, fmt) -> None:
        assert fmt("const c = css`margin:0`") == "const c = css`\n  margin: 0;\n`;\n"

    def test_interpolation_restored(self, fmt) -> None:
        assert fmt("const B = styled.div`color: ${c};`") == (
            "const B = styled.div`\n  color: ${c};\n`;\n"
        )

    def test_interpolated_statement(self, fmt) -> None:
        source = "const B = styled.div`\n${mixin}\ncolor:red;`"
        assert fmt(source) == "const B = styled.div`\n  ${mixin}\n  color: red;\n`;\n"

    def test_empty_template(self, fmt) -> None:
        assert fmt("x = css``") == "x = css``;\n"

    def test_unparsable_payload_printed_verbatim(self, fmt) -> None:
        assert fmt("x = css`a { b`") == "x = css`a { b`;\n"

    def test_untagged_template_untouched(self, fmt) -> None:
        assert fmt("x = `color:red;`") == "x = `color:red;`;\n"


class TestCssProp:
    def test_css_attribute(self, fmt) -> None:
        assert fmt("<div css={`color:red;`} />") == (
            "<div\n  css={`\n    color: red;\n  `}\n/>;\n"
        )


class TestHtml:
    def test_html_tag(self, fmt) -> None:
        assert fmt("x = html`<div>hi</div>`") == "x = html`\n  <div>hi</div>\n`;\n"


class TestPlaceholderSplicing:
    PATTERN = re.compile(r"@vxfmt-placeholder-(\d+)-id")

    def test_replaces_placeholder(self) -> None:
        doc = _replace_placeholders(
            "a @vxfmt-placeholder-0-id b", ["x"], self.PATTERN, "css", lambda e: e
        )
        assert render(doc) == "a ${x} b"

    def test_missing_placeholder(self) -> None:
        with pytest.raises(EmbeddedSubstitutionError) as exc_info:
            _replace_placeholders("nothing", ["x"], self.PATTERN, "css", lambda e: e)
        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 0

    def test_duplicated_placeholder(self) -> None:
        text = "@vxfmt-placeholder-0-id @vxfmt-placeholder-0-id"
        with pytest.raises(EmbeddedSubstitutionError):
            _replace_placeholders(text, ["x"], self.PATTERN, "css", lambda e: e)

    def test_out_of_range_placeholder(self) -> None:
        with pytest.raises(EmbeddedSubstitutionError, match="embedded css"):
            _replace_placeholders("@vxfmt-placeholder-3-id", ["x"], self.PATTERN, "css", lambda e: e)

    def test_signature_is_annotated(self) -> None:
        hints = typing.get_type_hints(_replace_placeholders)
        assert set(hints) == {"doc", "expressions", "pattern", "language", "wrap", "return"}
        assert hints["language"] is str
