"""Tests for the LSP server: diagnostics and document formatting."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from vxfmt.lsp import _validate, format_document


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = "file:///test.js") -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="javascript", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Syntax errors → Error severity
# ---------------------------------------------------------------------------


class TestSyntaxErrors:
    def test_unexpected_token(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("a b")
        _validate(ls, "file:///test.js")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.message == "expected ';', found 'b'"
        assert d.source == "vxfmt"
        # 'b' is at column 3 (1-based) → character 2 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 2
        assert d.range.end.character == 3

    def test_unterminated_string_is_one_character_wide(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('a = "abc')
        _validate(ls, "file:///test.js")

        d = published[0].diagnostics[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.range.start.character == 4
        assert d.range.end.character == 5

    def test_markup_file(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("<a></b>", uri="file:///page.vx")
        _validate(ls, "file:///page.vx")

        d = published[0].diagnostics[0]
        assert "closing tag" in d.message


# ---------------------------------------------------------------------------
# Clean document → empty diagnostics
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("const a = 1;\n")
        _validate(ls, "file:///test.js")

        assert len(published) == 1
        assert published[0].diagnostics == []

    def test_unformatted_but_valid(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("const   a=1")
        _validate(ls, "file:///test.js")

        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Position conversion (1-based → 0-based)
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_error_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("a;\nb c")
        _validate(ls, "file:///test.js")

        d = published[0].diagnostics[0]
        # Error is on line 2 (1-based) → LSP line 1 (0-based)
        assert d.range.start.line == 1
        assert d.range.start.character == 2


# ---------------------------------------------------------------------------
# Document formatting
# ---------------------------------------------------------------------------


class TestFormatDocument:
    def test_already_formatted(self) -> None:
        assert format_document("x = 1;\n", "file:///a.js", 2, True) == []

    def test_single_full_range_edit(self) -> None:
        edits = format_document("x=1\ny=2", "file:///a.js", 2, True)
        assert len(edits) == 1
        edit = edits[0]
        assert edit.new_text == "x = 1;\ny = 2;\n"
        assert (edit.range.start.line, edit.range.start.character) == (0, 0)
        assert (edit.range.end.line, edit.range.end.character) == (1, 3)

    def test_tabs_from_client(self) -> None:
        edits = format_document("function f() {\nreturn 1;\n}\n", "file:///a.js", 4, False)
        assert edits[0].new_text == "function f() {\n\treturn 1;\n}\n"

    def test_view_file_keeps_fragment(self) -> None:
        assert format_document("<div>hi</div>\n", "file:///page.vx", 2, True) == []
