"""Minimal LSP server for vxfmt: syntax diagnostics and document formatting."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_FORMATTING,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from vxfmt import __version__
from vxfmt.cli import format_source, options_for_file
from vxfmt.errors import AdapterError, FormatError

logger = logging.getLogger(__name__)

server = LanguageServer("vxfmt-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _path_of(uri: str) -> PurePosixPath:
    return PurePosixPath(uri.rsplit("/", 1)[-1] if "/" in uri else uri)


def _error_range(exc: AdapterError) -> Range:
    start = exc.span.start
    end = exc.span.end
    end_col = end.column - 1
    # Zero-width spans still underline one character
    if (end.line, end.column) == (start.line, start.column):
        end_col += 1
    return Range(
        start=Position(line=start.line - 1, character=start.column - 1),
        end=Position(line=end.line - 1, character=end_col),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Format the document in memory and publish any syntax error."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    try:
        options, fragment = options_for_file(_path_of(uri), {})
        format_source(doc.source, options, fragment=fragment)
    except AdapterError as exc:
        diagnostics.append(
            Diagnostic(
                range=_error_range(exc),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="vxfmt",
            )
        )
    except FormatError as exc:
        logger.warning("formatting %s failed: %s", uri, exc)

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def format_document(source: str, uri: str, tab_size: int, insert_spaces: bool) -> list[TextEdit]:
    """One edit replacing the whole document, or none if it is unchanged."""
    overrides = {"tab_width": tab_size, "use_tabs": not insert_spaces}
    options, fragment = options_for_file(_path_of(uri), overrides)
    formatted, _ = format_source(source, options, fragment=fragment)
    if formatted == source:
        return []
    lines = source.split("\n")
    end = Position(line=len(lines) - 1, character=len(lines[-1]))
    return [TextEdit(range=Range(start=Position(line=0, character=0), end=end), new_text=formatted)]


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit] | None:
    uri = params.text_document.uri
    doc = ls.workspace.get_text_document(uri)
    try:
        return format_document(
            doc.source, uri, params.options.tab_size, params.options.insert_spaces
        )
    except FormatError as exc:
        logger.warning("formatting %s failed: %s", uri, exc)
        return None


def main() -> None:
    server.start_io()
