"""Tests for the CLI module: arg parsing, exit codes, file handling, end-to-end."""

from __future__ import annotations

import argparse
import io
from pathlib import Path

import pytest

from vxfmt.cli import build_parser, main, options_for_file, resolve_options

# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["app.js"])
        assert ns.inputs == ["app.js"]
        assert ns.output is None
        assert not ns.write
        assert not ns.check

    def test_format_flags_default_to_none(self) -> None:
        ns = build_parser().parse_args(["app.js"])
        assert ns.print_width is None
        assert ns.semi is None
        assert ns.single_quote is None
        assert ns.parser is None

    def test_format_flags(self) -> None:
        ns = build_parser().parse_args(
            [
                "app.js",
                "--print-width",
                "100",
                "--no-semi",
                "--single-quote",
                "--trailing-comma",
                "es5",
                "--arrow-parens",
                "always",
            ]
        )
        assert ns.print_width == 100
        assert ns.semi is False
        assert ns.single_quote is True
        assert ns.trailing_comma == "es5"
        assert ns.arrow_parens == "always"

    def test_bad_choice_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["app.js", "--trailing-comma", "some"])

    def test_cursor_and_debug(self) -> None:
        ns = build_parser().parse_args(["app.js", "--cursor-offset", "4", "--debug"])
        assert ns.cursor_offset == 4
        assert ns.debug is True


# ---------------------------------------------------------------------------
# Option resolution
# ---------------------------------------------------------------------------


class TestResolveOptions:
    def test_stdin_dash(self, tmp_path: Path) -> None:
        opts = resolve_options(build_parser().parse_args(["-", "--config", str(tmp_path / "x")]))
        assert opts.inputs == [None]

    def test_cli_flags_collected(self, tmp_path: Path) -> None:
        src = tmp_path / "a.js"
        opts = resolve_options(build_parser().parse_args([str(src), "--tab-width", "4"]))
        assert opts.format_options == {"tab_width": 4}

    def test_output_with_many_inputs_rejected(self, tmp_path: Path) -> None:
        ns = build_parser().parse_args(
            [str(tmp_path / "a.js"), str(tmp_path / "b.js"), "-o", "out.js"]
        )
        with pytest.raises(argparse.ArgumentTypeError):
            resolve_options(ns)

    def test_write_stdin_rejected(self, tmp_path: Path) -> None:
        ns = build_parser().parse_args(["-", "-w", "--config", str(tmp_path / "x")])
        with pytest.raises(argparse.ArgumentTypeError):
            resolve_options(ns)


class TestOptionsForFile:
    def test_view_file_is_fragment(self) -> None:
        options, fragment = options_for_file(Path("page.vx"), {})
        assert options.parser == "visionx"
        assert fragment

    def test_script_file(self) -> None:
        options, fragment = options_for_file(Path("app.js"), {})
        assert options.parser == "script"
        assert not fragment

    def test_css_and_html(self) -> None:
        assert options_for_file(Path("a.css"), {})[0].parser == "css"
        assert options_for_file(Path("a.html"), {})[0].parser == "html"

    def test_explicit_parser_wins(self) -> None:
        options, fragment = options_for_file(Path("page.vx"), {"parser": "script"})
        assert options.parser == "script"
        assert not fragment

    def test_stdin_is_script(self) -> None:
        assert options_for_file(None, {})[0].parser == "script"


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "ok.js"
        src.write_text("const a=1")
        assert main([str(src)]) == 0
        assert capsys.readouterr().out == "const a = 1;\n"

    def test_syntax_error_returns_1(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "bad.js"
        src.write_text("a b")
        assert main([str(src)]) == 1
        err = capsys.readouterr().err
        assert err.startswith("error: expected ';'")
        assert f"--> {src}:1:3" in err

    def test_missing_file_returns_2(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing.js")]) == 2

    def test_invalid_config_option_returns_2(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "vxfmt.toml").write_text("[format]\ncolour = true\n")
        src = tmp_path / "a.js"
        src.write_text("a;\n")
        assert main([str(src)]) == 2
        assert "unknown option" in capsys.readouterr().err

    def test_usage_error_returns_2(self, tmp_path: Path) -> None:
        a = tmp_path / "a.js"
        b = tmp_path / "b.js"
        assert main([str(a), str(b), "--cursor-offset", "1"]) == 2

    def test_later_files_still_processed_after_error(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.js"
        bad.write_text("a b")
        good = tmp_path / "good.js"
        good.write_text("b")
        assert main([str(bad), str(good)]) == 1
        assert capsys.readouterr().out == "b;\n"


# ---------------------------------------------------------------------------
# Output modes
# ---------------------------------------------------------------------------


class TestOutputModes:
    def test_output_file(self, tmp_path: Path) -> None:
        src = tmp_path / "a.js"
        src.write_text("x=1")
        out = tmp_path / "out.js"
        assert main([str(src), "-o", str(out)]) == 0
        assert out.read_text() == "x = 1;\n"

    def test_write_in_place(self, tmp_path: Path) -> None:
        src = tmp_path / "a.js"
        src.write_text("x=1")
        assert main([str(src), "--write"]) == 0
        assert src.read_text() == "x = 1;\n"

    def test_check_clean_file(self, tmp_path: Path) -> None:
        src = tmp_path / "a.js"
        src.write_text("x = 1;\n")
        assert main([str(src), "--check"]) == 0

    def test_check_dirty_file(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "a.js"
        src.write_text("x=1")
        assert main([str(src), "--check"]) == 1
        assert f"would reformat {src}" in capsys.readouterr().err
        assert src.read_text() == "x=1"

    def test_stdin(self, monkeypatch, capsys, tmp_path: Path) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("y=2"))
        monkeypatch.chdir(tmp_path)
        assert main(["-"]) == 0
        assert capsys.readouterr().out == "y = 2;\n"

    def test_cursor_reported(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "a.js"
        src.write_text("const   a = 1")
        assert main([str(src), "--cursor-offset", "8"]) == 0
        assert "cursor: 6" in capsys.readouterr().err

    def test_no_semi_flag(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "a.js"
        src.write_text("x = 1;")
        assert main([str(src), "--no-semi"]) == 0
        assert capsys.readouterr().out == "x = 1\n"

    def test_view_file_formats_as_fragment(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "page.vx"
        src.write_text("<div>hi</div>")
        assert main([str(src)]) == 0
        assert capsys.readouterr().out == "<div>hi</div>\n"


# ---------------------------------------------------------------------------
# Debug output
# ---------------------------------------------------------------------------


class TestDebug:
    def test_debug_dumps_to_stderr(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "a.js"
        src.write_text("x = 1;\n")
        assert main([str(src), "--debug"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "x = 1;\n"
        assert "Program" in captured.err
