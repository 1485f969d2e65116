"""Command-line interface for vxfmt."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from vxfmt.errors import AdapterError, FormatError, OptionValidationError
from vxfmt.options import ARROW_PARENS_CHOICES, PARSER_CHOICES, TRAILING_COMMA_CHOICES, FormatOptions
from vxfmt.options import resolve_options as build_format_options

logger = logging.getLogger(__name__)

CONFIG_NAME = "vxfmt.toml"
FRAGMENT_SUFFIXES = (".vx", ".vsx")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    inputs: list[Path | None]  # None reads stdin
    output_file: Path | None
    write: bool
    check: bool
    format_options: dict[str, Any] = field(default_factory=dict)
    cursor_offset: int | None = None
    debug: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="vxfmt",
        description="Format VisionX source files",
    )
    p.add_argument("inputs", nargs="+", metavar="FILE", help="Input file, or - for stdin")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("-w", "--write", action="store_true", help="Rewrite files in place")
    p.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if any file is not formatted",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )

    fmt = p.add_argument_group("format options")
    fmt.add_argument("--print-width", type=int, metavar="N", help="Line width (default: 80)")
    fmt.add_argument("--tab-width", type=int, metavar="N", help="Spaces per indent (default: 2)")
    fmt.add_argument("--use-tabs", action="store_true", default=None, help="Indent with tabs")
    fmt.add_argument(
        "--no-semi",
        dest="semi",
        action="store_false",
        default=None,
        help="Omit semicolons where possible",
    )
    fmt.add_argument(
        "--single-quote", action="store_true", default=None, help="Prefer single quotes"
    )
    fmt.add_argument(
        "--jsx-single-quote",
        action="store_true",
        default=None,
        help="Prefer single quotes in markup attributes",
    )
    fmt.add_argument(
        "--trailing-comma", choices=TRAILING_COMMA_CHOICES, help="Trailing commas (default: none)"
    )
    fmt.add_argument(
        "--jsx-bracket-same-line",
        action="store_true",
        default=None,
        help="Put the > of a multi-line tag on its last line",
    )
    fmt.add_argument(
        "--arrow-parens", choices=ARROW_PARENS_CHOICES, help="Parenthesize a sole arrow parameter"
    )
    fmt.add_argument(
        "--parser",
        choices=PARSER_CHOICES,
        help="Input language (default: from the file extension)",
    )

    p.add_argument(
        "--cursor-offset",
        type=int,
        metavar="N",
        help="Report where offset N moves to (printed to stderr)",
    )
    p.add_argument("--debug", action="store_true", help="Dump AST and Doc to stderr")
    return p


_FORMAT_FLAGS = (
    "print_width",
    "tab_width",
    "use_tabs",
    "semi",
    "single_quote",
    "jsx_single_quote",
    "trailing_comma",
    "jsx_bracket_same_line",
    "arrow_parens",
    "parser",
)


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    inputs: list[Path | None] = [None if raw == "-" else Path(raw) for raw in args.inputs]
    first = next((p for p in inputs if p is not None), None)
    input_dir = first.parent if first is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    format_options: dict[str, Any] = {}
    cfg_format = config.get("format")
    if isinstance(cfg_format, dict):
        format_options.update(cfg_format)
    for name in _FORMAT_FLAGS:
        value = getattr(args, name)
        if value is not None:
            format_options[name] = value

    if len(inputs) > 1 and (args.output or args.cursor_offset is not None):
        raise argparse.ArgumentTypeError("--output and --cursor-offset take a single input")
    if args.write and None in inputs:
        raise argparse.ArgumentTypeError("--write cannot rewrite stdin")

    return CliOptions(
        inputs=inputs,
        output_file=Path(args.output) if args.output else None,
        write=args.write,
        check=args.check,
        format_options=format_options,
        cursor_offset=args.cursor_offset,
        debug=args.debug,
    )


def options_for_file(path: Path | None, format_options: dict[str, Any]) -> tuple[FormatOptions, bool]:
    """Validated options for *path* and whether it takes the fragment wrapper.

    Without an explicit parser, ``.vx``/``.vsx`` files are markup fragments,
    ``.css`` and ``.html`` files use those grammars and anything else is
    a script.
    """
    options = build_format_options(format_options)
    if "parser" in format_options:
        return options, False
    suffix = path.suffix.lower() if path is not None else ""
    if suffix in FRAGMENT_SUFFIXES:
        return replace(options, parser="visionx"), True
    if suffix == ".css":
        return replace(options, parser="css"), False
    if suffix == ".html":
        return replace(options, parser="html"), False
    return replace(options, parser="script"), False


def format_source(
    source: str,
    options: FormatOptions,
    *,
    fragment: bool = False,
    cursor_offset: int | None = None,
    debug: bool = False,
) -> tuple[str, int | None]:
    """Format one input, dumping the AST and Doc to stderr under *debug*."""
    from vxfmt.core import format_text
    from vxfmt.normalize import unwrap_fragment, wrap_fragment

    text = wrap_fragment(source) if fragment else source
    if debug and options.parser != "css":
        _dump(text, options, fragment)
    formatted, cursor = format_text(text, options, fragment=fragment, cursor_offset=cursor_offset)
    if fragment:
        formatted = unwrap_fragment(formatted)
    return formatted, cursor


def _dump(text: str, options: FormatOptions, fragment: bool) -> None:
    from vxfmt.core import parse_source, print_tree
    from vxfmt.debug import dump_ast, dump_doc

    dump_ast(parse_source(text, options).root)
    # A fresh parse: attaching comments mutates the tree
    dump_doc(print_tree(parse_source(text, options), options, fragment=fragment))


def _read(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _display_name(path: Path | None) -> str:
    return "<stdin>" if path is None else str(path)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config: {exc}", file=sys.stderr)
        return 2

    status = 0
    for path in options.inputs:
        name = _display_name(path)
        try:
            fmt_options, fragment = options_for_file(path, options.format_options)
            source = _read(path)
            formatted, cursor = format_source(
                source,
                fmt_options,
                fragment=fragment,
                cursor_offset=options.cursor_offset,
                debug=options.debug,
            )
        except OptionValidationError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        except OSError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        except AdapterError as exc:
            print(exc.format(name), file=sys.stderr)
            status = max(status, 1)
            continue
        except FormatError as exc:
            print(f"error: {name}: {exc}", file=sys.stderr)
            return 2

        if options.check:
            if formatted != source:
                print(f"would reformat {name}", file=sys.stderr)
                status = max(status, 1)
            continue
        if options.write and path is not None:
            if formatted != source:
                path.write_text(formatted, encoding="utf-8")
                logger.debug("rewrote %s", name)
        elif options.output_file is not None:
            options.output_file.write_text(formatted, encoding="utf-8")
        else:
            sys.stdout.write(formatted)
        if cursor is not None:
            print(f"cursor: {cursor}", file=sys.stderr)

    return status
