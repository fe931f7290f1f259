"""Command-line front door for ceview.

Parses options, loads the source file into an in-memory view, and runs the
compile or format flow against Compiler Explorer with a console host. After a
compile the source and the generated output are printed side by side.
"""

from __future__ import annotations

import argparse
import asyncio
import inspect
import json
import logging
import shutil
import sys
from dataclasses import asdict
from pathlib import Path

from . import config as config_module
from .config import ExplorerConfig
from .console import ConsoleHost
from .errors import RemoteServiceError
from .orchestrator import OUTPUT_VIEW_NAME, Explorer
from .render.split import render_diagnostics, render_listing, render_split
from .render.syntax import DEFAULT_STYLE, read_text
from .rest import CompilerExplorerClient
from .views import ERROR, BufferView


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _line_range(value: str) -> tuple[int, int]:
    """argparse type for ``START:END`` (1-based, inclusive)."""
    start_text, sep, end_text = value.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected START:END, got {value!r}")
    start = _positive_int(start_text)
    end = _positive_int(end_text)
    if end < start:
        raise argparse.ArgumentTypeError("END must not be before START")
    return start, end


def _default_render_width() -> int:
    term = shutil.get_terminal_size((120, 24))
    return max(40, term.columns)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_source_view(path: Path) -> BufferView:
    if not path.is_file():
        raise SystemExit(f"File not found: {path}")
    return BufferView(name=str(path), lines=read_text(path).splitlines())


def _client(conf: ExplorerConfig) -> CompilerExplorerClient:
    return CompilerExplorerClient(conf.url, timeout=conf.request_timeout)


def _had_errors(host: ConsoleHost) -> bool:
    return any(note.level == ERROR for note in host.notifications)


async def run_compile(args: argparse.Namespace, conf: ExplorerConfig) -> int:
    path = Path(args.path)
    source_view = _load_source_view(path)
    presets = {
        kind: value
        for kind, value in (("lang", args.lang), ("compiler", args.compiler), ("compiler_opts", args.options))
        if value is not None
    }
    host = ConsoleHost(source_view, extension=path.suffix, presets=presets)
    start, finish = args.lines if args.lines is not None else (1, source_view.line_count())

    async with _client(conf) as client:
        explorer = Explorer(host, client, conf)
        await asyncio.wait({explorer.compile(start, finish)})

    output_view = host.views.get(OUTPUT_VIEW_NAME)
    if output_view is None:
        return 1 if _had_errors(host) else 0

    if args.asm_line is not None:
        host.focus(output_view)
        output_view.move_cursor(args.asm_line)
    elif args.line is not None:
        source_view.move_cursor(args.line)

    sys.stdout.write(
        render_split(
            source_view,
            output_view,
            args.width or _default_render_width(),
            style=args.style,
            no_color=args.no_color,
            source_filename=path.name,
        )
    )
    for row in render_diagnostics(source_view):
        sys.stderr.write(row + "\n")
    return 1 if _had_errors(host) else 0


async def run_format(args: argparse.Namespace, conf: ExplorerConfig) -> int:
    path = Path(args.path)
    view = _load_source_view(path)
    presets = {
        kind: value
        for kind, value in (("formatter", args.formatter), ("formatter_style", args.format_style))
        if value is not None
    }
    host = ConsoleHost(view, extension=path.suffix, presets=presets)
    async with _client(conf) as client:
        explorer = Explorer(host, client, conf)
        await asyncio.wait({explorer.format()})

    if _had_errors(host):
        return 1
    text = "\n".join(view.lines)
    if args.write:
        path.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")
    return 0


async def run_languages(_args: argparse.Namespace, conf: ExplorerConfig) -> int:
    async with _client(conf) as client:
        languages = await client.languages()
    rows = [f"{lang.id:<16} {lang.name}  ({' '.join(lang.extensions)})" for lang in languages]
    sys.stdout.write("".join(row + "\n" for row in rows))
    return 0


async def run_compilers(args: argparse.Namespace, conf: ExplorerConfig) -> int:
    async with _client(conf) as client:
        compilers = await client.compilers(args.lang_id)
    sys.stdout.write(render_listing([f"{compiler.id:<24} {compiler.name}" for compiler in compilers]))
    return 0


async def run_tooltip(args: argparse.Namespace, conf: ExplorerConfig) -> int:
    async with _client(conf) as client:
        doc = await client.tooltip(args.arch, args.opcode)
    sys.stdout.write(doc.tooltip.rstrip("\n") + "\n")
    if doc.url:
        sys.stdout.write(doc.url + "\n")
    return 0


def run_config(args: argparse.Namespace, conf: ExplorerConfig) -> int:
    if args.init:
        if config_module.CONFIG_PATH.exists():
            sys.stderr.write(f"Config already exists: {config_module.CONFIG_PATH}\n")
            return 1
        config_module.save_config(config_module.DEFAULTS)
    sys.stdout.write(f"# {config_module.CONFIG_PATH}\n")
    sys.stdout.write(json.dumps(asdict(conf), indent=2) + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ceview",
        description="Compile or format source with Compiler Explorer and view the output side by side.",
    )
    parser.add_argument("--url", default=None, help="Compiler Explorer base URL (default from config).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and task failures.")
    commands = parser.add_subparsers(dest="command", required=True)

    compile_cmd = commands.add_parser("compile", help="Compile a file (or a line range of it).")
    compile_cmd.add_argument("path", help="Source file.")
    compile_cmd.add_argument("--lines", type=_line_range, default=None, metavar="START:END",
                             help="Compile only these lines (disables live correlation).")
    compile_cmd.add_argument("--lang", default=None, help="Language id, skipping the prompt.")
    compile_cmd.add_argument("--compiler", default=None, help="Compiler id or name, skipping the prompt.")
    compile_cmd.add_argument("--options", default=None, help="Compiler options, skipping the prompt.")
    cursor = compile_cmd.add_mutually_exclusive_group()
    cursor.add_argument("--line", type=_positive_int, default=None,
                        help="Put the source cursor on this line and highlight its output.")
    cursor.add_argument("--asm-line", type=_positive_int, default=None,
                        help="Put the output cursor on this line and highlight its source.")
    compile_cmd.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    compile_cmd.add_argument("--no-color", action="store_true", help="Disable color output.")
    compile_cmd.add_argument("--width", type=_positive_int, default=None,
                             help="Total output width (default: terminal width).")
    compile_cmd.set_defaults(handler=run_compile)

    format_cmd = commands.add_parser("format", help="Format a file with a Compiler Explorer formatter.")
    format_cmd.add_argument("path", help="Source file.")
    format_cmd.add_argument("--formatter", default=None, help="Formatter type or name, skipping the prompt.")
    format_cmd.add_argument("--format-style", default=None, help="Formatter style, skipping the prompt.")
    format_cmd.add_argument("--write", action="store_true", help="Rewrite the file instead of printing.")
    format_cmd.set_defaults(handler=run_format)

    languages_cmd = commands.add_parser("languages", help="List supported languages.")
    languages_cmd.set_defaults(handler=run_languages)

    compilers_cmd = commands.add_parser("compilers", help="List compilers for a language.")
    compilers_cmd.add_argument("lang_id", help="Language id (see `ceview languages`).")
    compilers_cmd.set_defaults(handler=run_compilers)

    tooltip_cmd = commands.add_parser("tooltip", help="Show documentation for an opcode.")
    tooltip_cmd.add_argument("opcode")
    tooltip_cmd.add_argument("--arch", default="amd64", help="Instruction set (default: amd64).")
    tooltip_cmd.set_defaults(handler=run_tooltip)

    config_cmd = commands.add_parser("config", help="Show the effective configuration.")
    config_cmd.add_argument("--init", action="store_true", help="Write the default config file.")
    config_cmd.set_defaults(handler=run_config)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the chosen command, and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    overrides = {"url": args.url} if args.url else None
    conf = config_module.setup(overrides)

    handler = args.handler
    if not inspect.iscoroutinefunction(handler):
        return handler(args, conf)
    try:
        return asyncio.run(handler(args, conf))
    except RemoteServiceError as exc:
        sys.stderr.write(f"ceview: {exc}\n")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
