"""Source loading, sanitization, and Pygments colorization.

Terminal control bytes are neutralized before anything reaches the screen.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


@lru_cache(maxsize=None)
def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


@lru_cache(maxsize=None)
def _formatter_for_style(style: str) -> TerminalFormatter:
    return TerminalFormatter(style=style)


def lexer_for(filename: str = "", filetype: str = "", source: str = "") -> Lexer:
    """Pick a lexer by filetype alias, then by filename, then plain text."""
    if filetype:
        try:
            return get_lexer_by_name(filetype, stripnl=False)
        except ClassNotFound:
            pass
    if filename:
        try:
            return get_lexer_for_filename(filename, source, stripnl=False)
        except ClassNotFound:
            pass
    return TextLexer(stripnl=False)


def colorize_lines(
    lines: list[str],
    filename: str = "",
    filetype: str = "",
    style: str = DEFAULT_STYLE,
) -> list[str]:
    """Return ANSI-colored copies of ``lines``, one output row per input line."""
    if not lines:
        return []
    source = sanitize_terminal_text("\n".join(lines))
    formatter = _formatter_for_style(_normalize_style(style))
    rendered = highlight(source, lexer_for(filename, filetype, source), formatter)
    colored = rendered.split("\n")
    # Pygments always terminates its output with a newline.
    if len(colored) > len(lines) and colored[-1] == "":
        colored.pop()
    if len(colored) != len(lines):
        return source.split("\n")
    return colored
