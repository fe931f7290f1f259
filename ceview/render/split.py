"""Side-by-side rendering of a source view and its generated output.

Rows are laid out by line number: source line N sits next to output line N.
Lines carrying highlights (from the correlation session) get a background, and
source lines with diagnostics get a marker in the gutter.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..views import BufferView
from .ansi import DIAGNOSTIC_BG_SGR, HIGHLIGHT_BG_SGR, fit_ansi_line, with_background
from .syntax import DEFAULT_STYLE, colorize_lines, sanitize_terminal_text

SEPARATOR = " │ "
MIN_PANE_WIDTH = 8


def _gutter_width(line_count: int) -> int:
    return max(2, len(str(max(1, line_count))))


def _pane_rows(
    view: BufferView,
    width: int,
    style: str,
    no_color: bool,
    filename: str = "",
) -> list[str]:
    """Render every line of ``view`` into exactly ``width`` display columns."""
    number_width = _gutter_width(view.line_count())
    text_width = max(1, width - number_width - 2)
    if no_color:
        texts = [sanitize_terminal_text(line) for line in view.lines]
    else:
        texts = colorize_lines(view.lines, filename=filename, filetype=view.filetype, style=style)

    highlighted = set(view.highlighted_lines())
    diagnostic_lines = {diagnostic.line for diagnostic in view.diagnostics}
    rows: list[str] = []
    for line_no, text in enumerate(texts, start=1):
        marker = "!" if line_no in diagnostic_lines else " "
        gutter = f"{line_no:>{number_width}}{marker} "
        body = fit_ansi_line(text, text_width)
        if no_color:
            if line_no in highlighted:
                gutter = f"{line_no:>{number_width}}{marker}>"
            rows.append(gutter + body)
            continue
        if line_no in highlighted:
            body = with_background(body, HIGHLIGHT_BG_SGR)
        elif marker == "!":
            body = with_background(body, DIAGNOSTIC_BG_SGR)
        rows.append(f"\033[90m{gutter}\033[0m{body}\033[0m")
    return rows


def pane_widths(total_width: int) -> tuple[int, int]:
    """Split the terminal width between the two panes around the separator."""
    usable = max(2 * MIN_PANE_WIDTH, total_width - len(SEPARATOR))
    left = usable // 2
    return left, usable - left


def render_split(
    source_view: BufferView,
    generated_view: BufferView,
    total_width: int,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
    source_filename: str = "",
) -> str:
    """Render both views next to each other and return the screen text."""
    left_width, right_width = pane_widths(total_width)
    left = _pane_rows(source_view, left_width, style, no_color, filename=source_filename)
    right = _pane_rows(generated_view, right_width, style, no_color)
    blank_left = " " * left_width
    out: list[str] = []
    for row in range(max(len(left), len(right))):
        left_row = left[row] if row < len(left) else blank_left
        right_row = right[row] if row < len(right) else ""
        out.append(f"{left_row}{SEPARATOR}{right_row}".rstrip() + "\n")
    return "".join(out)


def render_diagnostics(view: BufferView) -> list[str]:
    return [f"{view.name}:{d.line}:{d.column}: {d.severity}: {d.message}" for d in view.diagnostics]


def render_listing(labels: Sequence[str]) -> str:
    width = len(str(max(1, len(labels))))
    return "".join(f"{idx:>{width}}  {label}\n" for idx, label in enumerate(labels, start=1))
