"""Tests for ANSI helpers and the side-by-side renderer."""

from __future__ import annotations

import unittest

from ceview.diagnostics import Diagnostic
from ceview.render.ansi import clip_ansi_line, display_width, fit_ansi_line, strip_ansi, with_background
from ceview.render.split import SEPARATOR, pane_widths, render_diagnostics, render_listing, render_split
from ceview.render.syntax import colorize_lines, sanitize_terminal_text
from ceview.views import BufferView


class AnsiHelperTests(unittest.TestCase):
    def test_width_ignores_escapes_and_expands_tabs(self) -> None:
        self.assertEqual(display_width("\x1b[31mmov\x1b[0m"), 3)
        self.assertEqual(display_width("\tx"), 9)
        self.assertEqual(display_width("漢字"), 4)

    def test_clip_keeps_escapes_and_fit_pads(self) -> None:
        clipped = clip_ansi_line("\x1b[32mabcdef\x1b[0m", 3)

        self.assertEqual(strip_ansi(clipped), "abc")
        self.assertTrue(clipped.startswith("\x1b[32m"))
        self.assertEqual(fit_ansi_line("ab", 5), "ab   ")
        self.assertEqual(clip_ansi_line("abc", 0), "")

    def test_background_survives_inner_resets(self) -> None:
        painted = with_background("\x1b[31ma\x1b[0mb", "41")

        self.assertEqual(painted, "\x1b[41m\x1b[31;41ma\x1b[0;41mb\x1b[49m")
        self.assertEqual(with_background(""), "")


class SyntaxTests(unittest.TestCase):
    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x07b\tc"), "a\\x07b\tc")

    def test_colorize_keeps_one_row_per_line(self) -> None:
        lines = ["int square(int x) {", "", "    return x * x;", "}"]

        colored = colorize_lines(lines, filename="square.c")

        self.assertEqual([strip_ansi(row) for row in colored], lines)

    def test_colorize_assembly_by_filetype(self) -> None:
        lines = ["square(int):", "        mov     eax, edi", "        ret"]

        colored = colorize_lines(lines, filetype="asm")

        self.assertEqual([strip_ansi(row) for row in colored], lines)
        self.assertEqual(colorize_lines([]), [])


class RenderSplitTests(unittest.TestCase):
    def test_pane_widths_split_around_separator(self) -> None:
        left, right = pane_widths(40)

        self.assertEqual(left + right + len(SEPARATOR), 40)
        self.assertLessEqual(abs(left - right), 1)

    def test_plain_rendering_marks_highlights_and_diagnostics(self) -> None:
        source = BufferView(name="square.c", lines=["int a;", "int b;", "int c;"])
        source.diagnostics = [Diagnostic(3, 1, "error: boom")]
        generated = BufferView(name="asm", lines=["a:", "b:"], filetype="asm")
        generated.apply_highlight("compiler-explorer", 2, "Cursorline")

        rows = render_split(source, generated, 60, no_color=True).splitlines()

        self.assertEqual(len(rows), 3)
        self.assertTrue(rows[0].startswith(" 1  int a;"))
        self.assertIn(SEPARATOR + " 2 >b:", rows[1])
        self.assertTrue(rows[2].startswith(" 3! int c;"))
        self.assertTrue(rows[2].endswith(SEPARATOR.rstrip()))

    def test_colored_rendering_keeps_text(self) -> None:
        source = BufferView(name="square.c", lines=["int a;"])
        generated = BufferView(name="asm", lines=["mov eax, 1"], filetype="asm")
        generated.apply_highlight("compiler-explorer", 1, "Cursorline")

        (row,) = render_split(source, generated, 60, source_filename="square.c").splitlines()

        plain = strip_ansi(row)
        self.assertIn("int a;", plain)
        self.assertIn("mov eax, 1", plain)

    def test_diagnostic_and_listing_rows(self) -> None:
        view = BufferView(name="square.c", lines=["x"])
        view.diagnostics = [Diagnostic(1, 4, "warning: unused", "warning")]

        self.assertEqual(render_diagnostics(view), ["square.c:1:4: warning: warning: unused"])
        self.assertEqual(render_listing(["gcc", "clang"]), "1  gcc\n2  clang\n")


if __name__ == "__main__":
    unittest.main()
