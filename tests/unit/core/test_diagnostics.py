"""Tests for extracting located diagnostics from compiler stderr."""

from __future__ import annotations

import unittest

from ceview.diagnostics import ERROR, NOTE, WARNING, Diagnostic, parse_diagnostics, severity_of


class ParseDiagnosticsTests(unittest.TestCase):
    def test_tagged_entries_become_diagnostics(self) -> None:
        stderr = [
            {"text": "<source>: In function 'int square(int)':"},
            {
                "text": "<source>:3:12: error: 'y' was not declared in this scope",
                "tag": {"line": 3, "column": 12, "text": "error: 'y' was not declared in this scope"},
            },
            {
                "text": "<source>:5:1: warning: no return statement",
                "tag": {"line": 5, "column": 1, "text": "\x1b[01;35mwarning: \x1b[0mno return statement"},
            },
            {"text": "Compiler returned: 1"},
        ]

        self.assertEqual(
            parse_diagnostics(stderr),
            [
                Diagnostic(3, 12, "error: 'y' was not declared in this scope", ERROR),
                Diagnostic(5, 1, "warning: no return statement", WARNING),
            ],
        )

    def test_line_offset_maps_selection_back_onto_buffer(self) -> None:
        stderr = [{"text": "x", "tag": {"line": 2, "column": 4, "text": "note: here"}}]

        (diagnostic,) = parse_diagnostics(stderr, line_offset=9)

        self.assertEqual(diagnostic.line, 11)
        self.assertEqual(diagnostic.severity, NOTE)

    def test_entries_without_usable_location_are_dropped(self) -> None:
        stderr = [
            "plain string",
            {"text": "no tag"},
            {"text": "zero", "tag": {"line": 0, "column": 1, "text": "error: x"}},
            {"text": "bool", "tag": {"line": True, "column": 1, "text": "error: x"}},
            {"text": "tag not mapping", "tag": "3:1"},
        ]

        self.assertEqual(parse_diagnostics(stderr), [])

    def test_message_falls_back_to_entry_text(self) -> None:
        stderr = [{"text": "  warning: unused  ", "tag": {"line": 1, "column": -3}}]

        self.assertEqual(parse_diagnostics(stderr), [Diagnostic(1, 0, "warning: unused", WARNING)])


class SeverityTests(unittest.TestCase):
    def test_prefixes(self) -> None:
        self.assertEqual(severity_of("Warning: x"), WARNING)
        self.assertEqual(severity_of("note: y"), NOTE)
        self.assertEqual(severity_of("undefined reference"), ERROR)


if __name__ == "__main__":
    unittest.main()
