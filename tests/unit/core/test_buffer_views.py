"""Tests for the in-memory view and host."""

from __future__ import annotations

import unittest

from ceview.views import (
    CLOSED,
    CURSOR_MOVED,
    ERROR,
    LEAVE,
    BufferHost,
    BufferView,
    PromptOptions,
    word_at,
)


class BufferViewTests(unittest.TestCase):
    def test_get_lines_is_one_based_and_inclusive(self) -> None:
        view = BufferView(name="a.c", lines=["one", "two", "three"])

        self.assertEqual(view.get_lines(), ["one", "two", "three"])
        self.assertEqual(view.get_lines(2, 3), ["two", "three"])
        self.assertEqual(view.get_lines(3, 3), ["three"])

    def test_replace_lines_clamps_cursor(self) -> None:
        view = BufferView(name="asm", lines=["a"] * 10, cursor=9)

        view.replace_lines(["x", "y"])

        self.assertEqual(view.cursor_line(), 2)
        self.assertEqual(view.line_count(), 2)

    def test_move_cursor_clamps_and_emits(self) -> None:
        view = BufferView(name="a.c", lines=["a", "b", "c"])
        moves: list[int] = []
        view.subscribe(CURSOR_MOVED, lambda: moves.append(view.cursor_line()))

        view.move_cursor(2)
        view.move_cursor(99)
        view.move_cursor(0)

        self.assertEqual(moves, [2, 3, 1])

    def test_subscription_cancel_stops_delivery(self) -> None:
        view = BufferView(name="a.c", lines=["a"])
        hits: list[str] = []
        subscription = view.subscribe(LEAVE, lambda: hits.append("leave"))

        view.leave()
        subscription.cancel()
        subscription.cancel()
        view.leave()

        self.assertEqual(hits, ["leave"])
        self.assertEqual(view.listener_count(LEAVE), 0)

    def test_unknown_event_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            BufferView(name="a.c").subscribe("scrolled", lambda: None)

    def test_close_fires_once_and_drops_listeners(self) -> None:
        view = BufferView(name="asm", lines=["a"])
        hits: list[str] = []
        view.subscribe(CLOSED, lambda: hits.append("closed"))

        view.close()
        view.close()

        self.assertEqual(hits, ["closed"])
        self.assertTrue(view.closed)
        self.assertEqual(view.listener_count(CLOSED), 0)

    def test_highlights_are_kept_per_namespace(self) -> None:
        view = BufferView(name="asm", lines=["a", "b", "c"])

        self.assertTrue(view.apply_highlight("one", 1, "Cursorline"))
        self.assertTrue(view.apply_highlight("two", 3, "Cursorline"))
        self.assertFalse(view.apply_highlight("one", 4, "Cursorline"))

        self.assertEqual(view.highlighted_lines(), [1, 3])
        view.clear_highlights("one")
        self.assertEqual(view.highlighted_lines(), [3])
        view.clear_highlights("missing")


class BufferHostTests(unittest.TestCase):
    def test_prompts_queue_until_answered(self) -> None:
        host = BufferHost(BufferView(name="a.c"), extension=".c")
        answers: list[object] = []

        host.prompt_choice(["c", "c++"], PromptOptions("lang", "Language> ", str.upper), answers.append)
        host.prompt_text(PromptOptions("compiler_opts", "Options> "), answers.append)

        choice, text = host.pending_prompts
        self.assertFalse(choice.is_text)
        self.assertTrue(text.is_text)
        self.assertEqual(choice.labels(), ["C", "C++"])

        choice.choose(1)
        text.answer("-O2")
        self.assertEqual(answers, ["c++", "-O2"])
        self.assertEqual(host.file_extension(host.current_view()), ".c")

    def test_choosing_on_text_prompt_is_rejected(self) -> None:
        host = BufferHost()
        answers: list[object] = []
        host.prompt_text(PromptOptions("compiler_opts", "Options> "), answers.append)

        with self.assertRaises(ValueError):
            host.pending_prompts[0].choose(0)
        self.assertEqual(answers, [])

    def test_notify_records_in_order(self) -> None:
        host = BufferHost()

        with self.assertLogs("ceview.views", level="INFO"):
            host.notify("Compilation done gcc")
            host.notify("bad", ERROR)

        self.assertEqual([n.message for n in host.notifications], ["Compilation done gcc", "bad"])
        self.assertEqual(host.notifications[1].level, ERROR)

    def test_current_view_requires_a_view(self) -> None:
        with self.assertRaises(LookupError):
            BufferHost().current_view()

    def test_output_view_is_reused_until_closed(self) -> None:
        host = BufferHost()

        first = host.output_view("asm", "asm")
        self.assertIs(host.output_view("asm", "asm"), first)
        first.close()
        second = host.output_view("asm", "asm")

        self.assertIsNot(second, first)
        self.assertEqual(second.filetype, "asm")

    def test_focus_fires_leave_on_previous_view(self) -> None:
        source = BufferView(name="a.c", lines=["x"])
        host = BufferHost(source)
        output = host.output_view("asm", "asm")
        left: list[str] = []
        source.subscribe(LEAVE, lambda: left.append("a.c"))

        host.focus(source)
        host.focus(output)

        self.assertEqual(left, ["a.c"])
        self.assertIs(host.current_view(), output)

    def test_word_under_cursor(self) -> None:
        view = BufferView(name="asm", lines=["  mov eax, 1", "  vpaddd.x y"])
        host = BufferHost(view)

        view.move_cursor(1, 3)
        self.assertEqual(host.word_under_cursor(view), "mov")
        view.move_cursor(2, 4)
        self.assertEqual(host.word_under_cursor(view), "vpaddd.x")


class WordAtTests(unittest.TestCase):
    def test_word_boundaries(self) -> None:
        self.assertEqual(word_at("mov eax, 1", 0), "mov")
        self.assertEqual(word_at("mov eax, 1", 3), "mov")
        self.assertEqual(word_at("mov eax, 1", 5), "eax")
        self.assertEqual(word_at("a  b", 2), "")
        self.assertEqual(word_at("", 0), "")
        self.assertEqual(word_at("ret", 50), "ret")


if __name__ == "__main__":
    unittest.main()
