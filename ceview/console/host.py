"""Editor host for the terminal front end.

Views live in memory (see ``BufferHost``); prompts are answered on stdin.
Answers given up front (command-line flags) are resolved without asking.
Blocking reads run in the loop's default executor so the event loop keeps
serving other tasks while the user types.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TextIO

from ..fuzzy import fuzzy_match_labels
from ..views import ERROR, INFO, BufferHost, BufferView, PromptOptions
from .prompts import item_keys, resolve_choice

logger = logging.getLogger(__name__)

DEFAULT_LISTING_LIMIT = 30


class ConsoleHost(BufferHost):
    """``BufferHost`` whose prompts talk to a terminal."""

    def __init__(
        self,
        source: BufferView | None = None,
        extension: str = "",
        presets: Mapping[str, str] | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        listing_limit: int = DEFAULT_LISTING_LIMIT,
    ) -> None:
        super().__init__(source, extension=extension)
        self.presets = dict(presets or {})
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.listing_limit = max(1, listing_limit)

    def _run_blocking(self, read: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
        future = asyncio.get_running_loop().run_in_executor(None, read)

        def deliver(done: asyncio.Future[Any]) -> None:
            if done.cancelled():
                on_done(None)
                return
            exc = done.exception()
            if exc is not None:
                logger.error("prompt failed", exc_info=exc)
                on_done(None)
                return
            on_done(done.result())

        future.add_done_callback(deliver)

    def prompt_choice(
        self,
        items: Sequence[Any],
        options: PromptOptions,
        on_done: Callable[[Any], None],
    ) -> None:
        items = list(items)
        preset = self.presets.get(options.kind)
        if preset is not None:
            choice = resolve_choice(items, options.format_item, preset)
            if choice is None:
                self.notify(f"No {options.kind} matches {preset!r}", ERROR)
            on_done(choice)
            return
        if len(items) == 1:
            self._write(f"{options.prompt}{options.format_item(items[0])}\n")
            on_done(items[0])
            return
        self._run_blocking(lambda: self._ask_choice(items, options), on_done)

    def prompt_text(self, options: PromptOptions, on_done: Callable[[str | None], None]) -> None:
        preset = self.presets.get(options.kind)
        if preset is not None:
            on_done(preset)
            return
        self._run_blocking(lambda: self._ask_text(options), on_done)

    def notify(self, message: str, level: str = INFO) -> None:
        super().notify(message, level)
        prefix = "" if level == INFO else f"{level}: "
        self.stderr.write(f"ceview: {prefix}{message}\n")
        self.stderr.flush()

    def show_tooltip(self, text: str) -> None:
        super().show_tooltip(text)
        self._write(text.rstrip("\n") + "\n")

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _readline(self) -> str | None:
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def _ask_text(self, options: PromptOptions) -> str | None:
        self._write(options.prompt)
        return self._readline()

    def _list(self, labels: Sequence[str], shown: Sequence[int]) -> None:
        width = len(str(max(1, len(shown))))
        for position, idx in enumerate(shown[: self.listing_limit], start=1):
            self._write(f"{position:>{width}}  {labels[idx]}\n")
        hidden = len(shown) - self.listing_limit
        if hidden > 0:
            self._write(f"... {hidden} more, type to filter\n")

    def _ask_choice(self, items: Sequence[Any], options: PromptOptions) -> Any:
        """Loop until the user picks an item; empty input or EOF cancels."""
        labels = [options.format_item(item) for item in items]
        shown = list(range(len(items)))
        while True:
            self._list(labels, shown)
            self._write(options.prompt)
            answer = self._readline()
            if answer is None or not answer.strip():
                return None
            answer = answer.strip()

            if answer.isdigit():
                position = int(answer)
                if 1 <= position <= min(len(shown), self.listing_limit):
                    return items[shown[position - 1]]
                self._write(f"No entry {position}\n")
                continue

            folded = answer.casefold()
            for idx in shown:
                if folded in item_keys(items[idx], labels[idx]):
                    return items[idx]

            matched = fuzzy_match_labels(answer, [labels[idx] for idx in shown], limit=len(shown))
            if not matched:
                self._write(f"Nothing matches {answer!r}\n")
                continue
            if len(matched) == 1:
                return items[shown[matched[0][0]]]
            shown = [shown[position] for position, _label, _score in matched]
