"""Editor boundary: views, events, prompts, and an in-memory host.

The orchestrators and the highlight controller only talk to the editor through
the ``View`` and ``EditorHost`` protocols. ``BufferView``/``BufferHost`` are the
in-memory implementations used by the console front end and the tests; an
editor integration supplies its own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .diagnostics import Diagnostic

logger = logging.getLogger(__name__)

CURSOR_MOVED = "cursor_moved"
LEAVE = "leave"
CLOSED = "closed"
VIEW_EVENTS = frozenset({CURSOR_MOVED, LEAVE, CLOSED})

INFO = "info"
WARNING = "warning"
ERROR = "error"


class Subscription(Protocol):
    def cancel(self) -> None: ...


class View(Protocol):
    """One editor buffer shown in a window.

    Line numbers are 1-based everywhere in this interface.
    """

    name: str
    filetype: str
    vars: dict[str, object]
    closed: bool

    def line_count(self) -> int: ...

    def get_lines(self, start: int = 1, end: int | None = None) -> list[str]: ...

    def replace_lines(self, lines: Sequence[str]) -> None: ...

    def cursor_line(self) -> int: ...

    def apply_highlight(self, namespace: str, line: int, group: str) -> bool: ...

    def clear_highlights(self, namespace: str) -> None: ...

    def subscribe(self, event: str, callback: Callable[[], None]) -> Subscription: ...


@dataclass(frozen=True)
class PromptOptions:
    """Display parameters for one prompt.

    ``kind`` names the question (``lang``, ``compiler``, ``compiler_opts``,
    ``formatter``, ``formatter_style``) so hosts can preset answers.
    """

    kind: str
    prompt: str
    format_item: Callable[[Any], str] = str


class EditorHost(Protocol):
    def current_view(self) -> View: ...

    def file_extension(self, view: View) -> str: ...

    def prompt_choice(
        self,
        items: Sequence[Any],
        options: PromptOptions,
        on_done: Callable[[Any], None],
    ) -> None: ...

    def prompt_text(self, options: PromptOptions, on_done: Callable[[str | None], None]) -> None: ...

    def notify(self, message: str, level: str = INFO) -> None: ...

    def output_view(self, name: str, filetype: str) -> View: ...

    def set_diagnostics(self, view: View, diagnostics: Sequence[Diagnostic]) -> None: ...

    def word_under_cursor(self, view: View) -> str: ...

    def show_tooltip(self, text: str) -> None: ...


@dataclass(eq=False)
class _Listener:
    view: BufferView
    event: str
    callback: Callable[[], None]
    active: bool = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        listeners = self.view._listeners.get(self.event, [])
        if self in listeners:
            listeners.remove(self)


@dataclass(eq=False)
class BufferView:
    """In-memory view with a cursor, highlight namespaces, and event dispatch."""

    name: str
    lines: list[str] = field(default_factory=list)
    filetype: str = ""
    cursor: int = 1
    column: int = 0
    vars: dict[str, object] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    highlights: dict[str, dict[int, str]] = field(default_factory=dict)
    closed: bool = False
    _listeners: dict[str, list[_Listener]] = field(default_factory=dict, init=False, repr=False)

    def line_count(self) -> int:
        return len(self.lines)

    def get_lines(self, start: int = 1, end: int | None = None) -> list[str]:
        """Return lines ``start..end`` inclusive (``end=None`` means last line)."""
        stop = len(self.lines) if end is None else end
        return list(self.lines[max(0, start - 1) : max(0, stop)])

    def replace_lines(self, lines: Sequence[str]) -> None:
        self.lines = list(lines)
        self.cursor = max(1, min(self.cursor, len(self.lines)))

    def cursor_line(self) -> int:
        return self.cursor

    def apply_highlight(self, namespace: str, line: int, group: str) -> bool:
        """Highlight one line; lines the buffer does not have are skipped."""
        if line < 1 or line > len(self.lines):
            logger.debug("%s: no line %d to highlight", self.name, line)
            return False
        self.highlights.setdefault(namespace, {})[line] = group
        return True

    def clear_highlights(self, namespace: str) -> None:
        self.highlights.pop(namespace, None)

    def highlighted_lines(self, namespace: str | None = None) -> list[int]:
        """Sorted highlighted lines in ``namespace`` (all namespaces when ``None``)."""
        if namespace is not None:
            return sorted(self.highlights.get(namespace, {}))
        merged: set[int] = set()
        for lines in self.highlights.values():
            merged.update(lines)
        return sorted(merged)

    def subscribe(self, event: str, callback: Callable[[], None]) -> _Listener:
        if event not in VIEW_EVENTS:
            raise ValueError(f"unknown view event: {event!r}")
        listener = _Listener(self, event, callback)
        self._listeners.setdefault(event, []).append(listener)
        return listener

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners.get(event, [])):
            if listener.active:
                listener.callback()

    def move_cursor(self, line: int, column: int = 0) -> None:
        """Move the cursor (clamped to the buffer) and fire ``cursor_moved``."""
        self.cursor = max(1, min(line, max(1, len(self.lines))))
        self.column = max(0, column)
        self._emit(CURSOR_MOVED)

    def leave(self) -> None:
        self._emit(LEAVE)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._emit(CLOSED)
        self._listeners.clear()


@dataclass
class PendingPrompt:
    """An outstanding request for user input awaiting its single answer."""

    options: PromptOptions
    completion: Callable[[Any], None]
    items: tuple[Any, ...] | None = None

    @property
    def is_text(self) -> bool:
        return self.items is None

    def labels(self) -> list[str]:
        return [self.options.format_item(item) for item in self.items or ()]

    def answer(self, value: Any) -> None:
        self.completion(value)

    def choose(self, position: int) -> None:
        """Answer with the item at 0-based ``position``."""
        if self.items is None:
            raise ValueError(f"{self.options.kind} prompt takes free text, not a choice")
        self.completion(self.items[position])

    def cancel(self) -> None:
        self.completion(None)


@dataclass(frozen=True)
class Notification:
    message: str
    level: str


class BufferHost:
    """In-memory editor host.

    Prompts are queued in ``pending_prompts`` for a driver to answer, and
    notifications are recorded in order. Subclasses override the prompt
    methods to talk to a real user.
    """

    def __init__(self, source: BufferView | None = None, extension: str = "") -> None:
        self.views: dict[str, BufferView] = {}
        self.pending_prompts: list[PendingPrompt] = []
        self.notifications: list[Notification] = []
        self.tooltips: list[str] = []
        self._extensions: dict[str, str] = {}
        self._current: BufferView | None = None
        if source is not None:
            self.add_view(source, extension=extension)
            self._current = source

    def add_view(self, view: BufferView, extension: str = "") -> BufferView:
        self.views[view.name] = view
        if extension:
            self._extensions[view.name] = extension
        return view

    def focus(self, view: BufferView) -> None:
        """Make ``view`` current, firing ``leave`` on the previously current one."""
        previous = self._current
        if previous is view:
            return
        self._current = view
        if previous is not None and not previous.closed:
            previous.leave()

    def current_view(self) -> BufferView:
        if self._current is None:
            raise LookupError("no current view")
        return self._current

    def file_extension(self, view: View) -> str:
        return self._extensions.get(view.name, "")

    def prompt_choice(
        self,
        items: Sequence[Any],
        options: PromptOptions,
        on_done: Callable[[Any], None],
    ) -> None:
        self.pending_prompts.append(PendingPrompt(options, on_done, tuple(items)))

    def prompt_text(self, options: PromptOptions, on_done: Callable[[str | None], None]) -> None:
        self.pending_prompts.append(PendingPrompt(options, on_done))

    def notify(self, message: str, level: str = INFO) -> None:
        log_level = {ERROR: logging.ERROR, WARNING: logging.WARNING}.get(level, logging.INFO)
        logger.log(log_level, "%s", message)
        self.notifications.append(Notification(message, level))

    def output_view(self, name: str, filetype: str) -> BufferView:
        view = self.views.get(name)
        if view is None or view.closed:
            view = self.add_view(BufferView(name=name, filetype=filetype))
        return view

    def set_diagnostics(self, view: View, diagnostics: Sequence[Diagnostic]) -> None:
        target = self.views.get(view.name)
        if target is not None:
            target.diagnostics = list(diagnostics)

    def word_under_cursor(self, view: View) -> str:
        target = self.views.get(view.name)
        if target is None or not target.lines:
            return ""
        return word_at(target.lines[target.cursor - 1], target.column)

    def show_tooltip(self, text: str) -> None:
        self.tooltips.append(text)


def word_at(line: str, column: int) -> str:
    """Return the identifier-like word touching 0-based ``column`` in ``line``."""
    if not line:
        return ""
    column = max(0, min(column, len(line) - 1))

    def is_word(ch: str) -> bool:
        return ch.isalnum() or ch in "_."

    if not is_word(line[column]):
        if column > 0 and is_word(line[column - 1]):
            column -= 1
        else:
            return ""
    start = column
    while start > 0 and is_word(line[start - 1]):
        start -= 1
    end = column + 1
    while end < len(line) and is_word(line[end]):
        end += 1
    return line[start:end]
