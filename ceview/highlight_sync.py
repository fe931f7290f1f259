"""Keep source and generated views visually correlated as the cursor moves.

A ``HighlightSession`` wires one ``LineCorrelationIndex`` to a pair of views.
Moving the cursor in one view highlights the correlated lines in the other;
leaving a view clears what the session put in the other one. Every apply is
preceded by a clear of the target namespace, so at most one highlight set is
visible per target view.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from .correlation import LineCorrelationIndex
from .views import CLOSED, CURSOR_MOVED, LEAVE, Subscription, View

logger = logging.getLogger(__name__)

GENERATED_NAMESPACE = "compiler-explorer"
SOURCE_NAMESPACE = "compiler-explorer-source"
DEFAULT_HIGHLIGHT_GROUP = "Cursorline"


class SessionState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class HighlightSession:
    """Live highlight wiring between one source view and one generated view."""

    def __init__(
        self,
        index: LineCorrelationIndex,
        source_view: View,
        generated_view: View,
        highlight_group: str = DEFAULT_HIGHLIGHT_GROUP,
    ) -> None:
        self.index = index
        self.source_view = source_view
        self.generated_view = generated_view
        self.highlight_group = highlight_group
        self.source_highlighted: tuple[int, ...] = ()
        self.generated_highlighted: tuple[int, ...] = ()
        self.closed = False
        self._subscriptions: list[Subscription] = []

    @property
    def state(self) -> SessionState:
        """``ACTIVE`` while this session holds a highlight in either view."""
        if self.source_highlighted or self.generated_highlighted:
            return SessionState.ACTIVE
        return SessionState.IDLE

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_view.name, self.generated_view.name)

    def bind(self, on_view_closed: Callable[[HighlightSession], None] | None = None) -> None:
        """Subscribe the handlers to both views' events."""
        self._subscriptions = [
            self.source_view.subscribe(CURSOR_MOVED, self.on_source_cursor_moved),
            self.source_view.subscribe(LEAVE, self.on_source_leave),
            self.generated_view.subscribe(CURSOR_MOVED, self.on_generated_cursor_moved),
            self.generated_view.subscribe(LEAVE, self.on_generated_leave),
        ]
        if on_view_closed is not None:
            for view in (self.source_view, self.generated_view):
                self._subscriptions.append(view.subscribe(CLOSED, lambda: on_view_closed(self)))

    def _highlight(self, view: View, namespace: str, lines: tuple[int, ...]) -> tuple[int, ...]:
        view.clear_highlights(namespace)
        for line in lines:
            view.apply_highlight(namespace, line, self.highlight_group)
        return lines

    def on_source_cursor_moved(self) -> None:
        line = self.source_view.cursor_line()
        targets = self.index.generated_lines_for(line)
        self.generated_highlighted = self._highlight(self.generated_view, GENERATED_NAMESPACE, targets)

    def on_generated_cursor_moved(self) -> None:
        line = self.generated_view.cursor_line()
        source_line = self.index.source_line_for(line)
        targets = () if source_line is None else (source_line,)
        self.source_highlighted = self._highlight(self.source_view, SOURCE_NAMESPACE, targets)

    def on_source_leave(self) -> None:
        self.generated_view.clear_highlights(GENERATED_NAMESPACE)
        self.generated_highlighted = ()

    def on_generated_leave(self) -> None:
        self.source_view.clear_highlights(SOURCE_NAMESPACE)
        self.source_highlighted = ()

    def close(self) -> None:
        """Drop event wiring and clear both namespaces."""
        if self.closed:
            return
        self.closed = True
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self.source_view.clear_highlights(SOURCE_NAMESPACE)
        self.generated_view.clear_highlights(GENERATED_NAMESPACE)
        self.source_highlighted = ()
        self.generated_highlighted = ()


class HighlightController:
    """Own at most one ``HighlightSession`` per (source, generated) view pair."""

    def __init__(self, highlight_group: str = DEFAULT_HIGHLIGHT_GROUP) -> None:
        self.highlight_group = highlight_group
        self._sessions: dict[tuple[str, str], HighlightSession] = {}

    def attach(
        self,
        index: LineCorrelationIndex,
        source_view: View,
        generated_view: View,
        highlight_group: str | None = None,
    ) -> HighlightSession:
        """Start a session for the pair, replacing any previous one."""
        session = HighlightSession(
            index,
            source_view,
            generated_view,
            highlight_group=highlight_group or self.highlight_group,
        )
        previous = self._sessions.pop(session.key, None)
        if previous is not None:
            logger.debug("replacing highlight session for %s -> %s", *session.key)
            previous.close()
        session.bind(on_view_closed=self._on_view_closed)
        self._sessions[session.key] = session
        return session

    def detach(self, source_view: View, generated_view: View) -> bool:
        session = self._sessions.pop((source_view.name, generated_view.name), None)
        if session is None:
            return False
        session.close()
        return True

    def session_for(self, source_view: View, generated_view: View) -> HighlightSession | None:
        return self._sessions.get((source_view.name, generated_view.name))

    def sessions(self) -> list[HighlightSession]:
        return list(self._sessions.values())

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.close()
        self._sessions.clear()

    def _on_view_closed(self, session: HighlightSession) -> None:
        if self._sessions.get(session.key) is session:
            del self._sessions[session.key]
        session.close()
