"""Terminal front end: stdin prompts over in-memory views."""

from __future__ import annotations

from .host import ConsoleHost

__all__ = ["ConsoleHost"]
