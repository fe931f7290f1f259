"""Compiler diagnostics extracted from a compile response's ``stderr``.

Each stderr entry is ``{"text": str, "tag": {"line", "column", "text"}}``;
entries without a tagged line (banners, notes without location) are dropped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .render.ansi import strip_ansi

ERROR = "error"
WARNING = "warning"
NOTE = "note"


@dataclass(frozen=True)
class Diagnostic:
    line: int
    column: int
    message: str
    severity: str = ERROR


def _int(value: object, default: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def severity_of(message: str) -> str:
    lowered = message.lstrip().lower()
    for severity in (ERROR, WARNING, NOTE):
        if lowered.startswith(severity):
            return severity
    return ERROR


def parse_diagnostics(stderr: Iterable[object], line_offset: int = 0) -> list[Diagnostic]:
    """Collect located diagnostics, shifting lines by ``line_offset``.

    The offset maps positions in a compiled selection back onto the buffer.
    """
    diagnostics: list[Diagnostic] = []
    for entry in stderr:
        if not isinstance(entry, Mapping):
            continue
        tag = entry.get("tag")
        if not isinstance(tag, Mapping):
            continue
        line = _int(tag.get("line"))
        if line <= 0:
            continue
        raw = tag.get("text")
        if not isinstance(raw, str):
            raw = entry.get("text")
        message = strip_ansi(raw if isinstance(raw, str) else "").strip()
        diagnostics.append(
            Diagnostic(
                line=line + line_offset,
                column=max(0, _int(tag.get("column"))),
                message=message,
                severity=severity_of(message),
            )
        )
    return diagnostics
