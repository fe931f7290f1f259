"""Source/output line correlation built from compiler annotations.

Compiler Explorer tags each generated line with the source line it came from
(when it has one). ``build_index`` folds those tags into two lookup tables so
cursor handlers can answer "which output lines belong to this source line" and
the reverse question in constant time.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AnnotatedLine:
    """One generated line with its 1-based position and optional source line."""

    index: int
    text: str
    source_line: int | None = None


@dataclass(frozen=True)
class LineCorrelationIndex:
    """Bidirectional line map between source text and generated output.

    ``source_to_generated`` only holds keys referenced by at least one output
    line, and every tuple lists output lines in output order. The mappings are
    treated as read-only once built.
    """

    source_to_generated: dict[int, tuple[int, ...]] = field(default_factory=dict)
    generated_to_source: dict[int, int] = field(default_factory=dict)

    def generated_lines_for(self, source_line: int) -> tuple[int, ...]:
        return self.source_to_generated.get(source_line, ())

    def source_line_for(self, generated_line: int) -> int | None:
        return self.generated_to_source.get(generated_line)

    def is_empty(self) -> bool:
        return not self.generated_to_source


def build_index(lines: Iterable[AnnotatedLine]) -> LineCorrelationIndex:
    """Build the correlation index in one left-to-right pass.

    Lines without a source annotation are skipped. References to source lines
    outside the original text are kept as-is; consumers decide what to do with
    lines their view does not have.
    """
    fan_out: dict[int, list[int]] = {}
    generated_to_source: dict[int, int] = {}
    for line in lines:
        if line.source_line is None:
            continue
        fan_out.setdefault(line.source_line, []).append(line.index)
        generated_to_source[line.index] = line.source_line

    source_to_generated = {source: tuple(generated) for source, generated in fan_out.items()}
    return LineCorrelationIndex(
        source_to_generated=source_to_generated,
        generated_to_source=generated_to_source,
    )


def _source_line_of(entry: Mapping[str, object]) -> int | None:
    source = entry.get("source")
    if not isinstance(source, Mapping):
        return None
    line = source.get("line")
    # bool is an int subclass; JSON true/false is never a line number.
    if isinstance(line, bool) or not isinstance(line, int):
        return None
    return line


def annotated_lines_from_asm(asm: Sequence[object]) -> list[AnnotatedLine]:
    """Convert the service's ``asm`` array into numbered ``AnnotatedLine`` values.

    Each entry looks like ``{"text": "...", "source": {"line": 3, ...}}``;
    ``source`` and ``source.line`` may be null. Entries that are not objects
    still occupy a line so numbering matches the rendered output.
    """
    out: list[AnnotatedLine] = []
    for position, entry in enumerate(asm, start=1):
        if not isinstance(entry, Mapping):
            out.append(AnnotatedLine(index=position, text=""))
            continue
        text = entry.get("text")
        out.append(
            AnnotatedLine(
                index=position,
                text=text if isinstance(text, str) else "",
                source_line=_source_line_of(entry),
            )
        )
    return out
