"""Typed records for Compiler Explorer API payloads.

``from_json`` constructors accept decoded JSON and coerce missing or
wrongly-typed fields to empty values instead of raising.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .correlation import AnnotatedLine, annotated_lines_from_asm


def _str(data: Mapping[str, object], key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _str_list(data: Mapping[str, object], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class Language:
    id: str
    name: str
    extensions: tuple[str, ...] = ()
    monaco: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> Language:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            extensions=_str_list(data, "extensions"),
            monaco=_str(data, "monaco"),
        )


@dataclass(frozen=True)
class Compiler:
    id: str
    name: str
    lang: str = ""
    compiler_type: str = ""
    instruction_set: str = ""
    semver: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> Compiler:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            lang=_str(data, "lang"),
            compiler_type=_str(data, "compilerType"),
            instruction_set=_str(data, "instructionSet"),
            semver=_str(data, "semver"),
        )


@dataclass(frozen=True)
class Formatter:
    type: str
    name: str
    exe: str = ""
    styles: tuple[str, ...] = ()
    version: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> Formatter:
        return cls(
            type=_str(data, "type"),
            name=_str(data, "name"),
            exe=_str(data, "exe"),
            styles=_str_list(data, "styles"),
            version=_str(data, "version"),
        )


@dataclass(frozen=True)
class CompileResult:
    """Compiler output: annotated asm lines plus raw stdout/stderr entries."""

    code: int
    asm: list[AnnotatedLine] = field(default_factory=list)
    stdout: list[dict[str, object]] = field(default_factory=list)
    stderr: list[dict[str, object]] = field(default_factory=list)

    @property
    def asm_text(self) -> list[str]:
        return [line.text for line in self.asm]

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> CompileResult:
        code = data.get("code")
        asm = data.get("asm")
        return cls(
            code=code if isinstance(code, int) and not isinstance(code, bool) else 0,
            asm=annotated_lines_from_asm(asm if isinstance(asm, list) else []),
            stdout=_entries(data.get("stdout")),
            stderr=_entries(data.get("stderr")),
        )


def _entries(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [dict(entry) for entry in value if isinstance(entry, Mapping)]


@dataclass(frozen=True)
class FormatResult:
    answer: str
    exit_code: int = 0

    @property
    def lines(self) -> list[str]:
        return self.answer.split("\n")

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> FormatResult:
        exit_code = data.get("exit")
        return cls(
            answer=_str(data, "answer"),
            exit_code=exit_code if isinstance(exit_code, int) and not isinstance(exit_code, bool) else 0,
        )


@dataclass(frozen=True)
class AsmDoc:
    tooltip: str
    html: str = ""
    url: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> AsmDoc:
        return cls(tooltip=_str(data, "tooltip"), html=_str(data, "html"), url=_str(data, "url"))
