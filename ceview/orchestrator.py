"""Compile, format, and tooltip flows as single cooperative tasks.

Each public method spawns one task and returns it immediately. Inside the
task every user prompt and every network call is one suspension point; an
absent prompt answer ends the flow without touching any view, and a failed
request is reported to the user and leaves existing output in place.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from typing import Any

from .config import ExplorerConfig, get_config
from .correlation import build_index
from .diagnostics import parse_diagnostics
from .errors import CompilerExplorerError, RemoteServiceError
from .highlight_sync import HighlightController
from .models import Compiler, Formatter, Language
from .rest import DEFAULT_FORMAT_STYLE, CompilerExplorerClient, create_compile_body, create_format_body
from .tasks import awaitable, spawn, yield_point
from .views import ERROR, WARNING, EditorHost, PromptOptions, View

logger = logging.getLogger(__name__)

OUTPUT_VIEW_NAME = "asm"
OUTPUT_FILETYPE = "asm"
ARCH_VAR = "arch"


def languages_for_extension(languages: Sequence[Language], extension: str) -> list[Language]:
    return [language for language in languages if extension in language.extensions]


class Explorer:
    """Entry points an editor binds to user commands."""

    def __init__(
        self,
        host: EditorHost,
        client: CompilerExplorerClient,
        config: ExplorerConfig | None = None,
        controller: HighlightController | None = None,
    ) -> None:
        self.host = host
        self.client = client
        self.config = config or get_config()
        self.controller = controller or HighlightController(self.config.live_correlation.highlight_style)
        self._select = awaitable(host.prompt_choice)
        self._input = awaitable(host.prompt_text)
        self._compiles_in_flight: set[str] = set()

    def _launch(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task[None]:
        return spawn(coro, on_error=self._report_failure, name=name)

    def _report_failure(self, exc: BaseException) -> None:
        self.host.notify(f"compiler-explorer: unexpected error: {exc}", ERROR)

    def _options(self, kind: str) -> PromptOptions:
        return PromptOptions(
            kind=kind,
            prompt=self.config.prompt_for(kind),
            format_item=self.config.formatter_for(kind),
        )

    async def _choose(self, kind: str, items: Sequence[Any]) -> Any:
        choice = await self._select(list(items), self._options(kind))
        if choice is None:
            logger.debug("%s prompt dismissed", kind)
        return choice

    def compile(self, start: int, finish: int) -> asyncio.Task[None]:
        """Compile lines ``start..finish`` (1-based, inclusive) of the current view."""
        return self._launch(self._compile(self.host.current_view(), start, finish), "compile")

    def format(self) -> asyncio.Task[None]:
        """Format the whole current view in place."""
        return self._launch(self._format(self.host.current_view()), "format")

    def show_tooltip(self) -> asyncio.Task[None]:
        """Show documentation for the opcode under the cursor of an output view."""
        return self._launch(self._show_tooltip(self.host.current_view()), "tooltip")

    async def _compile(self, source_view: View, start: int, finish: int) -> None:
        guard_key = source_view.name
        if self.config.serialize_compiles:
            if guard_key in self._compiles_in_flight:
                self.host.notify(f"A compilation of {guard_key} is already running", WARNING)
                return
            self._compiles_in_flight.add(guard_key)
        try:
            await self._run_compile(source_view, start, finish)
        except CompilerExplorerError as exc:
            self.host.notify(str(exc), ERROR)
        finally:
            self._compiles_in_flight.discard(guard_key)

    async def _run_compile(self, source_view: View, start: int, finish: int) -> None:
        is_full_buffer = start == 1 and finish == source_view.line_count()
        source = "\n".join(source_view.get_lines(start, finish))

        languages = await self.client.languages()
        candidates: Sequence[Language] = languages
        # Only a full buffer has a meaningful file type to infer from.
        if is_full_buffer:
            extension = self.host.file_extension(source_view)
            candidates = languages_for_extension(languages, extension)
            if not candidates:
                self.host.notify(f"File type {extension} not supported by compiler-explorer", ERROR)
                return

        language: Language | None = await self._choose("lang", candidates)
        if language is None:
            return

        compilers = await self.client.compilers(language.id)
        if not compilers:
            self.host.notify(f"No compilers available for {language.name}", ERROR)
            return
        compiler: Compiler | None = await self._choose("compiler", compilers)
        if compiler is None:
            return

        user_arguments = await self._input(self._options("compiler_opts"))
        if user_arguments is None:
            return

        body = create_compile_body(compiler.id, user_arguments, source, lang=language.id)
        logger.debug("compiling %s lines %d-%d with %s", source_view.name, start, finish, compiler.id)
        try:
            result = await self.client.compile(compiler.id, body)
        except RemoteServiceError as exc:
            self.host.notify(f"Compilation failed: {exc.message}", ERROR)
            return

        output_view = self.host.output_view(OUTPUT_VIEW_NAME, OUTPUT_FILETYPE)
        output_view.replace_lines(result.asm_text)
        await yield_point()
        self.host.notify(f"Compilation done {compiler.name}")

        output_view.vars[ARCH_VAR] = compiler.instruction_set

        live = self.config.live_correlation
        if live.enable and is_full_buffer and not (source_view.closed or output_view.closed):
            index = build_index(result.asm)
            self.controller.attach(index, source_view, output_view, highlight_group=live.highlight_style)
        else:
            # Range output or a view closed while compiling: no live correlation.
            self.controller.detach(source_view, output_view)

        self.host.set_diagnostics(source_view, parse_diagnostics(result.stderr, line_offset=start - 1))

    async def _format(self, view: View) -> None:
        try:
            await self._run_format(view)
        except CompilerExplorerError as exc:
            self.host.notify(str(exc), ERROR)

    async def _run_format(self, view: View) -> None:
        source = "\n".join(view.get_lines())

        formatters = await self.client.formatters()
        if not formatters:
            self.host.notify("No formatters available", ERROR)
            return
        formatter: Formatter | None = await self._choose("formatter", formatters)
        if formatter is None:
            return

        style = DEFAULT_FORMAT_STYLE
        if formatter.styles:
            style = await self._choose("formatter_style", formatter.styles)
            if style is None:
                return

        try:
            result = await self.client.format(formatter.type, create_format_body(source, style))
        except RemoteServiceError as exc:
            self.host.notify(f"Formatting failed: {exc.message}", ERROR)
            return

        view.replace_lines(result.lines)
        await yield_point()
        self.host.notify(f"Text formatted using {formatter.name} and style {style}")

    async def _show_tooltip(self, view: View) -> None:
        arch = view.vars.get(ARCH_VAR)
        if not arch:
            self.host.notify("No instruction set known for this view; compile first", WARNING)
            return
        opcode = self.host.word_under_cursor(view)
        if not opcode:
            return
        try:
            doc = await self.client.tooltip(str(arch), opcode)
        except RemoteServiceError as exc:
            self.host.notify(f"No documentation for {opcode}: {exc.message}", WARNING)
            return
        self.host.show_tooltip(doc.tooltip)
