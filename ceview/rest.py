"""Async client for the Compiler Explorer REST API.

Every call is one HTTP round trip through ``httpx.AsyncClient``. Failures of
any kind (transport, HTTP status, undecodable body, service-reported error)
raise ``RemoteServiceError`` carrying the most useful message available.
Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .errors import RemoteServiceError
from .models import AsmDoc, CompileResult, Compiler, Formatter, FormatResult, Language

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://godbolt.org"
DEFAULT_TIMEOUT = 30.0
DEFAULT_FORMAT_STYLE = "__DefaultStyle"

LANGUAGE_FIELDS = "id,name,extensions,monaco"
COMPILER_FIELDS = "id,name,lang,compilerType,semver,instructionSet"


def create_compile_body(
    compiler_id: str,
    user_arguments: str,
    source: str,
    lang: str | None = None,
) -> dict[str, object]:
    """Build the JSON body for ``POST /api/compiler/{id}/compile``."""
    body: dict[str, object] = {
        "source": source,
        "compiler": compiler_id,
        "options": {
            "userArguments": user_arguments,
            "compilerOptions": {"skipAsm": False, "executorRequest": False},
            "filters": {
                "binary": False,
                "commentOnly": True,
                "demangle": True,
                "directives": True,
                "execute": False,
                "intel": True,
                "labels": True,
                "libraryCode": True,
                "trim": False,
            },
            "tools": [],
            "libraries": [],
        },
        "allowStoreCodeDebug": True,
    }
    if lang:
        body["lang"] = lang
    return body


def create_format_body(source: str, style: str = DEFAULT_FORMAT_STYLE) -> dict[str, object]:
    """Build the JSON body for ``POST /api/format/{formatter}``."""
    return {
        "source": source,
        "base": style,
        "useSpaces": True,
        "tabWidth": 4,
    }


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] if text else response.reason_phrase or "request failed"
    if isinstance(payload, dict):
        for key in ("error", "message", "answer"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or "request failed"


class CompilerExplorerClient:
    """Thin typed wrapper over the Compiler Explorer endpoints.

    Use as an async context manager, or call ``aclose`` when done. ``transport``
    lets callers substitute an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> CompilerExplorerClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("%s %s%s", method, self.url, path)
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteServiceError(f"Request to {self.url} timed out", endpoint=path) from exc
        except httpx.HTTPError as exc:
            raise RemoteServiceError(f"Cannot reach {self.url}: {exc}", endpoint=path) from exc

        if response.status_code >= 400:
            raise RemoteServiceError(_error_message(response), status=response.status_code, endpoint=path)
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteServiceError(
                f"Unexpected non-JSON response from {path}",
                status=response.status_code,
                endpoint=path,
            ) from exc
        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            raise RemoteServiceError(payload["error"], status=response.status_code, endpoint=path)
        return payload

    @staticmethod
    def _objects(payload: Any, path: str) -> list[dict[str, object]]:
        if not isinstance(payload, list):
            raise RemoteServiceError(f"Expected a list from {path}", endpoint=path)
        return [item for item in payload if isinstance(item, dict)]

    async def languages(self) -> list[Language]:
        path = "/api/languages"
        payload = await self._request("GET", path, params={"fields": LANGUAGE_FIELDS})
        return [Language.from_json(item) for item in self._objects(payload, path)]

    async def compilers(self, lang_id: str) -> list[Compiler]:
        path = f"/api/compilers/{quote(lang_id, safe='')}"
        payload = await self._request("GET", path, params={"fields": COMPILER_FIELDS})
        return [Compiler.from_json(item) for item in self._objects(payload, path)]

    async def compile(self, compiler_id: str, body: dict[str, object]) -> CompileResult:
        path = f"/api/compiler/{quote(compiler_id, safe='')}/compile"
        payload = await self._request("POST", path, json=body)
        if not isinstance(payload, dict):
            raise RemoteServiceError(f"Expected an object from {path}", endpoint=path)
        return CompileResult.from_json(payload)

    async def formatters(self) -> list[Formatter]:
        path = "/api/formats"
        payload = await self._request("GET", path)
        return [Formatter.from_json(item) for item in self._objects(payload, path)]

    async def format(self, formatter_type: str, body: dict[str, object]) -> FormatResult:
        path = f"/api/format/{quote(formatter_type, safe='')}"
        payload = await self._request("POST", path, json=body)
        if not isinstance(payload, dict):
            raise RemoteServiceError(f"Expected an object from {path}", endpoint=path)
        result = FormatResult.from_json(payload)
        if result.exit_code != 0:
            raise RemoteServiceError(result.answer or f"{formatter_type} exited with {result.exit_code}", endpoint=path)
        return result

    async def tooltip(self, arch: str, opcode: str) -> AsmDoc:
        path = f"/api/asm/{quote(arch, safe='')}/{quote(opcode, safe='')}"
        payload = await self._request("GET", path)
        if not isinstance(payload, dict):
            raise RemoteServiceError(f"Expected an object from {path}", endpoint=path)
        return AsmDoc.from_json(payload)
