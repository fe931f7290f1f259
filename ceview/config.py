"""Configuration defaults, the persisted JSON file, and runtime overrides.

Values are merged in three layers: built-in defaults, the JSON config file,
then overrides passed to ``setup``. Nested tables merge key by key with the
later layer winning. All file access is defensive: malformed or missing
config falls back to defaults, and wrongly-typed values are ignored.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field, is_dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "ceview"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

PROMPT_KINDS = ("lang", "compiler", "compiler_opts", "formatter", "formatter_style")

DEFAULTS: dict[str, Any] = {
    "url": "https://godbolt.org",
    "prompt": {
        "lang": "Select language> ",
        "compiler": "Select compiler> ",
        "compiler_opts": "Select compiler options> ",
        "formatter": "Select formatter> ",
        "formatter_style": "Select formatter style> ",
    },
    # str.format templates; item fields are available by name, the item itself as {0}.
    "format_item": {
        "lang": "{name}",
        "compiler": "{name}",
        "compiler_opts": "{0}",
        "formatter": "{name}",
        "formatter_style": "{0}",
    },
    "live_correlation": {
        "enable": True,
        "highlight_style": "Cursorline",
    },
    "request_timeout": 30.0,
    "serialize_compiles": False,
}


def render_item(template: str, item: object) -> str:
    """Format a prompt item with ``template``, falling back to ``str(item)``."""
    fields = asdict(item) if is_dataclass(item) and not isinstance(item, type) else {}
    try:
        return template.format(item, **fields)
    except (IndexError, KeyError, ValueError, AttributeError):
        return str(getattr(item, "name", item))


@dataclass(frozen=True)
class LiveCorrelationConfig:
    enable: bool = True
    highlight_style: str = "Cursorline"


@dataclass(frozen=True)
class ExplorerConfig:
    """Resolved configuration consumed by the orchestrators."""

    url: str = DEFAULTS["url"]
    prompt: dict[str, str] = field(default_factory=lambda: dict(DEFAULTS["prompt"]))
    format_item: dict[str, str] = field(default_factory=lambda: dict(DEFAULTS["format_item"]))
    live_correlation: LiveCorrelationConfig = field(default_factory=LiveCorrelationConfig)
    request_timeout: float = DEFAULTS["request_timeout"]
    serialize_compiles: bool = DEFAULTS["serialize_compiles"]

    def prompt_for(self, kind: str) -> str:
        return self.prompt.get(kind, "> ")

    def formatter_for(self, kind: str) -> Callable[[object], str]:
        """Return a one-argument callable that renders items for ``kind`` prompts."""
        template = self.format_item.get(kind, "{0}")
        return lambda item: render_item(template, item)


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``; override values win."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _str_table(value: object, defaults: Mapping[str, str]) -> dict[str, str]:
    table = dict(defaults)
    if not isinstance(value, Mapping):
        return table
    for key, entry in value.items():
        if isinstance(key, str) and isinstance(entry, str):
            table[key] = entry
    return table


def config_from_dict(data: Mapping[str, Any]) -> ExplorerConfig:
    """Build an ``ExplorerConfig``, ignoring keys whose values have the wrong type."""
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        url = DEFAULTS["url"]

    live = data.get("live_correlation")
    live = live if isinstance(live, Mapping) else {}
    enable = live.get("enable")
    highlight_style = live.get("highlight_style")

    timeout = data.get("request_timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        timeout = DEFAULTS["request_timeout"]

    serialize = data.get("serialize_compiles")
    return ExplorerConfig(
        url=url.strip(),
        prompt=_str_table(data.get("prompt"), DEFAULTS["prompt"]),
        format_item=_str_table(data.get("format_item"), DEFAULTS["format_item"]),
        live_correlation=LiveCorrelationConfig(
            enable=enable if isinstance(enable, bool) else DEFAULTS["live_correlation"]["enable"],
            highlight_style=(
                highlight_style
                if isinstance(highlight_style, str) and highlight_style
                else DEFAULTS["live_correlation"]["highlight_style"]
            ),
        ),
        request_timeout=float(timeout),
        serialize_compiles=serialize if isinstance(serialize, bool) else DEFAULTS["serialize_compiles"],
    )


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: Mapping[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks a compile.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("cannot write config %s: %s", CONFIG_PATH, exc)


def resolve_config(overrides: Mapping[str, Any] | None = None) -> ExplorerConfig:
    """Merge defaults, the config file, and ``overrides`` into a config."""
    merged = merge_config(DEFAULTS, load_config())
    if overrides:
        merged = merge_config(merged, overrides)
    return config_from_dict(merged)


_ACTIVE: ExplorerConfig | None = None


def setup(overrides: Mapping[str, Any] | None = None) -> ExplorerConfig:
    """Resolve and install the process-wide active config."""
    global _ACTIVE
    _ACTIVE = resolve_config(overrides)
    return _ACTIVE


def get_config() -> ExplorerConfig:
    """Return the active config, resolving it from disk on first use."""
    if _ACTIVE is None:
        return setup()
    return _ACTIVE
