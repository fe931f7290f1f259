"""Resolve a typed answer against prompt items."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ..fuzzy import fuzzy_match_labels


def item_keys(item: Any, label: str) -> set[str]:
    """Case-folded strings that identify ``item`` exactly (id, name, type, label)."""
    keys = {label.casefold()}
    if isinstance(item, str):
        keys.add(item.casefold())
    for attr in ("id", "name", "type"):
        value = getattr(item, attr, None)
        if isinstance(value, str) and value:
            keys.add(value.casefold())
    return keys


def resolve_choice(items: Sequence[Any], format_item: Callable[[Any], str], answer: str) -> Any:
    """Pick the item meant by ``answer``.

    Exact id/name/label matches win, then a 1-based position, then the best
    fuzzy match. Returns ``None`` when nothing fits.
    """
    answer = answer.strip()
    if not answer or not items:
        return None
    labels = [format_item(item) for item in items]
    folded = answer.casefold()
    for item, label in zip(items, labels):
        if folded in item_keys(item, label):
            return item
    if answer.isdigit():
        position = int(answer)
        return items[position - 1] if 1 <= position <= len(items) else None
    matched = fuzzy_match_labels(answer, labels, limit=1)
    if not matched:
        return None
    return items[matched[0][0]]
