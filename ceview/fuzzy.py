"""Label matching for choice prompts.

Substring hits rank first (earlier and shorter is better); otherwise labels
are scored as in-order subsequence matches that reward consecutive runs and
word-boundary hits. The compiler catalog runs to thousands of entries, so
the substring pass exits early once ``limit`` matches are found in big lists.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterator, Sequence

STRICT_SUBSTRING_ONLY_MIN_LABELS = 5_000


def fuzzy_score(query: str, candidate: str) -> int | None:
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .(":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def fuzzy_match_labels(
    query: str,
    labels: Sequence[str],
    limit: int = 200,
    strict_substring_only_min_labels: int = STRICT_SUBSTRING_ONLY_MIN_LABELS,
) -> list[tuple[int, str, int]]:
    """Return ``(index, label, score)`` for the best matches, best first."""
    max_results = max(1, limit)
    query_folded = query.casefold()
    labels_folded = [label.casefold() for label in labels]

    if len(labels) >= strict_substring_only_min_labels:
        strict_matches: list[tuple[int, str, int]] = []
        for idx, label_folded in enumerate(labels_folded):
            match_idx = label_folded.find(query_folded)
            if match_idx < 0:
                continue
            label = labels[idx]
            strict_matches.append((idx, label, 10_000 - (match_idx * 50) - len(label)))
            if len(strict_matches) >= max_results:
                break
        return strict_matches

    def iter_substring_matches() -> Iterator[tuple[int, int, str, int]]:
        for idx, label in enumerate(labels):
            match_idx = labels_folded[idx].find(query_folded)
            if match_idx < 0:
                continue
            yield (match_idx, len(label), label, idx)

    substring_scored = heapq.nsmallest(
        max_results,
        iter_substring_matches(),
        key=lambda item: (item[0], item[1], item[2]),
    )
    if substring_scored:
        return [
            (idx, label, 10_000 - (match_idx * 50) - label_len)
            for match_idx, label_len, label, idx in substring_scored
        ]

    scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        score = fuzzy_score(query, label)
        if score is None:
            continue
        scored.append((score, len(label), label, idx))
    scored.sort(key=lambda item: (-item[0], item[1], item[2]))
    return [(idx, label, score) for score, _, label, idx in scored[:max_results]]
