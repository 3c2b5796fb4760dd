"""Search query construction from keywords and root-cause text."""
from __future__ import annotations

from typing import Iterable, List, Sequence

MAX_QUERY_LENGTH = 100
MIN_ROOT_CAUSE_TOKEN_LENGTH = 4
SITE_HINT = "stackoverflow"


def _dedupe(tokens: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for token in tokens:
        if token and token not in seen:
            seen.add(token)
            unique.append(token)
    return unique


def build_query(keywords: Sequence[str], root_cause: str) -> str:
    """
    Build a bounded search query.

    Keywords come first, then root-cause words longer than three characters,
    then the site hint. An empty string means there is nothing to search for.
    """
    root_terms = [w for w in (root_cause or "").split() if len(w) >= MIN_ROOT_CAUSE_TOKEN_LENGTH]
    query = " ".join(_dedupe([*keywords, *root_terms, SITE_HINT]))[:MAX_QUERY_LENGTH]

    # A token cut by truncation can collide with an earlier one
    tokens = query.split()
    if len(tokens) != len(set(tokens)):
        query = " ".join(_dedupe(tokens))

    return query.strip()
