"""
Keyword extraction for the research stage.
Weights candidate search terms from error text with simple pattern heuristics.
"""
from __future__ import annotations

import re
from typing import Dict, List, Sequence

# Acronym prefix of a CamelCase word, general word/hash tokens, long digit runs
TOKEN_PATTERN = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z])|[\w#]+|\d{3,}")

ERROR_CODE_PATTERN = re.compile(r"^[a-z]+_?\d+$|^\d{3,}$", re.IGNORECASE)
TECH_TERMS = frozenset({"error", "exception", "fail", "timeout", "undefined", "null"})

ERROR_CODE_WEIGHT = 3.0
TECH_TERM_WEIGHT = 2.0
RARE_WORD_WEIGHT = 1.5
DEFAULT_WEIGHT = 1.0

RARE_WORD_MIN_LENGTH = 9
MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 5

STOP_WORDS = frozenset({"the", "and", "at", "in", "of", "to", "a"})


def tokenize(text: str) -> List[str]:
    """Split text into candidate tokens, case preserved."""
    return [match.group(0) for match in TOKEN_PATTERN.finditer(text)]


def token_weight(token: str) -> float:
    """Weight of a single occurrence. First matching heuristic wins."""
    if ERROR_CODE_PATTERN.match(token):
        return ERROR_CODE_WEIGHT
    if token.lower() in TECH_TERMS:
        return TECH_TERM_WEIGHT
    if len(token) >= RARE_WORD_MIN_LENGTH:
        return RARE_WORD_WEIGHT
    return DEFAULT_WEIGHT


def keyword_weights(texts: Sequence[str]) -> Dict[str, float]:
    """Accumulate weights per lowercase token across all texts."""
    weights: Dict[str, float] = {}
    for text in texts:
        if not text:
            continue
        for token in tokenize(text):
            normalized = token.lower()
            weights[normalized] = weights.get(normalized, 0.0) + token_weight(token)
    return weights


def extract_keywords(texts: Sequence[str], limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Pick the highest-weighted search terms from a set of texts.

    Stopwords and tokens shorter than three characters are dropped. Ties keep
    first-seen order since the sort is stable.
    """
    weights = keyword_weights(texts)
    candidates = [
        (word, weight) for word, weight in weights.items()
        if word not in STOP_WORDS and len(word) >= MIN_KEYWORD_LENGTH
    ]
    candidates.sort(key=lambda item: item[1], reverse=True)
    return [word for word, _ in candidates[:limit]]
