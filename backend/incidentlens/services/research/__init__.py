# Research module - keyword extraction, query building and reference lookup
from .keywords import (
    extract_keywords,
    keyword_weights,
    token_weight,
    tokenize,
)
from .query import build_query, MAX_QUERY_LENGTH
from .search_client import (
    SearchClient,
    TavilySearchClient,
    get_search_client,
    rank_results,
    format_references,
    lookup_references,
    NO_RESULTS_MESSAGE,
)

__all__ = [
    "extract_keywords",
    "keyword_weights",
    "token_weight",
    "tokenize",
    "build_query",
    "MAX_QUERY_LENGTH",
    "SearchClient",
    "TavilySearchClient",
    "get_search_client",
    "rank_results",
    "format_references",
    "lookup_references",
    "NO_RESULTS_MESSAGE",
]
