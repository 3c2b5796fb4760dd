"""
Reference lookup against the web search service.

Searches are restricted to StackOverflow and GitHub; StackOverflow hits are
listed first and every hit is rendered as a short text block for the
solution stage.
"""
from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from incidentlens.core.config import settings
from incidentlens.core.exceptions import SearchError
from incidentlens.core.logging import get_logger
from incidentlens.models.schemas import ReferenceResult, SearchHit

logger = get_logger(__name__)

QA_DOMAIN = "stackoverflow.com"
CODE_HOST_DOMAIN = "github.com"
SEARCH_DOMAINS = [QA_DOMAIN, CODE_HOST_DOMAIN]

QA_LABEL = "StackOverflow"
CODE_HOST_LABEL = "GitHub"

MAX_RESULTS = 5
SEARCH_DEPTH = "advanced"

NO_RESULTS_MESSAGE = "No relevant solutions found"
UNEXPECTED_PAYLOAD_MESSAGE = "Tavily API returned an unexpected payload"


class SearchClient(Protocol):
    def search(self, query: str) -> List[SearchHit]:
        ...


class TavilySearchClient:
    """Tavily search API client. One POST per query, no retries."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.tavily.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/search"
        self._timeout = timeout
        self._http_client = http_client

    def search(self, query: str) -> List[SearchHit]:
        payload = {
            "api_key": self._api_key,
            "query": query,
            "search_depth": SEARCH_DEPTH,
            "include_domains": SEARCH_DOMAINS,
            "max_results": MAX_RESULTS,
            "include_answer": True,
        }

        try:
            if self._http_client is not None:
                response = self._http_client.post(self._url, json=payload, timeout=self._timeout)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise SearchError(f"Tavily request failed: {e}") from e

        if not response.is_success:
            raise SearchError(f"Tavily API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise SearchError("Tavily API returned invalid JSON") from e
        if not isinstance(data, dict):
            raise SearchError(UNEXPECTED_PAYLOAD_MESSAGE)

        results = data.get("results") or []
        if not isinstance(results, list):
            raise SearchError(UNEXPECTED_PAYLOAD_MESSAGE)

        try:
            return [
                SearchHit(
                    title=item.get("title") or "",
                    content=item.get("content") or "",
                    url=item.get("url") or "",
                )
                for item in results
                if isinstance(item, dict)
            ]
        except ValidationError as e:
            raise SearchError(UNEXPECTED_PAYLOAD_MESSAGE) from e


def get_search_client() -> TavilySearchClient:
    """Build the search client from settings."""
    return TavilySearchClient(
        api_key=settings.tavily_api_key,
        base_url=settings.tavily_base_url,
        timeout=settings.request_timeout_seconds
    )


def _is_qa_hit(hit: SearchHit) -> bool:
    return QA_DOMAIN in hit.url


def rank_results(hits: Sequence[SearchHit], limit: int = MAX_RESULTS) -> List[ReferenceResult]:
    """
    Stable partition: StackOverflow hits first, then everything else.

    Order inside each partition is the order the service returned.
    """
    qa_hits = [h for h in hits if _is_qa_hit(h)]
    other_hits = [h for h in hits if not _is_qa_hit(h)]

    return [
        ReferenceResult(
            source_label=QA_LABEL if _is_qa_hit(hit) else CODE_HOST_LABEL,
            title=hit.title,
            snippet=hit.content.split("\n")[0],
            url=hit.url,
        )
        for hit in (qa_hits + other_hits)[:limit]
    ]


def format_references(results: Sequence[ReferenceResult]) -> str:
    """Render results as blank-line separated blocks."""
    return "\n\n".join(
        f"{r.source_label} | {r.title}\n{r.snippet}\n{r.url}"
        for r in results
    )


def lookup_references(query: str, client: SearchClient) -> str:
    """
    Search for references and return them as a context string.

    Never raises for search failures; the failure is described in the
    returned text instead.
    """
    try:
        hits = client.search(query)
    except SearchError as e:
        logger.warning(f"Reference lookup failed: {e}")
        return f"Research failed: {e}"

    if not hits:
        return NO_RESULTS_MESSAGE

    results = rank_results(hits)
    logger.info(f"Reference lookup returned {len(hits)} hits, kept {len(results)}")
    return format_references(results)
