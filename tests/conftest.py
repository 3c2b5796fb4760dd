"""
Pytest configuration and shared fixtures.

Provides in-memory completion and search clients so the pipeline and the
API can be exercised without network access.
"""
from typing import List, Optional, Sequence, Union

import pytest

from incidentlens.core.config import settings
from incidentlens.core.exceptions import CompletionError, SearchError
from incidentlens.models.schemas import SearchHit


SAMPLE_LOG = (
    "2024-01-01 ERROR: NullPointerException at line 42\n"
    "2024-01-01 ERROR: TIMEOUT_001 connecting to db"
)


class FakeCompletionClient:
    """
    Scripted completion client.

    Each call consumes the next scripted response; an Exception instance in
    the script is raised instead of returned. Once the script runs out the
    last entry is repeated.
    """

    def __init__(self, responses: Sequence[Union[str, Exception]]):
        self._responses = list(responses)
        self.calls: List[dict] = []

    def complete(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        index = min(len(self.calls), len(self._responses)) - 1
        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        return response


class FakeSearchClient:
    """Returns canned hits, or raises the given error."""

    def __init__(self, hits: Optional[List[SearchHit]] = None, error: Optional[Exception] = None):
        self._hits = hits or []
        self._error = error
        self.queries: List[str] = []

    def search(self, query: str) -> List[SearchHit]:
        self.queries.append(query)
        if self._error is not None:
            raise self._error
        return list(self._hits)


@pytest.fixture
def sample_log() -> str:
    return SAMPLE_LOG


@pytest.fixture
def search_hits() -> List[SearchHit]:
    """Mixed GitHub/StackOverflow hits in service order."""
    return [
        SearchHit(
            title="Connection timeout to database pool",
            content="Increase the pool timeout\nMore details below",
            url="https://github.com/org/repo/issues/12",
        ),
        SearchHit(
            title="NullPointerException when reading config",
            content="Check for null before dereferencing",
            url="https://stackoverflow.com/questions/1",
        ),
        SearchHit(
            title="TIMEOUT_001 on startup",
            content="Raise the connect timeout",
            url="https://github.com/org/other/issues/7",
        ),
        SearchHit(
            title="What is a NullPointerException?",
            content="A NullPointerException is thrown when...\nsecond line",
            url="https://stackoverflow.com/questions/218384",
        ),
    ]


@pytest.fixture
def completion_failure() -> CompletionError:
    return CompletionError("Groq API error: 503")


@pytest.fixture
def search_failure() -> SearchError:
    return SearchError("Tavily API error: 500")


@pytest.fixture
def configured_keys(monkeypatch):
    """Configure all three required credentials."""
    monkeypatch.setattr(settings, "groq_api_key", "test-groq-key")
    monkeypatch.setattr(settings, "tavily_api_key", "test-tavily-key")
    monkeypatch.setattr(settings, "mem0_api_key", "test-mem0-key")
    return settings


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
