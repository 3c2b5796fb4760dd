"""
Unit tests for the individual analysis stages and their fallbacks.
"""

import json

from incidentlens.services import stages
from incidentlens.services.stages import (
    NO_ERRORS_MESSAGE,
    NO_SEARCH_TERMS_MESSAGE,
    analyze_root_cause,
    extract_errors,
    research_solutions,
    synthesize_solution,
)

from conftest import FakeCompletionClient, FakeSearchClient


def test_extraction_reads_errors_array():
    client = FakeCompletionClient([json.dumps({"errors": ["db timeout", "null pointer"]})])
    result = extract_errors("log", client)

    assert result.ok
    assert result.value == ["db timeout", "null pointer"]


def test_extraction_truncates_log_and_caps_errors():
    many = [f"error {i}" for i in range(15)]
    client = FakeCompletionClient([json.dumps({"errors": many})])
    result = extract_errors("x" * 5000, client)

    assert len(result.value) == 10
    user_prompt = client.calls[0]["user_prompt"]
    assert user_prompt == "Parse this log content:\n\n" + "x" * 4000
    assert client.calls[0]["temperature"] == 0.1
    assert client.calls[0]["max_tokens"] == 1000


def test_extraction_coerces_non_string_entries():
    client = FakeCompletionClient([json.dumps({"errors": [{"code": 500}, 42]})])
    assert extract_errors("log", client).value == ["{'code': 500}", "42"]


def test_extraction_falls_back_to_line_scan():
    content = "\n".join([
        "Summary of issues:",
        "- Error: disk full",
        "- warning: slow query",
        "- ERROR connecting to db",
    ] + [f"- error {i}" for i in range(5)])
    result = extract_errors("log", FakeCompletionClient([content]))

    assert result.ok
    assert result.value == [
        "- Error: disk full",
        "- ERROR connecting to db",
        "- error 0",
        "- error 1",
        "- error 2",
    ]


def test_extraction_wrong_shape_uses_line_scan():
    result = extract_errors("log", FakeCompletionClient(['{"errors": "error: not a list"}']))
    assert result.value == ['{"errors": "error: not a list"}']


def test_extraction_without_any_errors_uses_default_message():
    result = extract_errors("log", FakeCompletionClient(["Everything looks healthy."]))

    assert not result.ok
    assert result.value == [NO_ERRORS_MESSAGE]


def test_extraction_empty_errors_array_uses_default_message():
    result = extract_errors("log", FakeCompletionClient(['{"errors": []}']))
    assert result.value == [NO_ERRORS_MESSAGE]


def test_extraction_completion_failure_becomes_single_entry(completion_failure):
    result = extract_errors("log", FakeCompletionClient([completion_failure]))

    assert not result.ok
    assert result.value == ["Log parsing failed: Groq API error: 503"]


def test_root_cause_prompt_uses_truncated_log_and_first_five_errors():
    client = FakeCompletionClient(["Pool exhausted"])
    errors = [f"e{i}" for i in range(8)]
    result = analyze_root_cause("y" * 3000, errors, client)

    assert result.value == "Pool exhausted"
    assert client.calls[0]["user_prompt"] == "Log: " + "y" * 2000 + "\nErrors: e0\ne1\ne2\ne3\ne4"
    assert client.calls[0]["max_tokens"] == 400


def test_root_cause_failure_returns_description(completion_failure):
    result = analyze_root_cause("log", ["e"], FakeCompletionClient([completion_failure]))

    assert not result.ok
    assert result.value == "Root cause analysis failed: Groq API error: 503"


def test_research_searches_with_built_query(search_hits):
    search = FakeSearchClient(hits=search_hits)
    result = research_solutions(["ERROR: TIMEOUT_001 connecting to db"], "Database pool exhausted", search)

    assert result.ok
    assert len(search.queries) == 1
    query = search.queries[0]
    assert query.startswith("timeout_001 error connecting")
    assert query.endswith("stackoverflow")
    assert result.value.startswith("StackOverflow | ")


def test_research_empty_query_skips_lookup(monkeypatch):
    monkeypatch.setattr(stages, "build_query", lambda keywords, root_cause: "")
    search = FakeSearchClient(hits=[])

    result = research_solutions(["error"], "cause", search)

    assert result.value == NO_SEARCH_TERMS_MESSAGE
    assert search.queries == []


def test_research_contains_unexpected_failures(monkeypatch):
    def explode(texts):
        raise RuntimeError("tokenizer broke")

    monkeypatch.setattr(stages, "extract_keywords", explode)
    result = research_solutions(["error"], "cause", FakeSearchClient())

    assert not result.ok
    assert result.value == "Research failed: tokenizer broke"


def test_solution_prompt_uses_first_800_context_chars():
    client = FakeCompletionClient(["1. Restart the pool"])
    result = synthesize_solution("Pool exhausted", "c" * 1000, client)

    assert result.value == "1. Restart the pool"
    assert client.calls[0]["user_prompt"] == (
        "Root Cause: Pool exhausted\n\nContext: " + "c" * 800 + "\n\nProvide solutions:"
    )
    assert client.calls[0]["temperature"] == 0.3


def test_solution_failure_returns_description(completion_failure):
    result = synthesize_solution("cause", "context", FakeCompletionClient([completion_failure]))
    assert result.value == "Solution generation failed: Groq API error: 503"


def test_extraction_deeply_nested_response_goes_to_line_scan():
    nested = "[" * 100000 + "]" * 100000
    result = extract_errors("log", FakeCompletionClient([nested]))

    assert result.value == [NO_ERRORS_MESSAGE]


def test_extraction_deeply_nested_response_with_error_lines():
    content = "error: stack overflow in parser\n" + "[" * 100000 + "]" * 100000
    result = extract_errors("log", FakeCompletionClient([content]))

    assert result.ok
    assert result.value == ["error: stack overflow in parser"]
