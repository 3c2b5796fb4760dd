"""
The four analysis stages.

Each stage returns a StageResult. Expected failures (completion errors,
unparseable output, search errors) become fallback values; nothing is
raised past a stage boundary.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from incidentlens.core.exceptions import CompletionError
from incidentlens.core.logging import get_logger
from incidentlens.services.llm_client import CompletionClient, extract_json
from incidentlens.services.research import (
    SearchClient, build_query, extract_keywords, lookup_references
)

logger = get_logger(__name__)

EXTRACTION_LOG_CHARS = 4000
ROOT_CAUSE_LOG_CHARS = 2000
SOLUTION_CONTEXT_CHARS = 800

MAX_ERRORS = 10
MAX_SCANNED_ERRORS = 5
MAX_ROOT_CAUSE_ERRORS = 5

NO_ERRORS_MESSAGE = "Log parsing completed - no specific errors identified"
NO_SEARCH_TERMS_MESSAGE = "No valid search terms extracted"

EXTRACTION_SYSTEM_PROMPT = (
    "Extract errors and critical issues from log content. "
    "Return JSON with 'errors' array."
)
ROOT_CAUSE_SYSTEM_PROMPT = (
    "Analyze log content and identify the root cause. Be specific and technical."
)
SOLUTION_SYSTEM_PROMPT = (
    "Generate specific, actionable solutions for incident resolution. "
    "Provide step-by-step instructions."
)


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage: real output, or a placeholder plus the reason."""
    value: Any
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> "StageResult":
        return cls(value=value)

    @classmethod
    def fallback(cls, placeholder: Any, error: str) -> "StageResult":
        return cls(value=placeholder, ok=False, error=error)


def _errors_from_response(content: str) -> Optional[List[str]]:
    """Read the 'errors' array from an extraction response, None if the shape is wrong."""
    payload = extract_json(content)
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return None
    return [e if isinstance(e, str) else str(e) for e in errors[:MAX_ERRORS]]


def _scan_error_lines(content: str) -> List[str]:
    lines = [line for line in content.split("\n") if "error" in line.lower()]
    return lines[:MAX_SCANNED_ERRORS]


def extract_errors(log_content: str, client: CompletionClient) -> StageResult:
    """Stage 1: pull a list of error descriptions out of the log."""
    try:
        content = client.complete(
            EXTRACTION_SYSTEM_PROMPT,
            f"Parse this log content:\n\n{log_content[:EXTRACTION_LOG_CHARS]}",
            temperature=0.1,
            max_tokens=1000
        )
    except CompletionError as e:
        logger.warning(f"Error extraction failed: {e}")
        return StageResult.fallback([f"Log parsing failed: {e}"], str(e))

    errors = _errors_from_response(content)
    if errors:
        return StageResult.success(errors)

    if errors is None:
        logger.info("Extraction response was not structured; scanning lines instead")
        errors = _scan_error_lines(content)
        if errors:
            return StageResult.success(errors)

    return StageResult.fallback([NO_ERRORS_MESSAGE], "no errors identified")


def analyze_root_cause(
    log_content: str,
    errors: Sequence[str],
    client: CompletionClient
) -> StageResult:
    """Stage 2: infer the root cause from the log and extracted errors."""
    error_text = "\n".join(errors[:MAX_ROOT_CAUSE_ERRORS])
    try:
        content = client.complete(
            ROOT_CAUSE_SYSTEM_PROMPT,
            f"Log: {log_content[:ROOT_CAUSE_LOG_CHARS]}\nErrors: {error_text}",
            temperature=0.2,
            max_tokens=400
        )
    except CompletionError as e:
        logger.warning(f"Root cause analysis failed: {e}")
        return StageResult.fallback(f"Root cause analysis failed: {e}", str(e))

    return StageResult.success(content)


def research_solutions(
    errors: Sequence[str],
    root_cause: str,
    client: SearchClient
) -> StageResult:
    """Stage 3: search StackOverflow/GitHub for related fixes."""
    try:
        keywords = extract_keywords([*errors, root_cause])
        query = build_query(keywords, root_cause)
        if not query:
            return StageResult.fallback(NO_SEARCH_TERMS_MESSAGE, "empty search query")

        logger.info(f"Searching references with query: {query!r}")
        return StageResult.success(lookup_references(query, client))
    except Exception as e:
        logger.error(f"Research stage failed: {e}", exc_info=True)
        return StageResult.fallback(f"Research failed: {e}", str(e))


def synthesize_solution(
    root_cause: str,
    external_context: str,
    client: CompletionClient
) -> StageResult:
    """Stage 4: turn the root cause and references into remediation steps."""
    try:
        content = client.complete(
            SOLUTION_SYSTEM_PROMPT,
            f"Root Cause: {root_cause}\n\n"
            f"Context: {external_context[:SOLUTION_CONTEXT_CHARS]}\n\n"
            "Provide solutions:",
            temperature=0.3,
            max_tokens=600
        )
    except CompletionError as e:
        logger.warning(f"Solution generation failed: {e}")
        return StageResult.fallback(f"Solution generation failed: {e}", str(e))

    return StageResult.success(content)
