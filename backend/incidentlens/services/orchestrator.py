import time
import uuid
from typing import Optional

from incidentlens.core.logging import get_logger
from incidentlens.models.schemas import IncidentReport
from incidentlens.services.llm_client import CompletionClient
from incidentlens.services.research import SearchClient
from incidentlens.services.stages import (
    analyze_root_cause, extract_errors, research_solutions, synthesize_solution
)

logger = get_logger(__name__)

DEFAULT_ROOT_CAUSE = "Unable to determine root cause"
DEFAULT_EXTERNAL_CONTEXT = "No external research available"
DEFAULT_SOLUTIONS = "No solutions generated"


class PipelineTimings:
    """Track timing metrics for pipeline stages."""

    def __init__(self):
        self.start_time = time.time()
        self.extraction_ms: float = 0
        self.root_cause_ms: float = 0
        self.research_ms: float = 0
        self.solution_ms: float = 0
        self.total_ms: float = 0

    def log_summary(self, request_id: str):
        self.total_ms = (time.time() - self.start_time) * 1000
        logger.info(
            f"[{request_id}] Pipeline completed - "
            f"extraction: {self.extraction_ms:.1f}ms, "
            f"root_cause: {self.root_cause_ms:.1f}ms, "
            f"research: {self.research_ms:.1f}ms, "
            f"solution: {self.solution_ms:.1f}ms, "
            f"total: {self.total_ms:.1f}ms"
        )


def run_analysis_pipeline(
    log_content: str,
    completion_client: CompletionClient,
    search_client: SearchClient,
    request_id: Optional[str] = None
) -> IncidentReport:
    """
    Run the four analysis stages over one log and build the report.

    Stages:
    1. Extract errors from the log
    2. Infer the root cause from the log and errors
    3. Research related fixes on StackOverflow/GitHub
    4. Synthesize actionable solutions

    Stage failures are absorbed into fallback text. Anything that escapes a
    stage fails the whole run.
    """
    request_id = request_id or str(uuid.uuid4())[:8]
    timings = PipelineTimings()

    logger.info(f"[{request_id}] Starting analysis ({len(log_content)} chars)")

    try:
        # Stage 1: Extract errors
        t0 = time.time()
        extraction = extract_errors(log_content, completion_client)
        timings.extraction_ms = (time.time() - t0) * 1000
        errors = list(extraction.value)

        logger.info(
            f"[{request_id}] Extraction {'ok' if extraction.ok else 'fell back'}: "
            f"{len(errors)} error(s)")

        # Stage 2: Root cause
        t0 = time.time()
        root_cause_result = analyze_root_cause(log_content, errors, completion_client)
        timings.root_cause_ms = (time.time() - t0) * 1000
        root_cause = root_cause_result.value

        logger.info(
            f"[{request_id}] Root cause {'ok' if root_cause_result.ok else 'fell back'}")

        # Stage 3: Research
        t0 = time.time()
        research = research_solutions(errors, root_cause, search_client)
        timings.research_ms = (time.time() - t0) * 1000
        external_context = research.value

        logger.info(
            f"[{request_id}] Research {'ok' if research.ok else 'fell back'}")

        # Stage 4: Solutions
        t0 = time.time()
        solution = synthesize_solution(root_cause, external_context, completion_client)
        timings.solution_ms = (time.time() - t0) * 1000

        logger.info(
            f"[{request_id}] Solution {'ok' if solution.ok else 'fell back'}")

        timings.log_summary(request_id)

        return IncidentReport(
            parsed_errors=errors,
            root_cause=root_cause or DEFAULT_ROOT_CAUSE,
            external_context=external_context or DEFAULT_EXTERNAL_CONTEXT,
            recommended_solutions=solution.value or DEFAULT_SOLUTIONS,
        )

    except Exception as e:
        logger.error(f"[{request_id}] Pipeline failed: {e}", exc_info=True)
        raise
