import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from incidentlens.core.config import settings
from incidentlens.core.exceptions import ConfigurationError
from incidentlens.core.logging import get_logger
from incidentlens.models.schemas import (
    AnalyzeIncidentRequest, AnalyzeIncidentResponse, AnalysisHealthResponse,
    CredentialStatus, HealthResponse, ErrorResponse
)
from incidentlens.services.llm_client import get_completion_client
from incidentlens.services.orchestrator import run_analysis_pipeline
from incidentlens.services.research import get_search_client

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


MISSING_FIELDS_DETAIL = "Missing required fields: incidentId and logContent"


def _require_credentials() -> None:
    missing = settings.missing_keys
    if missing:
        raise ConfigurationError(missing)


def _configuration_error_response() -> Optional[JSONResponse]:
    """500 response listing missing credentials, or None when all are set."""
    try:
        _require_credentials()
    except ConfigurationError as e:
        logger.error(f"Missing API keys: {e.missing_keys}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(detail=str(e), missing_keys=e.missing_keys).model_dump()
        )
    return None


async def analysis_request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Answer malformed analysis bodies the same way as missing fields.

    Credentials are still checked first. Other routes keep FastAPI's 422.
    """
    if request.url.path != f"{router.prefix}/analyze-incident":
        return await request_validation_exception_handler(request, exc)

    config_error = _configuration_error_response()
    if config_error is not None:
        return config_error

    logger.error(f"Invalid analysis request body: {exc.errors()}")
    return JSONResponse(status_code=400, content=ErrorResponse(detail=MISSING_FIELDS_DETAIL).model_dump())


@router.post(
    "/analyze-incident",
    response_model=AnalyzeIncidentResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        500: {"model": ErrorResponse, "description": "Configuration or processing error"}
    }
)
async def analyze_incident(request: AnalyzeIncidentRequest):
    """
    Analyze the log content attached to an incident.

    Runs error extraction, root cause analysis, reference research and
    solution synthesis, and returns the aggregated report.
    """
    config_error = _configuration_error_response()
    if config_error is not None:
        return config_error

    if not request.incident_id or not request.log_content:
        logger.error(
            f"Missing required fields: has_incident_id={bool(request.incident_id)}, "
            f"has_log_content={bool(request.log_content)}")
        raise HTTPException(
            status_code=400, detail=MISSING_FIELDS_DETAIL)

    request_id = str(uuid.uuid4())[:8]
    logger.info(
        f"[{request_id}] Analyzing incident {request.incident_id[:8]}, "
        f"log length: {len(request.log_content)}")

    try:
        report = await run_in_threadpool(
            run_analysis_pipeline,
            request.log_content,
            get_completion_client(),
            get_search_client(),
            request_id
        )
    except Exception as e:
        logger.error(f"[{request_id}] Analysis failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Analysis failed: {str(e)}")

    return AnalyzeIncidentResponse(results=report, incident_id=request.incident_id)


@router.get("/analyze-incident", response_model=AnalysisHealthResponse)
async def analysis_health():
    """Report which credentials are configured, without their values."""
    return AnalysisHealthResponse(
        environment=CredentialStatus(
            has_groq_key=settings.has_groq_key,
            has_tavily_key=settings.has_tavily_key,
            has_mem0_key=settings.has_mem0_key
        )
    )


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()
