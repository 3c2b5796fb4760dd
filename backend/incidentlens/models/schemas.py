from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime, timezone


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Research Models
# ============================================================================

class SearchHit(BaseModel):
    """A raw result returned by the web search service."""
    title: str = ""
    content: str = ""
    url: str = ""


class ReferenceResult(BaseModel):
    """A ranked search result ready to be rendered as context."""
    source_label: str
    title: str
    snippet: str
    url: str


# ============================================================================
# Report Models
# ============================================================================

class IncidentReport(BaseModel):
    """Aggregated output of one analysis run. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    parsed_errors: List[str] = Field(default_factory=list)
    root_cause: str
    external_context: str
    recommended_solutions: str
    resolution_status: Literal["resolved"] = "resolved"


# ============================================================================
# API Request/Response Models
# ============================================================================

class AnalyzeIncidentRequest(BaseModel):
    """Body of POST /api/analyze-incident.

    Required fields are optional here so the route can answer a missing
    field with a 400 instead of the default 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    incident_id: Optional[str] = Field(default=None, alias="incidentId")
    log_content: Optional[str] = Field(default=None, alias="logContent")
    file_id: Optional[str] = Field(default=None, alias="fileId")


class AnalyzeIncidentResponse(BaseModel):
    """Response from POST /api/analyze-incident."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Analysis completed successfully"
    results: IncidentReport
    incident_id: str = Field(alias="incidentId")


class CredentialStatus(BaseModel):
    """Which credentials are configured. Never carries the values."""
    has_groq_key: bool
    has_tavily_key: bool
    has_mem0_key: bool
    runtime: str = "python"


class AnalysisHealthResponse(BaseModel):
    """Response from GET /api/analyze-incident."""
    message: str = "Analysis API is running"
    environment: CredentialStatus
    timestamp: str = Field(default_factory=_utcnow_iso)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    timestamp: str = Field(default_factory=_utcnow_iso)


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    missing_keys: Optional[List[str]] = None
