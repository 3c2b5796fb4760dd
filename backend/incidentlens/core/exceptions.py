"""
Exception types shared by the API and the analysis pipeline.

Completion and search failures are contained inside the pipeline stages;
configuration errors stop a request before the pipeline starts.
"""
from typing import List, Optional


class IncidentLensError(Exception):
    """Base exception for IncidentLens failures."""
    pass


class ConfigurationError(IncidentLensError):
    """Raised when required credentials are missing."""

    def __init__(self, missing_keys: List[str], message: Optional[str] = None):
        self.missing_keys = list(missing_keys)
        super().__init__(message or "Server configuration error: Missing API keys")


class CompletionError(IncidentLensError):
    """Raised when the completion service call fails (transport or non-2xx)."""
    pass


class SearchError(IncidentLensError):
    """Raised when the web search call fails (transport or non-2xx)."""
    pass
