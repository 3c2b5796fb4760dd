import argparse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from incidentlens.api.routes import router, analysis_request_validation_handler
from incidentlens.core.config import settings
from incidentlens.core.cors import setup_cors
from incidentlens.core.logging import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    logger.info("Starting IncidentLens API...")
    if settings.missing_keys:
        logger.warning(f"Missing API keys: {settings.missing_keys}; analysis requests will be rejected")

    yield

    logger.info("Shutting down IncidentLens API...")


# Create FastAPI app
app = FastAPI(
    title="IncidentLens API",
    description="Log-driven incident analysis: errors, root cause, references and solutions",
    version="1.0.0",
    lifespan=lifespan
)

# Setup CORS
setup_cors(app)

# Include API routes
app.include_router(router)
app.add_exception_handler(RequestValidationError, analysis_request_validation_handler)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "IncidentLens API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health"
    }


def run() -> None:
    parser = argparse.ArgumentParser(description="IncidentLens API server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    run()
