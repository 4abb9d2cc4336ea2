"""Meta endpoints for the gitsheets API."""

import logging

from fastapi import APIRouter

from ...vcs import GitWorkspace
from .. import __version__
from ..models import HealthResponse, VersionResponse

router = APIRouter(tags=["meta"])

logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    git_version = GitWorkspace().version()
    logger.info(
        "Health check invoked",
        extra={"git_available": git_version is not None, "git_version": git_version},
    )
    return HealthResponse(
        status="healthy",
        version=__version__,
        git_available=git_version is not None,
        git_version=git_version,
    )


@router.get("/version", response_model=VersionResponse)
def version_info() -> VersionResponse:
    """Version information endpoint."""
    logger.info("Version endpoint invoked")
    return VersionResponse(version=__version__, api_version="v1")


@router.get("/", include_in_schema=False)
def root() -> dict:
    """Root endpoint providing basic API metadata."""
    logger.debug("Root endpoint served")
    return {
        "name": "gitsheets API",
        "version": __version__,
        "description": "Integrity hashes and structural diffs for tabular data",
        "endpoints": {
            "snapshots": "POST /snapshots - Snapshot CSV text",
            "verify": "POST /verify - Verify a snapshot document",
            "diff": "POST /diff - Diff two snapshot documents",
            "health": "GET /health - Health check",
            "version": "GET /version - Version information",
            "docs": "GET /docs - API documentation",
        },
    }
