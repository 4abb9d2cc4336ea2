"""FastAPI application for the gitsheets API."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..logging_utils import configure_logging
from ..serialize import DeterministicSerializer
from . import __version__
from .routes import router as api_router

configure_logging()

logger = logging.getLogger(__name__)

_serializer = DeterministicSerializer()

app = FastAPI(
    title="gitsheets API",
    description="Integrity hashes and structural diffs for tabular data",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the same envelope as other errors."""
    errors = [
        {"loc": ".".join(str(part) for part in error.get("loc", ())), "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]
    logger.info(
        "Rejected request body",
        extra={"path": str(request.url.path), "errors": len(errors)},
    )
    return JSONResponse(
        status_code=422,
        content=_serializer.create_error_envelope(
            "INVALID_REQUEST",
            f"{len(errors)} validation error(s) in request body",
            {"errors": errors},
        ),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Envelope for anything the service layer did not catch."""
    logger.error(
        "Unhandled exception",
        extra={"path": str(request.url.path), "exception_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=500,
        content=_serializer.create_error_envelope(
            "INTERNAL_ERROR",
            f"Internal server error: {str(exc)}",
            {"exception_type": type(exc).__name__, "path": str(request.url.path)},
        ),
    )
