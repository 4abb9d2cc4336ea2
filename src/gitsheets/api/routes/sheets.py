"""Snapshot, verify and diff routes for the gitsheets API."""

import logging
from typing import Any, Dict

from fastapi import APIRouter

from ..models import DiffRequest, SnapshotRequest, VerifyRequest
from ..services import SheetsService

router = APIRouter(tags=["sheets"])

logger = logging.getLogger(__name__)

sheets_service = SheetsService()


@router.post("/snapshots")
def create_snapshot(request: SnapshotRequest) -> Dict[str, Any]:
    """Snapshot CSV text and return the snapshot document."""
    logger.info(
        "Received snapshot request",
        extra={"bytes": len(request.csv_text), "primary_key": request.primary_key},
    )
    return sheets_service.create_snapshot(
        csv_text=request.csv_text,
        message=request.message,
        primary_key=request.primary_key,
        delimiter=request.delimiter,
    )


@router.post("/verify")
def verify_snapshot(request: VerifyRequest) -> Dict[str, Any]:
    """Verify the table hash stored in a snapshot document."""
    logger.info("Received verify request", extra={"snapshot_id": request.snapshot.get("id")})
    return sheets_service.verify_snapshot(request.snapshot)


@router.post("/diff")
def create_diff(request: DiffRequest) -> Dict[str, Any]:
    """Diff two snapshot documents."""
    logger.info(
        "Received diff request",
        extra={
            "from_id": request.source.get("id"),
            "to_id": request.target.get("id"),
            "match": request.match,
        },
    )
    result = sheets_service.compute_diff(request.source, request.target, request.match)
    logger.info("Diff request completed", extra={"ok": result["ok"]})
    return result
