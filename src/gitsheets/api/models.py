"""Pydantic models for gitsheets API requests and responses."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SnapshotRequest(BaseModel):
    """Request model for the snapshot endpoint."""

    csv_text: str = Field(
        ...,
        description="CSV content; the first record is the header line",
        examples=["ID,Name,Amount\n1,Alice,100\n2,Bob,200\n"],
    )
    message: Optional[str] = Field(
        None,
        description="Snapshot message",
        examples=["Initial import"],
    )
    primary_key: Optional[List[int]] = Field(
        None,
        description="Column indices forming the primary key",
        examples=[[0]],
    )
    delimiter: str = Field(
        ",",
        description="CSV field delimiter",
        min_length=1,
        max_length=1,
    )

    @field_validator("primary_key")
    @classmethod
    def primary_key_must_be_non_negative(cls, v):
        """Column indices cannot be negative."""
        if v is not None and any(idx < 0 for idx in v):
            raise ValueError("primary_key indices must be non-negative")
        return v


class VerifyRequest(BaseModel):
    """Request model for the verify endpoint."""

    snapshot: Dict[str, Any] = Field(..., description="Snapshot document")


class DiffRequest(BaseModel):
    """Request model for the diff endpoint."""

    source: Dict[str, Any] = Field(..., description="Earlier snapshot document")
    target: Dict[str, Any] = Field(..., description="Later snapshot document")
    match: Literal["position", "key"] = Field(
        "position",
        description="Row matching strategy",
    )


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., examples=["healthy"])
    version: str = Field(..., examples=["0.3.0"])
    git_available: bool = Field(..., examples=[True])
    git_version: Optional[str] = Field(None, examples=["2.43.0"])


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(..., examples=["0.3.0"])
    api_version: str = Field(..., examples=["v1"])
    supported_features: list = Field(
        default_factory=lambda: [
            "table_hashing",
            "snapshot_verification",
            "positional_diff",
            "key_diff",
        ]
    )
