"""Pydantic schemas for persisted snapshot and diff documents.

Every field is required on load, including the nullable ones, so a
document missing a key is rejected rather than silently defaulted.
"""

from datetime import datetime
from typing import Annotated, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Index = Annotated[int, Field(ge=0)]


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)


class TableDocument(_Document):
    headers: List[str]
    rows: List[List[str]]
    primary_key: Optional[List[Index]]


class HashesDocument(_Document):
    table_hash: str
    header_hashes: Dict[str, str]
    row_hashes: Optional[List[str]]


class DependencyDocument(_Document):
    name: str
    path: Optional[str]
    hash: str


class SnapshotDocument(_Document):
    """On-disk layout of a snapshot."""

    id: str = Field(..., min_length=1)
    timestamp: datetime
    message: Optional[str]
    table: TableDocument
    hashes: HashesDocument
    dependencies: List[DependencyDocument]


class RowPayload(_Document):
    index: Index
    data: List[str]


class CellPayload(_Document):
    row: Index
    col: Index
    old: str
    new: str


class ColumnPayload(_Document):
    name: str
    index: Index


class RowAddedEntry(_Document):
    RowAdded: RowPayload


class RowRemovedEntry(_Document):
    RowRemoved: RowPayload


class CellChangedEntry(_Document):
    CellChanged: CellPayload


class ColumnAddedEntry(_Document):
    ColumnAdded: ColumnPayload


class ColumnRemovedEntry(_Document):
    ColumnRemoved: ColumnPayload


ChangeEntry = Union[
    RowAddedEntry,
    RowRemovedEntry,
    CellChangedEntry,
    ColumnAddedEntry,
    ColumnRemovedEntry,
]


class SummaryDocument(_Document):
    rows_added: Index
    rows_removed: Index
    rows_modified: Index
    columns_added: Index
    columns_removed: Index


class DiffDocument(_Document):
    """On-disk layout of a snapshot diff."""

    from_id: str
    to_id: str
    summary: SummaryDocument
    changes: List[ChangeEntry]
