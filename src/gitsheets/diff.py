"""Structural diff between two snapshots."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from .schema import (
    CellChangedEntry,
    ColumnAddedEntry,
    ColumnRemovedEntry,
    DiffDocument,
    RowAddedEntry,
    RowRemovedEntry,
)
from .serialize import DeterministicSerializer
from .snapshot import Snapshot
from .table import Table

logger = logging.getLogger(__name__)

MATCH_POSITION = "position"
MATCH_KEY = "key"


class Change(ABC):
    """Base class for a single diff record."""

    @property
    def kind(self) -> str:
        return type(self).__name__

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """Fields of the record, without the variant tag."""

    def to_dict(self) -> Dict[str, Any]:
        """Externally tagged form, e.g. ``{"RowAdded": {...}}``."""
        return {self.kind: self.payload()}


@dataclass
class RowAdded(Change):
    index: int
    data: List[str]

    def payload(self) -> Dict[str, Any]:
        return {"index": self.index, "data": list(self.data)}


@dataclass
class RowRemoved(Change):
    index: int
    data: List[str]

    def payload(self) -> Dict[str, Any]:
        return {"index": self.index, "data": list(self.data)}


@dataclass
class CellChanged(Change):
    row: int
    col: int
    old: str
    new: str

    def payload(self) -> Dict[str, Any]:
        return {"row": self.row, "col": self.col, "old": self.old, "new": self.new}


@dataclass
class ColumnAdded(Change):
    name: str
    index: int

    def payload(self) -> Dict[str, Any]:
        return {"name": self.name, "index": self.index}


@dataclass
class ColumnRemoved(Change):
    name: str
    index: int

    def payload(self) -> Dict[str, Any]:
        return {"name": self.name, "index": self.index}


@dataclass
class DiffSummary:
    """Aggregate counts of a diff."""

    rows_added: int = 0
    rows_removed: int = 0
    rows_modified: int = 0
    columns_added: int = 0
    columns_removed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "rows_added": self.rows_added,
            "rows_removed": self.rows_removed,
            "rows_modified": self.rows_modified,
            "columns_added": self.columns_added,
            "columns_removed": self.columns_removed,
        }


@dataclass
class SnapshotDiff:
    """Changes that turn one snapshot's table into another's."""

    from_id: str
    to_id: str
    summary: DiffSummary = field(default_factory=DiffSummary)
    changes: List[Change] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @classmethod
    def compute(
        cls, source: Snapshot, target: Snapshot, match: str = MATCH_POSITION
    ) -> "SnapshotDiff":
        """Compare two snapshots' tables.

        Columns are compared as sets of header names. Rows are compared by
        position unless ``match="key"`` is requested and both tables carry a
        usable primary key. Positional comparison reports a row inserted near
        the top as a modification of every row after it.
        """
        if match not in (MATCH_POSITION, MATCH_KEY):
            raise ValueError(f"Unknown match mode: {match}")

        diff = cls(from_id=source.id, to_id=target.id)
        diff._compare_columns(source.table, target.table)

        if match == MATCH_KEY and _keys_usable(source.table, target.table):
            diff._compare_rows_by_key(source.table, target.table)
        else:
            if match == MATCH_KEY:
                logger.warning(
                    "Key matching unavailable, falling back to positional comparison",
                    extra={"from": source.id, "to": target.id},
                )
            diff._compare_rows_by_position(source.table, target.table)

        logger.info(
            "Computed diff",
            extra={"from": diff.from_id, "to": diff.to_id, "changes": len(diff.changes), "match": match},
        )
        return diff

    def _compare_columns(self, source: Table, target: Table) -> None:
        source_headers = set(source.headers)
        target_headers = set(target.headers)

        for idx, header in enumerate(target.headers):
            if header not in source_headers:
                self.changes.append(ColumnAdded(name=header, index=idx))
                self.summary.columns_added += 1

        for idx, header in enumerate(source.headers):
            if header not in target_headers:
                self.changes.append(ColumnRemoved(name=header, index=idx))
                self.summary.columns_removed += 1

    def _compare_rows_by_position(self, source: Table, target: Table) -> None:
        max_rows = max(len(source.rows), len(target.rows))

        for idx in range(max_rows):
            old_row = source.rows[idx] if idx < len(source.rows) else None
            new_row = target.rows[idx] if idx < len(target.rows) else None

            if old_row is None:
                self.changes.append(RowAdded(index=idx, data=list(new_row)))
                self.summary.rows_added += 1
            elif new_row is None:
                self.changes.append(RowRemoved(index=idx, data=list(old_row)))
                self.summary.rows_removed += 1
            elif old_row != new_row:
                self._record_modified_row(idx, old_row, new_row)

    def _compare_rows_by_key(self, source: Table, target: Table) -> None:
        source_index = {
            tuple(source.get_row_key(idx)): idx for idx in range(len(source.rows))
        }
        matched = set()

        for idx, new_row in enumerate(target.rows):
            source_idx = source_index.get(tuple(target.get_row_key(idx)))
            if source_idx is None:
                self.changes.append(RowAdded(index=idx, data=list(new_row)))
                self.summary.rows_added += 1
                continue

            matched.add(source_idx)
            old_row = source.rows[source_idx]
            if old_row != new_row:
                self._record_modified_row(idx, old_row, new_row)

        for idx, old_row in enumerate(source.rows):
            if idx not in matched:
                self.changes.append(RowRemoved(index=idx, data=list(old_row)))
                self.summary.rows_removed += 1

    def _record_modified_row(self, row_idx: int, old_row: List[str], new_row: List[str]) -> None:
        # Only positions present in both rows produce cell records.
        self.summary.rows_modified += 1
        for col, (old, new) in enumerate(zip(old_row, new_row)):
            if old != new:
                self.changes.append(CellChanged(row=row_idx, col=col, old=old, new=new))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_id": self.from_id,
            "to_id": self.to_id,
            "summary": self.summary.to_dict(),
            "changes": [change.to_dict() for change in self.changes],
        }

    @classmethod
    def from_document(cls, document: DiffDocument) -> "SnapshotDiff":
        changes: List[Change] = []
        for entry in document.changes:
            if isinstance(entry, RowAddedEntry):
                changes.append(RowAdded(index=entry.RowAdded.index, data=list(entry.RowAdded.data)))
            elif isinstance(entry, RowRemovedEntry):
                changes.append(
                    RowRemoved(index=entry.RowRemoved.index, data=list(entry.RowRemoved.data))
                )
            elif isinstance(entry, CellChangedEntry):
                cell = entry.CellChanged
                changes.append(CellChanged(row=cell.row, col=cell.col, old=cell.old, new=cell.new))
            elif isinstance(entry, ColumnAddedEntry):
                changes.append(ColumnAdded(name=entry.ColumnAdded.name, index=entry.ColumnAdded.index))
            elif isinstance(entry, ColumnRemovedEntry):
                changes.append(
                    ColumnRemoved(name=entry.ColumnRemoved.name, index=entry.ColumnRemoved.index)
                )

        summary = DiffSummary(**document.summary.model_dump())
        return cls(from_id=document.from_id, to_id=document.to_id, summary=summary, changes=changes)

    def save(self, path: Union[str, Path]) -> None:
        DeterministicSerializer().write_document(path, self.to_dict(), kind="diff")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SnapshotDiff":
        document = DeterministicSerializer().read_document(path, DiffDocument)
        return cls.from_document(document)


def _keys_usable(source: Table, target: Table) -> bool:
    """Both tables declare a primary key and no key repeats within a table."""
    for table in (source, target):
        if not table.primary_key:
            return False
        keys = [tuple(table.get_row_key(idx)) for idx in range(len(table.rows))]
        if len(set(keys)) != len(keys):
            logger.debug("Duplicate primary key values", extra={"rows": len(keys)})
            return False
    return True

