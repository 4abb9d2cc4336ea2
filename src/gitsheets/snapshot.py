"""Snapshots: a hashed, timestamped capture of a table."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .hashing import TableHashes
from .schema import SnapshotDocument
from .serialize import DeterministicSerializer
from .table import Table

logger = logging.getLogger(__name__)

ID_HASH_PREFIX = 8


@dataclass
class Dependency:
    """Reference to an external file or table, pinned by its digest."""

    name: str
    path: Optional[str]
    hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "hash": self.hash}


@dataclass
class Snapshot:
    """A table, its hashes and metadata at one point in time."""

    id: str
    timestamp: datetime
    message: Optional[str]
    table: Table
    hashes: TableHashes
    dependencies: List[Dependency] = field(default_factory=list)

    @classmethod
    def create(cls, table: Table, message: Optional[str] = None) -> "Snapshot":
        """Hash a table and wrap it in a new snapshot.

        The id is the creation time in epoch seconds joined to the first
        eight hex characters of the table digest.
        """
        hashes = TableHashes.compute(table)
        snapshot_id = f"{int(time.time())}-{hashes.table_hash[:ID_HASH_PREFIX]}"
        snapshot = cls(
            id=snapshot_id,
            timestamp=datetime.now(timezone.utc),
            message=message,
            table=table,
            hashes=hashes,
        )
        logger.info(
            "Created snapshot",
            extra={"id": snapshot_id, "rows": table.row_count, "columns": table.column_count},
        )
        return snapshot

    def add_dependency(
        self, name: str, path: Optional[Union[str, Path]], hash: str
    ) -> Dependency:
        """Record a dependency; the caller supplies its digest."""
        dependency = Dependency(name=name, path=str(path) if path is not None else None, hash=hash)
        self.dependencies.append(dependency)
        logger.debug("Added dependency", extra={"id": self.id, "dependency": name})
        return dependency

    def verify(self) -> bool:
        """Recompute hashes and compare the table digest with the stored one.

        Column and row digests are not re-checked.
        """
        computed = TableHashes.compute(self.table)
        valid = computed.table_hash == self.hashes.table_hash
        if not valid:
            logger.warning(
                "Snapshot integrity check failed",
                extra={
                    "id": self.id,
                    "stored": self.hashes.table_hash,
                    "computed": computed.table_hash,
                },
            )
        return valid

    def to_dict(self) -> Dict[str, Any]:
        """Convert the snapshot to its document layout."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "table": {
                "headers": list(self.table.headers),
                "rows": [list(row) for row in self.table.rows],
                "primary_key": (
                    list(self.table.primary_key) if self.table.primary_key is not None else None
                ),
            },
            "hashes": {
                "table_hash": self.hashes.table_hash,
                "header_hashes": dict(self.hashes.header_hashes),
                "row_hashes": (
                    list(self.hashes.row_hashes) if self.hashes.row_hashes is not None else None
                ),
            },
            "dependencies": [dependency.to_dict() for dependency in self.dependencies],
        }

    @classmethod
    def from_document(cls, document: SnapshotDocument) -> "Snapshot":
        """Build a snapshot from a validated document."""
        table = Table(
            headers=list(document.table.headers),
            rows=[list(row) for row in document.table.rows],
            primary_key=(
                list(document.table.primary_key)
                if document.table.primary_key is not None
                else None
            ),
        )
        hashes = TableHashes(
            table_hash=document.hashes.table_hash,
            header_hashes=dict(document.hashes.header_hashes),
            row_hashes=(
                list(document.hashes.row_hashes)
                if document.hashes.row_hashes is not None
                else None
            ),
        )
        return cls(
            id=document.id,
            timestamp=document.timestamp,
            message=document.message,
            table=table,
            hashes=hashes,
            dependencies=[
                Dependency(name=dep.name, path=dep.path, hash=dep.hash)
                for dep in document.dependencies
            ],
        )

    def save(self, path: Union[str, Path]) -> None:
        """Write the snapshot as JSON, atomically."""
        DeterministicSerializer().write_document(path, self.to_dict(), kind="snapshot")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Snapshot":
        """Read a snapshot written by ``save``."""
        document = DeterministicSerializer().read_document(path, SnapshotDocument)
        return cls.from_document(document)
