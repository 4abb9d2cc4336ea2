"""Service layer for the gitsheets API."""

import logging
from typing import Any, Callable, Dict, List, Optional

from ...diff import SnapshotDiff
from ...errors import GitSheetsError
from ...schema import SnapshotDocument
from ...serialize import DeterministicSerializer
from ...snapshot import Snapshot
from ...table import Table

logger = logging.getLogger(__name__)


class SheetsService:
    """Wraps the core entry points in success and error envelopes."""

    def __init__(self) -> None:
        self.serializer = DeterministicSerializer()

    def _envelope(self, operation: str, work: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        try:
            payload = work()
        except GitSheetsError as exc:
            logger.warning(
                "Known gitsheets error",
                extra={"operation": operation, "code": exc.code},
            )
            return self.serializer.create_error_envelope(exc.code, exc.message, exc.details)
        except Exception as exc:  # pragma: no cover
            logger.exception("Unexpected error", extra={"operation": operation})
            return self.serializer.create_error_envelope(
                "INTERNAL_ERROR",
                f"Internal error: {str(exc)}",
                {"exception_type": type(exc).__name__},
            )
        return self.serializer.create_success_envelope(payload)

    def _load_snapshot(self, payload: Dict[str, Any], source: str) -> Snapshot:
        document = self.serializer.parse_payload(payload, SnapshotDocument, source)
        return Snapshot.from_document(document)

    def create_snapshot(
        self,
        csv_text: str,
        message: Optional[str] = None,
        primary_key: Optional[List[int]] = None,
        delimiter: str = ",",
    ) -> Dict[str, Any]:
        """Parse CSV text and return the new snapshot document."""

        def work() -> Dict[str, Any]:
            table = Table.from_csv_text(csv_text, delimiter=delimiter, source="csv_text")
            if primary_key:
                table.set_primary_key(primary_key)
            return Snapshot.create(table, message).to_dict()

        return self._envelope("snapshot", work)

    def verify_snapshot(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """Check a snapshot document's stored table hash against its table."""

        def work() -> Dict[str, Any]:
            loaded = self._load_snapshot(snapshot, "snapshot")
            return {
                "id": loaded.id,
                "valid": loaded.verify(),
                "table_hash": loaded.hashes.table_hash,
            }

        return self._envelope("verify", work)

    def compute_diff(
        self, source: Dict[str, Any], target: Dict[str, Any], match: str = "position"
    ) -> Dict[str, Any]:
        """Diff two snapshot documents."""

        def work() -> Dict[str, Any]:
            diff = SnapshotDiff.compute(
                self._load_snapshot(source, "source"),
                self._load_snapshot(target, "target"),
                match=match,
            )
            return diff.to_dict()

        return self._envelope("diff", work)
