"""Table fingerprinting for gitsheets.

Three SHA-256 digests are derived from a table:

* one per column, over the header name followed by that column's cells;
* one per row, over the row's cells;
* one for the whole table, over all headers followed by all cells in
  row-major order.

Values are fed to the hash as raw UTF-8 bytes with no separators, so the
digests are checksums over content, not an unambiguous encoding of it. Two
rows holding the same cell sequence share a row digest wherever they sit.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from itertools import chain
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .errors import PersistenceError
from .table import Table

logger = logging.getLogger(__name__)

_FILE_CHUNK_SIZE = 1024 * 1024


def _digest(values: Iterable[str]) -> str:
    hasher = hashlib.sha256()
    for value in values:
        hasher.update(value.encode("utf-8"))
    return hasher.hexdigest()


def hash_column(header: str, cells: Iterable[str]) -> str:
    """Digest of a header name followed by its column values."""
    return _digest(chain([header], cells))


def hash_row(row: Iterable[str]) -> str:
    """Digest of one row's cells in order."""
    return _digest(row)


def hash_table(headers: List[str], rows: List[List[str]]) -> str:
    """Digest of every header, then every cell row by row."""
    return _digest(chain(headers, chain.from_iterable(rows)))


@dataclass
class TableHashes:
    """Integrity digests of a table at three granularities."""

    table_hash: str
    header_hashes: Dict[str, str] = field(default_factory=dict)
    row_hashes: Optional[List[str]] = None

    @classmethod
    def compute(cls, table: Table) -> "TableHashes":
        """Compute all digests for a table.

        Duplicate header names share one ``header_hashes`` entry; the digest
        of the rightmost such column wins.
        """
        header_hashes: Dict[str, str] = {}
        for idx, header in enumerate(table.headers):
            column = (row[idx] if idx < len(row) else "" for row in table.rows)
            header_hashes[header] = hash_column(header, column)

        hashes = cls(
            table_hash=hash_table(table.headers, table.rows),
            header_hashes=header_hashes,
            row_hashes=[hash_row(row) for row in table.rows],
        )
        logger.debug(
            "Computed table hashes",
            extra={
                "table_hash": hashes.table_hash,
                "columns": len(header_hashes),
                "rows": len(hashes.row_hashes),
            },
        )
        return hashes


def hash_file(path: Union[str, Path]) -> str:
    """SHA-256 of a file's bytes, used to pin external dependencies."""
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as handle:
            for chunk in iter(lambda: handle.read(_FILE_CHUNK_SIZE), b""):
                hasher.update(chunk)
    except OSError as exc:
        raise PersistenceError(str(path), "read", exc.strerror or str(exc)) from exc
    return hasher.hexdigest()
