"""In-memory table model and CSV ingestion for gitsheets."""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .errors import ParseError

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


@dataclass
class Table:
    """Headers plus rows of trimmed text cells.

    Rows are aligned to headers by position only; a row may hold fewer or
    more cells than there are headers. ``primary_key`` lists the column
    indices that identify a row across snapshots.
    """

    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)
    primary_key: Optional[List[int]] = None

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ) -> "Table":
        """Read a CSV file whose first record is the header line."""
        source = str(path)
        logger.debug("Reading CSV", extra={"source": source, "delimiter": delimiter})
        try:
            with open(path, newline="", encoding=encoding) as handle:
                return cls._from_records(handle, source, delimiter)
        except OSError as exc:
            raise ParseError(source, exc.strerror or str(exc)) from exc

    @classmethod
    def from_csv_text(cls, text: str, delimiter: str = ",", source: str = "<text>") -> "Table":
        """Parse CSV content that is already in memory."""
        return cls._from_records(io.StringIO(text, newline=""), source, delimiter)

    @classmethod
    def _from_records(cls, lines: Iterable[str], source: str, delimiter: str) -> "Table":
        reader = csv.reader(lines, delimiter=delimiter, strict=True)
        headers: Optional[List[str]] = None
        rows: List[List[str]] = []

        try:
            for record in reader:
                if not record:
                    continue
                if headers is None:
                    # Excel "CSV UTF-8" exports start with a byte-order mark.
                    record[0] = record[0].lstrip(_BOM)
                    headers = [cell.strip() for cell in record]
                else:
                    rows.append([cell.strip() for cell in record])
        except csv.Error as exc:
            raise ParseError(source, str(exc), line=reader.line_num) from exc
        except UnicodeDecodeError as exc:
            raise ParseError(source, f"decode error: {exc.reason}", line=reader.line_num + 1) from exc

        table = cls(headers=headers or [], rows=rows)
        logger.debug(
            "Parsed table",
            extra={"source": source, "columns": table.column_count, "rows": table.row_count},
        )
        return table

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def set_primary_key(self, column_indices: List[int]) -> None:
        """Declare which columns form the primary key. Indices are not bounds-checked."""
        self.primary_key = list(column_indices)

    def get_row_key(self, row_idx: int) -> Optional[List[str]]:
        """Return the primary-key cells of a row, or None without a key or row.

        Key indices past the end of the row are skipped.
        """
        if self.primary_key is None:
            return None
        if row_idx < 0 or row_idx >= len(self.rows):
            return None

        row = self.rows[row_idx]
        return [row[idx] for idx in self.primary_key if 0 <= idx < len(row)]
