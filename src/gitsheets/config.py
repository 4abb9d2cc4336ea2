"""Configuration management for gitsheets."""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict

DIFF_FORMATS = ("text", "json", "git")
MATCH_MODES = ("position", "key")


@dataclass(frozen=True)
class SheetsConfig:
    """Configuration for a gitsheets workspace."""

    # Workspace layout
    root: Path = Path(".")
    snapshots_dir: str = "snapshots"
    diffs_dir: str = "diffs"

    # CSV ingestion
    csv_delimiter: str = ","
    csv_encoding: str = "utf-8-sig"

    # Diff defaults
    diff_format: str = "text"
    match_mode: str = "position"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if len(self.csv_delimiter) != 1:
            raise ValueError("csv_delimiter must be a single character")
        if not self.csv_encoding:
            raise ValueError("csv_encoding cannot be empty")
        if self.diff_format not in DIFF_FORMATS:
            raise ValueError(f"diff_format must be one of {', '.join(DIFF_FORMATS)}")
        if self.match_mode not in MATCH_MODES:
            raise ValueError(f"match_mode must be one of {', '.join(MATCH_MODES)}")
        if not self.snapshots_dir or not self.diffs_dir:
            raise ValueError("snapshot and diff directories must be named")

    @property
    def snapshots_path(self) -> Path:
        """Directory holding snapshot documents."""
        return Path(self.root) / self.snapshots_dir

    @property
    def diffs_path(self) -> Path:
        """Directory holding diff documents."""
        return Path(self.root) / self.diffs_dir

    def with_overrides(self, **overrides: Any) -> "SheetsConfig":
        """Return a copy with the given non-None fields replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a plain dictionary for logging and reports."""
        return {
            "root": str(self.root),
            "snapshots_dir": self.snapshots_dir,
            "diffs_dir": self.diffs_dir,
            "csv": {
                "delimiter": self.csv_delimiter,
                "encoding": self.csv_encoding,
            },
            "diff_format": self.diff_format,
            "match_mode": self.match_mode,
        }
