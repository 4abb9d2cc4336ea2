"""Human-readable rendering of snapshot diffs."""

import json
from typing import List

from .diff import CellChanged, ColumnAdded, ColumnRemoved, RowAdded, RowRemoved, SnapshotDiff
from .serialize import DeterministicSerializer
from .snapshot import Snapshot

_RULE = "=" * 39


def _format_row(data: List[str]) -> str:
    return json.dumps(data, ensure_ascii=False)


def render_text(diff: SnapshotDiff) -> str:
    """Summary banner followed by one line per change."""
    s = diff.summary
    lines = [
        _RULE,
        f"Diff: {diff.from_id} -> {diff.to_id}",
        _RULE,
        "",
        "Summary:",
        f"  Rows:    +{s.rows_added} -{s.rows_removed} ~{s.rows_modified}",
        f"  Columns: +{s.columns_added} -{s.columns_removed}",
    ]

    if diff.changes:
        lines.append("")
        lines.append("Changes:")
        for change in diff.changes:
            if isinstance(change, RowAdded):
                lines.append(f"  + Row {change.index}: {_format_row(change.data)}")
            elif isinstance(change, RowRemoved):
                lines.append(f"  - Row {change.index}: {_format_row(change.data)}")
            elif isinstance(change, CellChanged):
                lines.append(
                    f'  ~ Cell[{change.row},{change.col}]: "{change.old}" -> "{change.new}"'
                )
            elif isinstance(change, ColumnAdded):
                lines.append(f'  + Column {change.index}: "{change.name}"')
            elif isinstance(change, ColumnRemoved):
                lines.append(f'  - Column {change.index}: "{change.name}"')

    return "\n".join(lines) + "\n"


def render_json(diff: SnapshotDiff) -> str:
    return DeterministicSerializer().to_json_string(diff.to_dict(), kind="diff")


def render_git(diff: SnapshotDiff, source: Snapshot, target: Snapshot) -> str:
    """Unified-diff flavoured view listing only cell changes."""
    lines = [
        f"diff --git a/{diff.from_id} b/{diff.to_id}",
        f"--- a/{diff.from_id}",
        f"+++ b/{diff.to_id}",
        "@@ Summary @@",
        f" Rows: {source.table.row_count} -> {target.table.row_count}",
        f" Columns: {source.table.column_count} -> {target.table.column_count}",
    ]
    for change in diff.changes:
        if isinstance(change, CellChanged):
            lines.append(f"-{change.row},{change.col}: {change.old}")
            lines.append(f"+{change.row},{change.col}: {change.new}")
    return "\n".join(lines) + "\n"


def render(diff: SnapshotDiff, source: Snapshot, target: Snapshot, fmt: str) -> str:
    if fmt == "json":
        return render_json(diff)
    if fmt == "git":
        return render_git(diff, source, target)
    if fmt == "text":
        return render_text(diff)
    raise ValueError(f"Unknown diff format: {fmt}")
