"""Main CLI entry point for gitsheets."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DIFF_FORMATS, MATCH_MODES, SheetsConfig
from .diff import SnapshotDiff
from .errors import GitSheetsError
from .hashing import hash_file
from .logging_utils import configure_logging
from .report import render
from .serialize import DeterministicSerializer
from .settings import load_config
from .snapshot import Snapshot
from .table import Table
from .vcs import GitWorkspace

logger = logging.getLogger(__name__)

GITIGNORE_TEMPLATE = """
# gitsheets specific
*.csv
*.xlsx
*.xls
*.tmp

# Keep snapshots and diffs
!snapshots/
!diffs/
"""

README_TEMPLATE = """# gitsheets repository

This directory is managed by gitsheets for version control of spreadsheets.

## Structure

- `snapshots/` - Snapshot files (.json)
- `diffs/` - Diff files (.json)

## Usage

```bash
gitsheets snapshot data.csv -m "Initial import"
gitsheets diff snapshots/data_A.json snapshots/data_B.json
gitsheets verify snapshots/data_A.json
gitsheets log
```
"""


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="gitsheets",
        description="Version control for spreadsheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gitsheets init
  gitsheets snapshot sales.csv -m "Initial import" -k 0
  gitsheets diff snapshots/sales_A.json snapshots/sales_B.json --format git
  gitsheets verify snapshots/sales_A.json
        """,
    )
    parser.add_argument(
        "--root",
        help="Workspace root holding snapshots/ and diffs/ (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialize a gitsheets repository")
    init_parser.add_argument(
        "-p", "--path",
        default=".",
        help="Directory to initialize (default: current directory)",
    )

    snapshot_parser = subparsers.add_parser("snapshot", help="Snapshot a CSV file")
    snapshot_parser.add_argument("file", help="Path to the CSV file")
    snapshot_parser.add_argument("-m", "--message", help="Snapshot message")
    snapshot_parser.add_argument(
        "-k", "--primary-key",
        help="Primary key column indices, comma-separated (e.g. 0,2)",
    )
    snapshot_parser.add_argument(
        "-d", "--dependency",
        action="append",
        default=[],
        metavar="NAME=PATH",
        help="Record a file this table depends on (repeatable)",
    )
    snapshot_parser.add_argument(
        "-c", "--commit",
        action="store_true",
        help="Add and commit the snapshot to git",
    )
    snapshot_parser.add_argument("--delimiter", help="CSV field delimiter")
    snapshot_parser.add_argument("--encoding", help="CSV file encoding")

    diff_parser = subparsers.add_parser("diff", help="Show differences between two snapshots")
    diff_parser.add_argument("source", help="Earlier snapshot file")
    diff_parser.add_argument("target", help="Later snapshot file")
    diff_parser.add_argument(
        "-f", "--format",
        choices=DIFF_FORMATS,
        help="Output format (default: text)",
    )
    diff_parser.add_argument(
        "--match",
        choices=MATCH_MODES,
        help="Row matching: by position or by primary key (default: position)",
    )
    diff_parser.add_argument("-o", "--output", help="Also save the diff JSON to this file")

    verify_parser = subparsers.add_parser("verify", help="Verify snapshot integrity")
    verify_parser.add_argument("snapshot", help="Snapshot file to verify")

    subparsers.add_parser("status", help="Show workspace status")

    log_parser = subparsers.add_parser("log", help="List snapshots, newest first")
    log_parser.add_argument("-n", "--limit", type=int, help="Number of snapshots to show")

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command line arguments."""
    if args.command == "log" and args.limit is not None and args.limit < 0:
        raise ValueError("--limit cannot be negative")
    if args.command == "snapshot":
        for spec in args.dependency:
            if not spec.strip():
                raise ValueError("--dependency cannot be empty")


def create_config(args: argparse.Namespace, base: Optional[SheetsConfig] = None) -> SheetsConfig:
    """Create configuration from environment defaults and command line arguments."""
    config = base or load_config()
    return config.with_overrides(
        root=Path(args.root) if args.root else None,
        csv_delimiter=getattr(args, "delimiter", None),
        csv_encoding=getattr(args, "encoding", None),
        diff_format=getattr(args, "format", None),
        match_mode=getattr(args, "match", None),
    )


def parse_primary_key(value: Optional[str]) -> List[int]:
    """Parse "0,2" into column indices; entries that are not integers are ignored."""
    if not value:
        return []
    indices = []
    for part in value.split(","):
        part = part.strip()
        if part.isdigit():
            indices.append(int(part))
    return indices


def parse_dependency(spec: str) -> Tuple[str, str]:
    """Split NAME=PATH; a bare PATH is named after its file name."""
    if "=" in spec:
        name, path = spec.split("=", 1)
        return name.strip(), path.strip()
    path = spec.strip()
    return Path(path).name, path


def init_repository(path: Path, config: SheetsConfig) -> int:
    print(f"Initializing gitsheets repository at {path}")

    snapshots_dir = path / config.snapshots_dir
    diffs_dir = path / config.diffs_dir
    snapshots_dir.mkdir(parents=True, exist_ok=True)
    diffs_dir.mkdir(parents=True, exist_ok=True)
    print(f"Created {config.snapshots_dir}/ directory")
    print(f"Created {config.diffs_dir}/ directory")

    workspace = GitWorkspace(path)
    if not workspace.has_repository():
        print("Initializing git repository...")
        workspace.init()

    for name, content in ((".gitignore", GITIGNORE_TEMPLATE), ("README.md", README_TEMPLATE)):
        target = path / name
        if target.exists():
            print(f"Kept existing {name}")
            continue
        target.write_text(content, encoding="utf-8")
        print(f"Created {name}")

    print("\nRepository initialized. Try:")
    print('  gitsheets snapshot <file.csv> -m "First snapshot"')
    return 0


def create_snapshot(args: argparse.Namespace, config: SheetsConfig) -> int:
    source = Path(args.file)
    print(f"Creating snapshot of {source}")

    table = Table.from_csv(source, delimiter=config.csv_delimiter, encoding=config.csv_encoding)

    indices = parse_primary_key(args.primary_key)
    if indices:
        table.set_primary_key(indices)
        names = [table.headers[i] if i < len(table.headers) else "?" for i in indices]
        print(f"Set primary key: columns {', '.join(names)}")

    snapshot = Snapshot.create(table, args.message)

    for spec in args.dependency:
        name, path = parse_dependency(spec)
        snapshot.add_dependency(name, path, hash_file(path))
        print(f"Recorded dependency {name} ({path})")

    snapshots_dir = config.snapshots_path
    snapshots_dir.mkdir(parents=True, exist_ok=True)
    snapshot_path = snapshots_dir / f"{source.stem}_{snapshot.id}.json"
    snapshot.save(snapshot_path)

    print(f"Snapshot saved: {snapshot_path}")
    print(f"  ID: {snapshot.id}")
    print(f"  Rows: {table.row_count}")
    print(f"  Columns: {table.column_count}")
    print(f"  Table hash: {snapshot.hashes.table_hash[:16]}...")

    commit_message = args.message or f"Snapshot: {snapshot_path.name}"
    if args.commit:
        print("\nCommitting to git...")
        workspace = GitWorkspace(config.root)
        workspace.add([snapshot_path.resolve().relative_to(Path(config.root).resolve())])
        workspace.commit(commit_message)
        print("Committed to git")
    else:
        print("\nTo commit to git:")
        print(f"  git add {snapshot_path}")
        print(f'  git commit -m "{commit_message}"')
    return 0


def show_diff(args: argparse.Namespace, config: SheetsConfig) -> int:
    source = Snapshot.load(args.source)
    target = Snapshot.load(args.target)

    diff = SnapshotDiff.compute(source, target, match=config.match_mode)
    sys.stdout.write(render(diff, source, target, config.diff_format))

    if args.output:
        diff.save(args.output)
        print(f"Diff saved: {args.output}", file=sys.stderr)
    return 0


def verify_snapshot(path: str) -> int:
    print(f"Verifying snapshot: {path}")
    snapshot = Snapshot.load(path)

    if not snapshot.verify():
        print("Integrity check FAILED", file=sys.stderr)
        print("  This snapshot may be corrupted!", file=sys.stderr)
        return 1

    print("Integrity check passed")
    print(f"  Snapshot ID: {snapshot.id}")
    print(f"  Timestamp: {snapshot.timestamp.isoformat()}")
    if snapshot.message:
        print(f"  Message: {snapshot.message}")
    print(f"  Table hash: {snapshot.hashes.table_hash}")
    return 0


def _snapshot_files(config: SheetsConfig) -> List[Path]:
    directory = config.snapshots_path
    if not directory.is_dir():
        return []
    return [path for path in directory.iterdir() if path.suffix == ".json" and path.is_file()]


def show_status(config: SheetsConfig) -> int:
    print("gitsheets status\n")

    status = GitWorkspace(config.root).status_short()
    if status is None:
        print("Git repository: no (run 'gitsheets init')")
    else:
        print("Git repository: yes")
        if status.strip():
            print("\nUncommitted changes:")
            print(status.rstrip())

    if config.snapshots_path.is_dir():
        print(f"\nSnapshots: {len(_snapshot_files(config))}")
    return 0


def show_log(limit: Optional[int], config: SheetsConfig) -> int:
    if not config.snapshots_path.is_dir():
        print("No snapshots found. Create one with:")
        print('  gitsheets snapshot <file.csv> -m "message"')
        return 0

    files = sorted(_snapshot_files(config), key=lambda p: p.stat().st_mtime, reverse=True)
    display_count = len(files) if limit is None else min(limit, len(files))
    print(f"Showing {display_count} most recent snapshots:\n")

    for path in files[:display_count]:
        try:
            snapshot = Snapshot.load(path)
        except GitSheetsError as exc:
            logger.warning("Skipping unreadable snapshot", extra={"path": str(path), "code": exc.code})
            continue
        print("-" * 40)
        print(f"Snapshot: {snapshot.id}")
        print(f"Time:     {snapshot.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        if snapshot.message:
            print(f"Message:  {snapshot.message}")
        print(f"Table:    {snapshot.table.row_count} rows x {snapshot.table.column_count} cols")
        print(f"Hash:     {snapshot.hashes.table_hash[:16]}...")
        print()
    return 0


def run_command(args: argparse.Namespace, config: SheetsConfig) -> int:
    """Dispatch a parsed command."""
    if args.command == "init":
        return init_repository(Path(args.path), config)
    if args.command == "snapshot":
        return create_snapshot(args, config)
    if args.command == "diff":
        return show_diff(args, config)
    if args.command == "verify":
        return verify_snapshot(args.snapshot)
    if args.command == "status":
        return show_status(config)
    if args.command == "log":
        return show_log(args.limit, config)
    raise ValueError(f"Unknown command: {args.command}")


def output_error(result: dict) -> None:
    """Write an error envelope to stderr."""
    print(json.dumps(result, ensure_ascii=False, sort_keys=True, indent=2), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    serializer = DeterministicSerializer()

    try:
        validate_args(args)
        config = create_config(args)
        return run_command(args, config)

    except GitSheetsError as e:
        output_error(serializer.create_error_envelope(e.code, e.message, e.details))
        return 1

    except ValueError as e:
        output_error(serializer.create_error_envelope("INVALID_ARGUMENT", str(e)))
        return 1

    except Exception as e:
        logger.exception("Unexpected error")
        output_error(
            serializer.create_error_envelope(
                "INTERNAL_ERROR",
                f"Internal error: {str(e)}",
                {"type": type(e).__name__},
            )
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
