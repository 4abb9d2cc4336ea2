"""Pytest configuration and fixtures for gitsheets tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from gitsheets.snapshot import Snapshot
from gitsheets.table import Table

SAMPLE_CSV = "ID, Name ,Amount\n1,Alice,100\n 2 ,Bob,200\n"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="gitsheets_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_csv(temp_dir: Path) -> Path:
    """A small CSV file with untrimmed cells."""
    path = temp_dir / "sales.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def sales_table() -> Table:
    """The ID/Name/Amount table used across the scenario tests."""
    return Table(
        headers=["ID", "Name", "Amount"],
        rows=[
            ["1", "Alice", "100"],
            ["2", "Bob", "200"],
        ],
    )


@pytest.fixture
def updated_sales_table() -> Table:
    """sales_table with Bob's amount changed and Carol appended."""
    return Table(
        headers=["ID", "Name", "Amount"],
        rows=[
            ["1", "Alice", "100"],
            ["2", "Bob", "250"],
            ["3", "Carol", "300"],
        ],
    )


@pytest.fixture
def sales_snapshot(sales_table: Table) -> Snapshot:
    return Snapshot.create(sales_table, "Initial snapshot")


@pytest.fixture
def updated_sales_snapshot(updated_sales_table: Table) -> Snapshot:
    return Snapshot.create(updated_sales_table, "Second snapshot")


def _git_available() -> bool:
    return shutil.which("git") is not None


@pytest.fixture
def git_workspace(temp_dir: Path) -> Generator[Path, None, None]:
    """A temporary directory initialised as a git repository with an identity."""
    if not _git_available():
        pytest.skip("git executable not available")

    env = os.environ.copy()
    env.update({
        "GIT_AUTHOR_NAME": "Test User",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test User",
        "GIT_COMMITTER_EMAIL": "test@example.com",
    })

    def run_git(args: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git"] + args,
            cwd=temp_dir,
            env=env,
            check=True,
            capture_output=True,
            text=True,
        )

    run_git(["init"])
    run_git(["config", "user.name", "Test User"])
    run_git(["config", "user.email", "test@example.com"])

    yield temp_dir
