#!/usr/bin/env python3
"""Check that a gitsheets installation works end to end."""

import subprocess
import sys
import tempfile
from pathlib import Path


def check_import():
    """The package can be imported."""
    try:
        import gitsheets
        print(f"✓ Package import successful (version: {gitsheets.__version__})")
        return True
    except ImportError as e:
        print(f"✗ Package import failed: {e}")
        return False


def check_cli():
    """The CLI entry point answers --help."""
    try:
        result = subprocess.run(
            [sys.executable, "-m", "gitsheets.main", "--help"],
            capture_output=True,
            text=True,
            timeout=10,
        )
        if result.returncode == 0:
            print("✓ CLI command available")
            return True
        else:
            print(f"✗ CLI command failed: {result.stderr}")
            return False
    except Exception as e:
        print(f"✗ CLI check failed: {e}")
        return False


def check_round_trip():
    """A snapshot written to disk verifies after loading."""
    try:
        from gitsheets.snapshot import Snapshot
        from gitsheets.table import Table

        with tempfile.TemporaryDirectory(prefix="gitsheets_check_") as tmp:
            path = Path(tmp) / "snapshot.json"
            table = Table.from_csv_text("ID,Name\n1,Alice\n")
            Snapshot.create(table, "install check").save(path)
            if Snapshot.load(path).verify():
                print("✓ Snapshot round trip verified")
                return True
            print("✗ Snapshot failed verification after reload")
            return False
    except Exception as e:
        print(f"✗ Round trip check failed: {e}")
        return False


def check_git_version():
    """Git is available for the init/status/commit commands."""
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            text=True,
            timeout=10,
        )
        if result.returncode == 0:
            version_line = result.stdout.strip()
            print(f"✓ Git available: {version_line}")
            return True
        else:
            print("✗ Git not available")
            return False
    except Exception as e:
        print(f"✗ Git check failed: {e}")
        return False


def main():
    """Run all installation checks."""
    print("Checking gitsheets installation...")
    print("=" * 40)

    checks = [
        ("Package Import", check_import),
        ("CLI Command", check_cli),
        ("Snapshot Round Trip", check_round_trip),
        ("Git Availability", check_git_version),
    ]

    passed = 0
    total = len(checks)

    for name, check_func in checks:
        print(f"\n{name}:")
        if check_func():
            passed += 1

    print("\n" + "=" * 40)
    print(f"Checks passed: {passed}/{total}")

    if passed == total:
        print("✓ Installation check successful!")
        return 0
    else:
        print("✗ Installation check failed!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
