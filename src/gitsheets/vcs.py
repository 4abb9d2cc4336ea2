"""Git operations for a gitsheets workspace."""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import GitCommandError

logger = logging.getLogger(__name__)


def git_env() -> Dict[str, str]:
    """Environment for git subprocesses with prompts and localisation disabled."""
    env = os.environ.copy()
    env.update(
        {
            "LC_ALL": "C",
            "GIT_TERMINAL_PROMPT": "0",
            "GCM_INTERACTIVE": "never",
        }
    )
    return env


class GitWorkspace:
    """Git commands run inside a workspace directory."""

    def __init__(self, root: Union[str, Path] = ".", timeout: int = 60):
        """Initialize with the workspace root."""
        self.root = Path(root)
        self.timeout = timeout

    def _run_git(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run git command with a fixed environment and error mapping."""
        cmd = ["git", "-c", "color.ui=false"] + args
        logger.debug("Running git", extra={"git_args": args, "cwd": str(self.root)})
        try:
            return subprocess.run(
                cmd,
                cwd=self.root,
                env=git_env(),
                timeout=self.timeout,
                check=check,
                capture_output=True,
                text=True,
            )
        except subprocess.CalledProcessError as e:
            raise GitCommandError(args, (e.stderr or str(e)).strip()) from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(args, f"timed out after {self.timeout}s") from e
        except FileNotFoundError as e:
            raise GitCommandError(args, "git executable not found") from e

    def version(self) -> Optional[str]:
        """Return the installed git version, or None when git is unavailable."""
        try:
            result = self._run_git(["--version"])
        except GitCommandError as exc:
            logger.debug("git --version check failed", extra={"reason": exc.message})
            return None
        match = re.search(r"git version (\d+\.\d+(?:\.\d+)?)", result.stdout)
        return match.group(1) if match else None

    def has_repository(self) -> bool:
        return (self.root / ".git").exists()

    def init(self) -> None:
        self._run_git(["init"])
        logger.info("Initialized git repository", extra={"path": str(self.root)})

    def add(self, paths: List[Union[str, Path]]) -> None:
        self._run_git(["add", "--"] + [str(path) for path in paths])

    def commit(self, message: str) -> None:
        self._run_git(["commit", "-m", message])
        logger.info("Committed to git", extra={"commit_message": message})

    def status_short(self) -> Optional[str]:
        """Output of ``git status --short``, or None outside a repository."""
        try:
            result = self._run_git(["status", "--short"], check=False)
        except GitCommandError as exc:
            logger.debug("git status unavailable", extra={"reason": exc.message})
            return None
        if result.returncode != 0:
            return None
        return result.stdout
