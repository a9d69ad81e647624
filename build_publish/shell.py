"""Shell and git utilities.

Provides a thin wrapper around subprocess calls for running read-only git
commands against a repository, plus output formatting helpers.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "rev-list", "HEAD").
        cwd: Repository directory to run in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., probing for a
               commit that is not in history).

    Returns:
        Stdout from the git command with trailing whitespace removed. Leading
        whitespace is kept since commit bodies may start with indentation.
    """
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=check,
    )
    return result.stdout.rstrip()


def git_succeeds(*args: str, cwd: Path | None = None) -> bool:
    """Run a git command and report whether it exited with status 0."""
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)
    return result.returncode == 0


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of a pipeline run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a warning for a recovered anomaly to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)

