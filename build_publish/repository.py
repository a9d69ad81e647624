"""Read-only queries against a git repository.

Lists tags matching a build tag pattern in a deterministic most-recent-first
order, and lists the commits of a range with their full message bodies.
Nothing in this module writes repository state, so any number of variants may
query the same repository concurrently.
"""

from __future__ import annotations

import math
import re
import subprocess
from datetime import datetime, timezone
from pathlib import Path

from .errors import ChangelogRangeError, RepositoryError
from .models import STUB_COMMIT_SHA, Commit, TagRef
from .shell import git, git_succeeds

# ASCII unit/record separators keep multi-line messages intact in git output
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

_TAG_FORMAT = "%1f".join(
    [
        "%(refname:strip=2)",
        "%(objecttype)",
        "%(objectname)",
        "%(*objectname)",
        "%(creatordate:unix)",
        "%(committerdate:unix)",
        "%(*committerdate:unix)",
        "%(contents)",
    ]
) + "%1e"

_LOG_FORMAT = "%H%x1f%ct%x1f%B%x1e"

_DIGITS = re.compile(r"[0-9]+")


def _timestamp(value: str) -> datetime | None:
    return datetime.fromtimestamp(int(value), tz=timezone.utc) if value.strip() else None


def _split_records(raw: str) -> list[list[str]]:
    records: list[list[str]] = []
    for chunk in raw.split(_RECORD_SEP):
        chunk = chunk.lstrip("\n")
        if chunk:
            records.append(chunk.split(_FIELD_SEP))
    return records


def _build_number_hint(regex: re.Pattern[str], name: str) -> int:
    """Build number captured by the pattern, or -1 when it is not numeric."""
    match = regex.fullmatch(name)
    captured = match.group(1) if match else None
    return int(captured) if captured and _DIGITS.fullmatch(captured) else -1


class GitRepository:
    """Read-only view of a git repository.

    Attributes:
        path: Directory inside the repository's work tree.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """True if ``path`` is inside a git work tree."""
        if not self.path.is_dir():
            return False
        return git_succeeds("rev-parse", "--is-inside-work-tree", cwd=self.path)

    def has_commit(self, rev: str) -> bool:
        """True if ``rev`` resolves to a commit in this repository."""
        return git_succeeds("cat-file", "-e", f"{rev}^{{commit}}", cwd=self.path)

    def list_tags(self, pattern: re.Pattern[str]) -> list[TagRef]:
        """List tags whose full name matches ``pattern``, most recent first.

        Ordering, from strongest to weakest:
        1. position of the tagged commit in ``git rev-list HEAD`` (tags not
           reachable from HEAD come last);
        2. build number (first capture group) descending;
        3. tag creation date descending;
        4. tag name descending.

        Returns:
            Matching tags. Empty when the directory is not a git repository or
            no tag matches.

        Raises:
            RepositoryError: If git fails on a readable repository.
        """
        if not self.exists():
            return []

        raw = self._git("for-each-ref", f"--format={_TAG_FORMAT}", "refs/tags")
        positions = self._commit_positions()

        tags: list[TagRef] = []
        for fields in _split_records(raw):
            name, obj_type, obj_sha, peeled_sha, created, date, peeled_date, contents = (
                fields + [""] * 8
            )[:8]
            if not pattern.fullmatch(name):
                continue
            # Annotated tags peel to their commit; lightweight tags are the commit
            annotated = obj_type == "tag"
            commit_sha = peeled_sha if annotated else obj_sha
            tags.append(
                TagRef(
                    name=name,
                    commit_sha=commit_sha,
                    message=contents.strip() if annotated else "",
                    commit_date=_timestamp(peeled_date if annotated else date)
                    or datetime.fromtimestamp(0, tz=timezone.utc),
                    created=_timestamp(created),
                    position=positions.get(commit_sha),
                )
            )

        # Stable sorts: apply the weakest key first
        tags.sort(key=lambda t: t.name, reverse=True)
        tags.sort(key=lambda t: t.created.timestamp() if t.created else -math.inf, reverse=True)
        tags.sort(key=lambda t: _build_number_hint(pattern, t.name), reverse=True)
        tags.sort(key=lambda t: math.inf if t.position is None else t.position)
        return tags

    def list_commits(self, from_exclusive: str | None, to_inclusive: str) -> list[Commit]:
        """List commits after ``from_exclusive`` up to ``to_inclusive``, newest first.

        The sentinel SHA of a stub tag as ``to_inclusive`` is read as HEAD.

        Raises:
            ChangelogRangeError: If ``from_exclusive`` or ``to_inclusive`` is
                not in history, e.g. in a shallow clone or for a snapshot
                written from another checkout.
            RepositoryError: If git fails on a readable repository.
        """
        if not self.exists():
            return []

        to_rev = "HEAD" if to_inclusive == STUB_COMMIT_SHA else to_inclusive
        if to_rev == "HEAD" and not self.has_commit("HEAD"):
            return []
        if not self.has_commit(to_rev):
            raise ChangelogRangeError(to_rev)
        if from_exclusive is not None and not self.has_commit(from_exclusive):
            raise ChangelogRangeError(from_exclusive)

        rev = f"{from_exclusive}..{to_rev}" if from_exclusive else to_rev
        raw = self._git("log", f"--format={_LOG_FORMAT}", rev, "--")

        commits: list[Commit] = []
        for fields in _split_records(raw):
            sha, timestamp, body = (fields + [""] * 3)[:3]
            commits.append(
                Commit(
                    sha=sha,
                    date=_timestamp(timestamp) or datetime.fromtimestamp(0, tz=timezone.utc),
                    message=body.strip("\n"),
                )
            )
        return commits

    def _commit_positions(self) -> dict[str, int]:
        """Map each commit reachable from HEAD to its index in ``git rev-list HEAD``."""
        if not self.has_commit("HEAD"):
            return {}
        shas = self._git("rev-list", "HEAD").splitlines()
        return {sha: index for index, sha in enumerate(shas)}

    def _git(self, *args: str) -> str:
        try:
            return git(*args, cwd=self.path)
        except subprocess.CalledProcessError as exc:
            raise RepositoryError(
                f"git {' '.join(args)} failed in {self.path}: {(exc.stderr or '').strip()}"
            ) from exc
