"""Exceptions raised by build-publish.

Every error carries enough context (variant, pattern, file) for the caller to
print a message a human can act on, e.g. by fixing tags in the repository.
"""

from __future__ import annotations

from pathlib import Path


class BuildPublishError(Exception):
    """Base class for all build-publish errors."""


class TagNotFoundError(BuildPublishError):
    """No tag matches the variant's pattern and stub fallback is disabled."""

    def __init__(self, variant: str, pattern: str) -> None:
        self.variant = variant
        self.pattern = pattern
        super().__init__(
            f"There is no build tag for '{variant}' build variant which matches "
            f"`{pattern}` pattern.\n"
            "Check that a tag for that build variant exists and was fetched, "
            "or enable use-stubs-for-tag-as-fallback."
        )


class TagParseError(BuildPublishError):
    """A tag matched the pattern but its build number is not an integer."""

    def __init__(self, variant: str, tag_name: str, pattern: str, captured: str | None) -> None:
        self.variant = variant
        self.tag_name = tag_name
        self.pattern = pattern
        self.captured = captured
        super().__init__(
            f"Tag '{tag_name}' for '{variant}' build variant matches `{pattern}` "
            f"but its build number {captured!r} is not an integer."
        )


class ChangelogRangeError(BuildPublishError):
    """A commit range references a commit that is not in history."""

    def __init__(self, commit_sha: str) -> None:
        self.commit_sha = commit_sha
        super().__init__(f"Commit {commit_sha} is not present in the repository history")


class SnapshotIOError(BuildPublishError):
    """The tag snapshot file cannot be read, written or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Tag snapshot file {path} cannot be used: {reason}")


class PatternError(BuildPublishError):
    """A tag or issue pattern is malformed."""


class RepositoryError(BuildPublishError):
    """A git command failed for a reason other than missing tags."""


class ConfigError(BuildPublishError):
    """The build-publish configuration is invalid."""
