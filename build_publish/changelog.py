"""Changelog generation from marked commit messages.

Commits between the previous build tag and the current one are scanned for
marker lines such as ``CHANGELOG: [ABC-1] Fix login``. Marker lines are
deduplicated by issue key (newest commit wins), rendered one per line, and
replaced by an explanatory message when nothing qualifies.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from .errors import ChangelogRangeError
from .models import STUB_COMMIT_SHA, BuildTag, BuildTagSnapshot, Commit
from .patterns import compile_issue_pattern
from .repository import GitRepository
from .shell import step, warn

DEFAULT_COMMIT_MESSAGE_KEY = "CHANGELOG"
BULLET = "• "

ChangelogLineStrategy = Callable[[str, str, bool, BuildTagSnapshot], str]
EmptyChangelogStrategy = Callable[[BuildTagSnapshot], str]
AnnotatedTagStrategy = Callable[[str], str]


def _marker_regex(commit_message_key: str) -> re.Pattern[str]:
    return re.compile(rf"^\s*{re.escape(commit_message_key)}\s*:")


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------


def key_aware_line(
    message: str,
    commit_message_key: str,
    exclude_message_key: bool,
    tag_snapshot: BuildTagSnapshot,
) -> str:
    """Prefix a marker line with a bullet, optionally dropping the marker.

    Examples:
        ("CHANGELOG: [X-1] Fix", "CHANGELOG", True, ...) → "• [X-1] Fix"
        ("CHANGELOG: [X-1] Fix", "CHANGELOG", False, ...) → "• CHANGELOG: [X-1] Fix"
    """
    if exclude_message_key:
        message = _marker_regex(commit_message_key).sub("", message, count=1)
    return f"{BULLET}{message.strip()}".strip()


def no_changes_since_build_message(tag_name: str) -> str:
    return (
        "🔁 *No changes detected*\n"
        f"_Since build `{tag_name}`_\n"
        "\n"
        "No new commits or configuration updates were found."
    )


def no_changes_since_start_message() -> str:
    return (
        "🌱 *No changes detected*\n"
        "_Starting point of the repository_\n"
        "\n"
        "There are no commits to include yet.\n"
        "This usually means this is the first build."
    )


def no_changes_message(tag_snapshot: BuildTagSnapshot) -> str:
    """Explain an empty changelog.

    Names the previous build tag when there is one, preferring the
    previous-in-order tag; otherwise says this is the repository's start.
    """
    previous = tag_snapshot.previous_in_order or tag_snapshot.previous_on_different_commit
    if previous is not None:
        return no_changes_since_build_message(previous.name)
    return no_changes_since_start_message()


def not_generated_message(build_tag_pattern: str, current: BuildTag) -> str:
    """Text written when the changelog could not be generated at all."""
    return (
        "🧩 *Changelog not generated*\n"
        f"Pattern: `{build_tag_pattern}`\n"
        f"Build: `{current.name}`\n"
        "\n"
        "No meaningful changes were found for this build."
    )


def decorated_tag_message(annotated_tag_message: str) -> str:
    """Wrap an annotated tag message in asterisks for emphasis."""
    return f"*{annotated_tag_message}*"


# -----------------------------------------------------------------------------
# Builder
# -----------------------------------------------------------------------------


class ChangelogBuilder:
    """Builds the changelog of a tag snapshot.

    Attributes:
        repository: Repository the commits are read from.
        issue_regex: Compiled issue-number pattern, or None to disable
            deduplication.
    """

    def __init__(self, repository: GitRepository, issue_number_pattern: str | None = None) -> None:
        """Initialize the builder.

        Raises:
            PatternError: If ``issue_number_pattern`` is not a valid regex.
        """
        self.repository = repository
        self.issue_regex = compile_issue_pattern(issue_number_pattern)

    def issue_key(self, text: str) -> str | None:
        """Issue reference in ``text``: group 1 if the pattern has groups, else the match."""
        if self.issue_regex is None:
            return None
        match = self.issue_regex.search(text)
        if match is None:
            return None
        return match.group(1) if self.issue_regex.groups else match.group(0)

    def commits(self, tag_snapshot: BuildTagSnapshot) -> list[Commit]:
        """Commits of the snapshot's range, newest first.

        A range start that is missing from history (shallow clones) falls
        back to the start of the repository. A missing range end is an error.

        Raises:
            ChangelogRangeError: If the current tag's commit is not in history.
        """
        commit_range = tag_snapshot.as_commit_range()
        try:
            return self.repository.list_commits(
                commit_range.from_exclusive, commit_range.to_inclusive
            )
        except ChangelogRangeError as exc:
            if exc.commit_sha != commit_range.from_exclusive:
                raise
            warn(f"{exc}; building changelog from the start of the repository")
            return self.repository.list_commits(None, commit_range.to_inclusive)

    def marked_lines(self, commit_message_key: str, tag_snapshot: BuildTagSnapshot) -> list[str]:
        """Marker lines of the snapshot's commits, deduplicated by issue key.

        Commits are walked newest first, so for a repeated issue key the line
        from the newest commit is kept. Lines without an issue key are never
        deduplicated. Several marker lines in one commit are all kept.
        """
        marker = _marker_regex(commit_message_key)
        seen: set[str] = set()
        lines: list[str] = []
        for commit in self.commits(tag_snapshot):
            for line in commit.message.splitlines():
                match = marker.match(line)
                if match is None:
                    continue
                issue = self.issue_key(line[match.end() :])
                if issue is not None:
                    if issue in seen:
                        continue
                    seen.add(issue)
                lines.append(line.strip())
        return lines

    def build(
        self,
        commit_message_key: str,
        tag_snapshot: BuildTagSnapshot,
        line_strategy: ChangelogLineStrategy = key_aware_line,
        empty_strategy: EmptyChangelogStrategy = no_changes_message,
        *,
        exclude_message_key: bool = True,
        annotated_tag_strategy: AnnotatedTagStrategy | None = None,
    ) -> str:
        """Render the changelog for ``tag_snapshot``.

        Args:
            commit_message_key: Marker that flags changelog lines, e.g. "CHANGELOG".
            tag_snapshot: Snapshot whose range is scanned.
            line_strategy: Renders one marker line.
            empty_strategy: Produces the text used when no line qualifies.
            exclude_message_key: Passed to ``line_strategy``; drop the marker.
            annotated_tag_strategy: If given, the current tag's annotated
                message is rendered with it as the first line.

        Returns:
            Lines joined with ``\\n``; never empty.
        """
        current = tag_snapshot.current
        step(f"Building changelog for {current.name}")

        lines = [
            line_strategy(line, commit_message_key, exclude_message_key, tag_snapshot)
            for line in self.marked_lines(commit_message_key, tag_snapshot)
        ]
        print(f"  {len(lines)} changelog line(s)")
        body = "\n".join(lines) if lines else empty_strategy(tag_snapshot)

        if (
            annotated_tag_strategy is not None
            and current.commit_sha != STUB_COMMIT_SHA
            and current.message.strip()
        ):
            return f"{annotated_tag_strategy(current.message.strip())}\n{body}"
        return body
