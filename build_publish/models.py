"""Data models for build-publish.

These Pydantic models represent the core data structures exchanged between
the tag resolver, the version/naming strategies and the changelog builder.
All of them are frozen: a resolved value is never mutated, a new build
produces new values.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


STUB_COMMIT_SHA = "hardcoded_default_stub_commit_sha"
STUB_COMMIT_MESSAGE = "hardcoded_default_stub_commit_message"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class _CamelRecord(_Record):
    """Record exchanged as JSON with camelCase keys; unknown keys are rejected."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BuildTag(_CamelRecord):
    """A resolved build tag.

    Serialized with camelCase keys since the JSON artifact is read by
    collaborators outside of Python.

    Attributes:
        name: Full tag name, e.g. "v1.0.42-debug".
        commit_sha: Full hash of the commit the tag points to.
        message: Annotated tag message; empty for lightweight tags.
        build_version: Version prefix parsed from the name, e.g. "1.0".
        build_variant: Variant the tag belongs to, e.g. "googleRelease".
        build_number: Incrementing number embedded in the name.
    """

    name: str
    commit_sha: str
    message: str = ""
    build_version: str
    build_variant: str
    build_number: int = Field(ge=0)


class BuildTagSnapshot(_CamelRecord):
    """The current and previous build tags resolved for one variant.

    Attributes:
        current: Tag resolved for this run (synthesized when none exists).
        previous_in_order: Tag right after ``current`` in the ordered tag list.
        previous_on_different_commit: Nearest preceding tag whose commit differs
            from ``current``'s. Several tags stacked on one commit make this
            differ from ``previous_in_order``.
    """

    current: BuildTag
    previous_in_order: BuildTag | None
    previous_on_different_commit: BuildTag | None

    @property
    def points_same_commit(self) -> bool:
        """True if the previous-in-order tag sits on the current tag's commit."""
        previous = self.previous_in_order
        return previous is not None and previous.commit_sha == self.current.commit_sha

    def as_commit_range(self) -> CommitRange:
        """Commits reachable from ``current`` but not from the previous commit."""
        previous = self.previous_on_different_commit
        return CommitRange(
            from_exclusive=previous.commit_sha if previous else None,
            to_inclusive=self.current.commit_sha,
        )


class BuildVariant(_Record):
    """Identity of a build target.

    Attributes:
        name: Full variant name, e.g. "googleDebug".
        flavor_name: Product flavor, or None when the project has no flavors.
        build_type: Build type, e.g. "debug" or "release".
        default_version_code: Version code used when tags are not consulted.
        default_version_name: Version name used when tags are not consulted.
    """

    name: str
    flavor_name: str | None = None
    build_type: str | None = None
    default_version_code: int | None = None
    default_version_name: str | None = None


class TagRef(_Record):
    """A raw tag as listed from the repository, before parsing.

    Attributes:
        name: Tag name.
        commit_sha: Hash of the commit the tag points to (peeled).
        message: Annotated tag message; empty for lightweight tags.
        commit_date: Committer date of the tagged commit.
        created: Tag creation date (tagger date for annotated tags).
        position: Index of the tagged commit in ``git rev-list HEAD``, or None
            when the commit is not reachable from HEAD.
    """

    name: str
    commit_sha: str
    message: str = ""
    commit_date: datetime
    created: datetime | None = None
    position: int | None = None


class Commit(_Record):
    """A commit with its full message body."""

    sha: str
    date: datetime
    message: str


class CommitRange(_Record):
    """Commits after ``from_exclusive`` up to and including ``to_inclusive``.

    A None ``from_exclusive`` means "from the start of the repository".
    """

    from_exclusive: str | None = None
    to_inclusive: str
