"""Build tag resolution.

Decides which tag is the "current" build tag for a variant and which tags
precede it, producing the BuildTagSnapshot every later step agrees on.
"""

from __future__ import annotations

import re
from collections import Counter

from .errors import PatternError, TagNotFoundError, TagParseError
from .models import STUB_COMMIT_MESSAGE, STUB_COMMIT_SHA, BuildTag, BuildTagSnapshot, TagRef
from .patterns import DEFAULT_TAG_PATTERN, compile_tag_pattern
from .repository import GitRepository
from .shell import step, warn
from .versions import version_from_prefix

DEFAULT_BUILD_VERSION = "0.0"
DEFAULT_VERSION_CODE = 1
DEFAULT_TAG_NAME = f"v{DEFAULT_BUILD_VERSION}.{DEFAULT_VERSION_CODE}-%s"

_DIGITS = re.compile(r"[0-9]+")


def stub_tag(build_variant: str) -> BuildTag:
    """Synthesize a placeholder tag for a variant that has no tags yet.

    The stub is never a real tag: its commit SHA and message are sentinels.
    """
    return BuildTag(
        name=DEFAULT_TAG_NAME % build_variant,
        commit_sha=STUB_COMMIT_SHA,
        message=STUB_COMMIT_MESSAGE,
        build_version=DEFAULT_BUILD_VERSION,
        build_variant=build_variant,
        build_number=DEFAULT_VERSION_CODE,
    )


def parse_build_tag(ref: TagRef, regex: re.Pattern[str], build_variant: str) -> BuildTag:
    """Turn a listed tag into a BuildTag.

    The build number is the pattern's first capture group; the build version
    is made of the digit runs in the part of the name before that group.

    Raises:
        TagParseError: If the captured build number is not an integer.
    """
    match = regex.fullmatch(ref.name)
    captured = match.group(1) if match else None
    if match is None or captured is None or not _DIGITS.fullmatch(captured):
        raise TagParseError(build_variant, ref.name, regex.pattern, captured)

    return BuildTag(
        name=ref.name,
        commit_sha=ref.commit_sha,
        message=ref.message,
        build_version=version_from_prefix(ref.name[: match.start(1)]),
        build_variant=build_variant,
        build_number=int(captured),
    )


def next_tag_name(tag: BuildTag, pattern: str = DEFAULT_TAG_PATTERN) -> str:
    """Name of the tag that follows ``tag``: only the build number changes.

    Examples:
        v1.0.1-debug → v1.0.2-debug
        app.009-release → app.010-release

    The pattern's capture span is rewritten so the rest of the name is kept
    byte for byte. Tags the pattern does not match (e.g. stubs built from a
    different template) fall back to rewriting the last occurrence of the
    build number.

    Raises:
        PatternError: If the build number cannot be located in the name, so
            no distinct next name exists.
    """
    regex = compile_tag_pattern(pattern, tag.build_variant)
    match = regex.fullmatch(tag.name)
    if match and match.group(1) and _DIGITS.fullmatch(match.group(1)):
        start, end = match.span(1)
        width = end - start
        return f"{tag.name[:start]}{str(int(match.group(1)) + 1).zfill(width)}{tag.name[end:]}"

    current = str(tag.build_number)
    index = tag.name.rfind(current)
    if index < 0:
        raise PatternError(
            f"Cannot find build number {current} in tag '{tag.name}' "
            f"with pattern `{pattern}`; the next tag name is unknown"
        )
    return f"{tag.name[:index]}{tag.build_number + 1}{tag.name[index + len(current):]}"


class TagResolver:
    """Resolves build tag snapshots from a repository."""

    def __init__(self, repository: GitRepository) -> None:
        self.repository = repository

    def resolve(
        self,
        build_variant: str,
        pattern: str = DEFAULT_TAG_PATTERN,
        use_stub_as_fallback: bool = False,
    ) -> BuildTagSnapshot:
        """Find the current and previous build tags for a variant.

        Args:
            build_variant: Variant name substituted into ``pattern``.
            pattern: Tag pattern template with a ``%s`` variant placeholder.
            use_stub_as_fallback: Synthesize a stub tag instead of failing
                when no tag matches.

        Returns:
            The snapshot for this run. ``previous_on_different_commit`` skips
            tags stacked on the current tag's commit.

        Raises:
            TagNotFoundError: If no tag matches and the fallback is disabled.
            TagParseError: If a used tag's build number is not an integer.
            PatternError: If the pattern is malformed.
        """
        step(f"Resolving build tag for {build_variant}")

        regex = compile_tag_pattern(pattern, build_variant)
        refs = self.repository.list_tags(regex)
        print(f"  pattern: {regex.pattern}")
        print(f"  matching tags: {', '.join(r.name for r in refs) or '<none>'}")

        if not refs:
            if not use_stub_as_fallback:
                raise TagNotFoundError(build_variant, pattern)
            current = stub_tag(build_variant)
            warn(f"no build tag for {build_variant}, using stub {current.name}; not for release")
            return BuildTagSnapshot(
                current=current,
                previous_in_order=None,
                previous_on_different_commit=None,
            )

        _warn_duplicate_build_numbers(refs, regex, build_variant)

        current = parse_build_tag(refs[0], regex, build_variant)
        previous_in_order = (
            parse_build_tag(refs[1], regex, build_variant) if len(refs) > 1 else None
        )
        different = next((r for r in refs[1:] if r.commit_sha != current.commit_sha), None)
        previous_on_different_commit = (
            parse_build_tag(different, regex, build_variant) if different else None
        )

        print(f"  current: {current.name} (build {current.build_number})")
        print(f"  previous: {previous_in_order.name if previous_in_order else '<none>'}")
        if previous_on_different_commit != previous_in_order:
            name = previous_on_different_commit.name if previous_on_different_commit else "<none>"
            print(f"  previous on different commit: {name}")

        return BuildTagSnapshot(
            current=current,
            previous_in_order=previous_in_order,
            previous_on_different_commit=previous_on_different_commit,
        )


def _warn_duplicate_build_numbers(
    refs: list[TagRef], regex: re.Pattern[str], build_variant: str
) -> None:
    """Warn about tags sharing a build number; the ordering still decides."""
    numbers: Counter[str] = Counter()
    for ref in refs:
        match = regex.fullmatch(ref.name)
        if match and match.group(1):
            numbers[match.group(1)] += 1
    duplicates = sorted(n for n, count in numbers.items() if count > 1)
    if duplicates:
        warn(
            f"{build_variant}: several tags share build number(s) {', '.join(duplicates)}; "
            "the most recent tag wins"
        )
