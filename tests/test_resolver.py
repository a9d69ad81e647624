"""Tests for build_publish.resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from build_publish.errors import PatternError, TagNotFoundError, TagParseError
from build_publish.patterns import DEFAULT_TAG_PATTERN
from build_publish.repository import GitRepository
from build_publish.resolver import (
    STUB_COMMIT_SHA,
    TagResolver,
    next_tag_name,
    stub_tag,
)
from build_publish.snapshot import to_json

from conftest import GitRepo, make_tag


def _resolver(repo: GitRepo) -> TagResolver:
    return TagResolver(GitRepository(repo.path))


class TestResolve:
    def test_current_and_previous(self, released_repo: GitRepo) -> None:
        snapshot = _resolver(released_repo).resolve("debug")

        assert snapshot.current.name == "v1.0.2-debug"
        assert snapshot.current.build_number == 2
        assert snapshot.current.build_version == "1.0"
        assert snapshot.current.build_variant == "debug"
        assert snapshot.current.commit_sha == released_repo.sha("HEAD")
        assert snapshot.previous_in_order is not None
        assert snapshot.previous_in_order.build_number == 1
        assert snapshot.previous_on_different_commit == snapshot.previous_in_order

    def test_single_tag_has_no_previous(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")
        git_repo.tag("v2.1.7-release")

        snapshot = _resolver(git_repo).resolve("release")

        assert snapshot.current.name == "v2.1.7-release"
        assert snapshot.current.build_version == "2.1"
        assert snapshot.previous_in_order is None
        assert snapshot.previous_on_different_commit is None

    def test_stacked_tags_skip_to_different_commit(self, released_repo: GitRepo) -> None:
        released_repo.tag("v1.0.3-debug")

        snapshot = _resolver(released_repo).resolve("debug")

        assert snapshot.current.name == "v1.0.3-debug"
        assert snapshot.previous_in_order.name == "v1.0.2-debug"
        assert snapshot.previous_on_different_commit.name == "v1.0.1-debug"
        assert snapshot.points_same_commit

    def test_ignores_other_variants(self, released_repo: GitRepo) -> None:
        released_repo.commit("Release prep")
        released_repo.tag("v1.0.3-release")

        snapshot = _resolver(released_repo).resolve("debug")

        assert snapshot.current.name == "v1.0.2-debug"

    def test_annotated_tag_message_is_kept(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")
        git_repo.tag("v1.0.1-debug", message="QA build")

        snapshot = _resolver(git_repo).resolve("debug")

        assert snapshot.current.message == "QA build"

    def test_not_found_without_fallback(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")

        with pytest.raises(TagNotFoundError) as exc_info:
            _resolver(git_repo).resolve("debug")

        assert exc_info.value.variant == "debug"
        assert exc_info.value.pattern == DEFAULT_TAG_PATTERN
        assert "debug" in str(exc_info.value)

    def test_stub_fallback(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")

        snapshot = _resolver(git_repo).resolve("googleDebug", use_stub_as_fallback=True)

        assert snapshot.current.build_number == 1
        assert snapshot.current.build_version == "0.0"
        assert "googleDebug" in snapshot.current.name
        assert snapshot.current.commit_sha == STUB_COMMIT_SHA
        assert snapshot.previous_in_order is None
        assert snapshot.previous_on_different_commit is None

    def test_stub_fallback_outside_repository(self, tmp_path: Path) -> None:
        resolver = TagResolver(GitRepository(tmp_path))
        snapshot = resolver.resolve("debug", use_stub_as_fallback=True)
        assert snapshot.current == stub_tag("debug")

    def test_non_numeric_build_number(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")
        git_repo.tag("v1.0.abc-debug")

        with pytest.raises(TagParseError) as exc_info:
            _resolver(git_repo).resolve("debug", r".+\.(\w+)-%s")

        assert exc_info.value.tag_name == "v1.0.abc-debug"
        assert exc_info.value.captured == "abc"

    def test_non_ascii_digit_build_number(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")
        git_repo.tag("v1.0.\u00b2-debug")

        with pytest.raises(TagParseError) as exc_info:
            _resolver(git_repo).resolve("debug", r".+\.(\w+)-%s")

        assert exc_info.value.captured == "\u00b2"

    def test_duplicate_build_numbers_warn(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        git_repo.commit("Initial commit")
        git_repo.tag("v1.0.5-debug")
        git_repo.commit("Second commit")
        git_repo.tag("v1.1.5-debug")

        snapshot = _resolver(git_repo).resolve("debug")

        assert snapshot.current.name == "v1.1.5-debug"
        assert "share build number" in capsys.readouterr().err

    def test_resolution_is_deterministic(self, released_repo: GitRepo) -> None:
        released_repo.tag("v1.0.3-debug")
        first = to_json(_resolver(released_repo).resolve("debug"))
        second = to_json(_resolver(released_repo).resolve("debug"))
        assert first == second


class TestNextTagName:
    def test_increments_build_number(self) -> None:
        tag = make_tag("v1.0.1-debug", build_number=1)
        assert next_tag_name(tag) == "v1.0.2-debug"

    def test_preserves_rest_of_name(self) -> None:
        tag = make_tag("v1.9.9-debug", build_number=9, build_version="1.9")
        assert next_tag_name(tag) == "v1.9.10-debug"

    def test_keeps_zero_padding(self) -> None:
        tag = make_tag("app.009-release", build_number=9, build_variant="release")
        assert next_tag_name(tag) == "app.010-release"

    def test_custom_pattern(self) -> None:
        tag = make_tag("build-41-qa", build_number=41, build_variant="qa")
        assert next_tag_name(tag, r"build-(\d+)-%s") == "build-42-qa"

    def test_stub_tag(self) -> None:
        assert next_tag_name(stub_tag("debug")) == "v0.0.2-debug"

    def test_build_number_not_in_name(self) -> None:
        tag = make_tag("release-candidate-debug", build_number=7)

        with pytest.raises(PatternError, match="release-candidate-debug"):
            next_tag_name(tag)
