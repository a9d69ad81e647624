"""Tests for build_publish.versions."""

from __future__ import annotations


from build_publish.versions import parse_version, version_from_prefix


class TestParseVersion:
    def test_full_semver(self) -> None:
        v = parse_version("1.2.3")
        assert v.major == 1
        assert v.minor == 2
        assert v.patch == 3

    def test_two_part_version(self) -> None:
        v = parse_version("1.2")
        assert v.major == 1
        assert v.minor == 2
        assert v.patch == 0

    def test_single_part_version(self) -> None:
        v = parse_version("5")
        assert (v.major, v.minor, v.patch) == (5, 0, 0)

    def test_empty_version(self) -> None:
        v = parse_version("")
        assert (v.major, v.minor, v.patch) == (0, 0, 0)

    def test_leading_zeros_are_dropped(self) -> None:
        v = parse_version("1.05")
        assert (v.major, v.minor, v.patch) == (1, 5, 0)

    def test_extra_components_ignored(self) -> None:
        v = parse_version("1.2.3.4")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)


class TestVersionFromPrefix:
    def test_v_prefix(self) -> None:
        assert version_from_prefix("v1.0.") == "1.0"

    def test_named_prefix(self) -> None:
        assert version_from_prefix("app-2.14.3.") == "2.14.3"

    def test_no_digits(self) -> None:
        assert version_from_prefix("build.") == ""
