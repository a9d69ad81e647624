"""Version code, version name and output file name strategies.

Every strategy is a pure function of the resolved tag (which may be None);
none of them does I/O or raises for a missing tag. Callers pick a strategy and
pass it explicitly; the lookup tables at the bottom map configuration names
to the built-in strategies.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from types import MappingProxyType

from .models import BuildTag, BuildVariant
from .resolver import DEFAULT_BUILD_VERSION, DEFAULT_TAG_NAME, DEFAULT_VERSION_CODE
from .versions import parse_version

DEFAULT_BASE_FILE_NAME = "dev"
APK_EXTENSION = "apk"
DATE_FORMAT = "%d%m%Y"

VersionCodeStrategy = Callable[[BuildVariant, BuildTag | None], int]
VersionNameStrategy = Callable[[BuildVariant, BuildTag | None], str]
OutputNameStrategy = Callable[..., str]


# -----------------------------------------------------------------------------
# Version code
# -----------------------------------------------------------------------------


def build_version_code(variant: BuildVariant, tag: BuildTag | None) -> int:
    """The tag's build number, or 1 without a tag."""
    return tag.build_number if tag is not None else DEFAULT_VERSION_CODE


def semantic_version_flattened_code(variant: BuildVariant, tag: BuildTag | None) -> int:
    """Flatten major, minor and build number into one integer.

    ``(major * 1000 + minor) * 1000 + build_number``, so "1.2" build 42 gives
    1002042. Without a tag the default version code is returned.
    """
    if tag is None:
        return DEFAULT_VERSION_CODE
    version = parse_version(tag.build_version)
    return (version.major * 1000 + version.minor) * 1000 + tag.build_number


def fixed_version_code(provider: Callable[[], int]) -> VersionCodeStrategy:
    """Strategy that ignores the tag and returns ``provider()``."""

    def strategy(variant: BuildVariant, tag: BuildTag | None) -> int:
        return provider()

    return strategy


# -----------------------------------------------------------------------------
# Version name
# -----------------------------------------------------------------------------


def build_version_name(variant: BuildVariant, tag: BuildTag | None) -> str:
    """The tag's build version ("1.0"), or "0.0" without a tag."""
    return tag.build_version if tag is not None else DEFAULT_BUILD_VERSION


def build_version_number_name(variant: BuildVariant, tag: BuildTag | None) -> str:
    """``{version}.{build_number}``, e.g. "1.0.42"."""
    if tag is None:
        return f"{DEFAULT_BUILD_VERSION}.{DEFAULT_VERSION_CODE}"
    return f"{tag.build_version}.{tag.build_number}"


def build_version_variant_name(variant: BuildVariant, tag: BuildTag | None) -> str:
    """``{version}-{variant}``, e.g. "1.0-googleDebug"."""
    version = tag.build_version if tag is not None else DEFAULT_BUILD_VERSION
    return f"{version}-{variant.name}"


def build_version_number_variant_name(variant: BuildVariant, tag: BuildTag | None) -> str:
    """``{version}.{build_number}-{variant}``, e.g. "1.0.42-googleDebug"."""
    if tag is None:
        return f"{DEFAULT_BUILD_VERSION}-{variant.name}"
    return f"{tag.build_version}.{tag.build_number}-{variant.name}"


def tag_raw_name(variant: BuildVariant, tag: BuildTag | None) -> str:
    if tag is None:
        return DEFAULT_TAG_NAME % variant.name
    return tag.name


def fixed_version_name(provider: Callable[[], str]) -> VersionNameStrategy:
    """Strategy that ignores the tag and returns ``provider()``."""

    def strategy(variant: BuildVariant, tag: BuildTag | None) -> str:
        return provider()

    return strategy


# -----------------------------------------------------------------------------
# Output file name
# -----------------------------------------------------------------------------


def _extension(output_file_name: str) -> str:
    return output_file_name.rsplit(".", 1)[-1]


def _default_output_name(output_file_name: str, base_file_name: str | None) -> str:
    return f"{base_file_name or DEFAULT_BASE_FILE_NAME}.{_extension(output_file_name)}"


def versioned_apk_name(
    output_file_name: str,
    tag: BuildTag | None,
    base_file_name: str | None,
    *,
    today: date | None = None,
) -> str:
    """Name an APK after the variant, build number and current date.

    Examples (built on 16 Oct 2026):
        ("app.apk", v1.0.42-debug, "myapp") → "myapp-debug-vc42-16102026.apk"
        ("app.apk", None, "myapp") → "myapp-16102026.apk"
        ("app.aab", any, "myapp") → "myapp.aab"

    The date is the local calendar date, so the same tag named on two
    different days gives two different names.
    """
    if "." not in output_file_name or _extension(output_file_name) != APK_EXTENSION:
        return _default_output_name(output_file_name, base_file_name)

    base = base_file_name or DEFAULT_BASE_FILE_NAME
    stamp = (today or date.today()).strftime(DATE_FORMAT)
    if tag is None:
        return f"{base}-{stamp}.{APK_EXTENSION}"
    return f"{base}-{tag.build_variant}-vc{tag.build_number}-{stamp}.{APK_EXTENSION}"


def simple_apk_name(
    output_file_name: str,
    tag: BuildTag | None,
    base_file_name: str | None,
    *,
    today: date | None = None,
) -> str:
    """``{base}.{ext}`` regardless of the tag."""
    return _default_output_name(output_file_name, base_file_name)


def fixed_apk_name(provider: Callable[[], str]) -> OutputNameStrategy:
    """Strategy that always names the artifact ``{provider()}.apk``."""

    def strategy(
        output_file_name: str,
        tag: BuildTag | None,
        base_file_name: str | None,
        *,
        today: date | None = None,
    ) -> str:
        return f"{provider()}.{APK_EXTENSION}"

    return strategy


VERSION_CODE_STRATEGIES: Mapping[str, VersionCodeStrategy] = MappingProxyType(
    {
        "build-version": build_version_code,
        "semantic-version-flattened": semantic_version_flattened_code,
    }
)

VERSION_NAME_STRATEGIES: Mapping[str, VersionNameStrategy] = MappingProxyType(
    {
        "build-version": build_version_name,
        "build-version-number": build_version_number_name,
        "build-version-variant": build_version_variant_name,
        "build-version-number-variant": build_version_number_variant_name,
        "tag-raw-name": tag_raw_name,
    }
)

OUTPUT_NAME_STRATEGIES: Mapping[str, OutputNameStrategy] = MappingProxyType(
    {
        "versioned": versioned_apk_name,
        "simple": simple_apk_name,
    }
)
