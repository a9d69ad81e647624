"""Build tag patterns.

A tag pattern is a regular expression template with a ``%s`` placeholder for
the build variant name and a first capture group holding the build number,
e.g. ``.+\\.(\\d+)-%s`` matches ``v1.0.42-debug`` for the ``debug`` variant.
"""

from __future__ import annotations

import re

from .errors import PatternError

DEFAULT_TAG_PATTERN = r".+\.(\d+)-%s"

BUILD_NUMBER_PART = r"(\d+)"
VARIANT_NAME_PART = "%s"
ANY_BEFORE_DOT_PART = r".+\."
ANY_OPTIONAL_SYMBOLS_PART = "(?:[A-Za-z0-9]+)?"


def bind_tag_pattern(pattern: str, variant: str) -> str:
    """Substitute the build variant into a tag pattern template.

    The variant is regex-escaped so names are always matched literally.

    Raises:
        PatternError: If the template has no ``%s`` placeholder.
    """
    if VARIANT_NAME_PART not in pattern:
        raise PatternError(
            f"Tag pattern `{pattern}` must contain the {VARIANT_NAME_PART} "
            "placeholder for the build variant name"
        )
    return pattern.replace(VARIANT_NAME_PART, re.escape(variant))


def compile_tag_pattern(pattern: str, variant: str) -> re.Pattern[str]:
    """Bind a tag pattern to a variant and compile it.

    Raises:
        PatternError: If the pattern is not a valid regular expression or has
            no capture group for the build number.
    """
    bound = bind_tag_pattern(pattern, variant)
    try:
        regex = re.compile(bound)
    except re.error as exc:
        raise PatternError(f"Tag pattern `{bound}` is not a valid regex: {exc}") from exc
    if regex.groups < 1:
        raise PatternError(
            f"Tag pattern `{pattern}` must contain a capture group such as "
            f"{BUILD_NUMBER_PART} for the build number"
        )
    return regex


def compile_issue_pattern(pattern: str | None) -> re.Pattern[str] | None:
    """Compile the issue-number pattern, or return None when not configured.

    Raises:
        PatternError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise PatternError(f"Issue number pattern `{pattern}` is not a valid regex: {exc}") from exc


class BuildTagPatternBuilder:
    """Fluent builder for tag pattern templates.

    Example:
        BuildTagPatternBuilder().literal("v").any_before_dot().build_number()
            .separator("-").build_variant_name().build()
        → r"v.+\\.(\\d+)\\-%s"
    """

    def __init__(self) -> None:
        self._parts: list[str] = []

    def literal(self, value: str) -> BuildTagPatternBuilder:
        """Add a raw regex fragment (not escaped)."""
        self._parts.append(value)
        return self

    def separator(self, value: str) -> BuildTagPatternBuilder:
        """Add an escaped separator such as "-", "_" or "+"."""
        self._parts.append(re.escape(value))
        return self

    def optional_separator(self, value: str) -> BuildTagPatternBuilder:
        self._parts.append(f"(?:{re.escape(value)})?")
        return self

    def build_number(self) -> BuildTagPatternBuilder:
        self._parts.append(BUILD_NUMBER_PART)
        return self

    def build_variant_name(self) -> BuildTagPatternBuilder:
        self._parts.append(VARIANT_NAME_PART)
        return self

    def any_before_dot(self) -> BuildTagPatternBuilder:
        self._parts.append(ANY_BEFORE_DOT_PART)
        return self

    def any_optional_symbols(self) -> BuildTagPatternBuilder:
        """Match an optional alphanumeric run such as "tv" or "androidAuto"."""
        self._parts.append(ANY_OPTIONAL_SYMBOLS_PART)
        return self

    def build(self) -> str:
        """Join the parts into a template and validate it.

        The build number must be the first capture group, so the optional
        parts above use non-capturing groups.

        Raises:
            PatternError: If the build number or variant placeholder is
                missing, or the template does not compile.
        """
        template = "".join(self._parts)
        if BUILD_NUMBER_PART not in template:
            raise PatternError(
                f"Tag pattern `{template}` must contain {BUILD_NUMBER_PART} for the build number"
            )
        compile_tag_pattern(template, "dummyVariant")
        return template
