"""Configuration loading.

Settings live in the ``[tool.build-publish]`` table of the repository's
pyproject.toml (or of a file passed explicitly). Any key can be overridden
for one variant under ``[tool.build-publish.variants.<name>]``:

    [tool.build-publish]
    tag-pattern = '.+\\.(\\d+)-%s'
    base-file-name = "myapp"
    issue-number-pattern = '\\[(\\w+-\\d+)\\]'

    [tool.build-publish.variants.release]
    use-stubs-for-tag-as-fallback = false
    version-name-strategy = "build-version-number"

Uses tomlkit to read the file, like the rest of the TOML handling here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from tomlkit.exceptions import TOMLKitError

from .changelog import DEFAULT_COMMIT_MESSAGE_KEY
from .errors import ConfigError
from .models import BuildVariant
from .naming import (
    OUTPUT_NAME_STRATEGIES,
    VERSION_CODE_STRATEGIES,
    VERSION_NAME_STRATEGIES,
    OutputNameStrategy,
    VersionCodeStrategy,
    VersionNameStrategy,
)
from .patterns import DEFAULT_TAG_PATTERN

TOOL_TABLE = "build-publish"
VARIANTS_TABLE = "variants"


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _check_strategy(name: str, table: Any, kind: str) -> str:
    if name not in table:
        known = ", ".join(sorted(table))
        raise ValueError(f"unknown {kind} strategy {name!r} (expected one of: {known})")
    return name


class OutputConfig(BaseModel):
    """Resolved settings for one build variant.

    Attributes:
        tag_pattern: Tag pattern template with a ``%s`` variant placeholder.
        base_file_name: Base of the artifact file name; "dev" when unset.
        use_versions_from_tag: Derive version code/name from the build tag.
        use_stubs_for_tag_as_fallback: Synthesize a stub tag when none matches.
        use_defaults_for_versions_as_fallback: Use version code 1 and name
            "0.0" when versions are not taken from the tag.
        commit_message_key: Marker flagging changelog lines.
        exclude_message_key: Drop the marker from rendered changelog lines.
        issue_number_pattern: Regex extracting issue keys for deduplication.
        issue_url_prefix: Prefix for issue links, read by notification senders.
        annotate_changelog_with_tag_message: Put the annotated tag message on
            the first changelog line.
        version_code_strategy: Name from ``VERSION_CODE_STRATEGIES``.
        version_name_strategy: Name from ``VERSION_NAME_STRATEGIES``.
        output_name_strategy: Name from ``OUTPUT_NAME_STRATEGIES``.
        output_dir: Directory for output files, relative to the repository.
        default_version_code: Variant's own version code, used when tags and
            defaults are both disabled.
        default_version_name: Variant's own version name, same rule.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=_kebab,
        populate_by_name=True,
    )

    tag_pattern: str = DEFAULT_TAG_PATTERN
    base_file_name: str | None = None
    use_versions_from_tag: bool = True
    use_stubs_for_tag_as_fallback: bool = False
    use_defaults_for_versions_as_fallback: bool = True
    commit_message_key: str = DEFAULT_COMMIT_MESSAGE_KEY
    exclude_message_key: bool = True
    issue_number_pattern: str | None = None
    issue_url_prefix: str | None = None
    annotate_changelog_with_tag_message: bool = False
    version_code_strategy: str = "build-version"
    version_name_strategy: str = "build-version"
    output_name_strategy: str = "versioned"
    output_dir: Path = Path("build")
    default_version_code: int | None = None
    default_version_name: str | None = None

    @field_validator("version_code_strategy")
    @classmethod
    def _known_version_code_strategy(cls, value: str) -> str:
        return _check_strategy(value, VERSION_CODE_STRATEGIES, "version code")

    @field_validator("version_name_strategy")
    @classmethod
    def _known_version_name_strategy(cls, value: str) -> str:
        return _check_strategy(value, VERSION_NAME_STRATEGIES, "version name")

    @field_validator("output_name_strategy")
    @classmethod
    def _known_output_name_strategy(cls, value: str) -> str:
        return _check_strategy(value, OUTPUT_NAME_STRATEGIES, "output name")

    def version_code(self) -> VersionCodeStrategy:
        return VERSION_CODE_STRATEGIES[self.version_code_strategy]

    def version_name(self) -> VersionNameStrategy:
        return VERSION_NAME_STRATEGIES[self.version_name_strategy]

    def output_name(self) -> OutputNameStrategy:
        return OUTPUT_NAME_STRATEGIES[self.output_name_strategy]

    def build_variant(self, name: str) -> BuildVariant:
        """The BuildVariant for ``name`` carrying this config's defaults."""
        return BuildVariant(
            name=name,
            default_version_code=self.default_version_code,
            default_version_name=self.default_version_name,
        )


def load_document(path: Path) -> tomlkit.TOMLDocument:
    """Parse a TOML file.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror or exc}") from exc
    except TOMLKitError as exc:
        raise ConfigError(f"Config file {path} is not valid TOML: {exc}") from exc


def get_tool_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract [tool.build-publish] as plain Python values ({} if absent)."""
    settings = doc.unwrap().get("tool", {}).get(TOOL_TABLE, {})
    if not isinstance(settings, dict):
        raise ConfigError(f"[tool.{TOOL_TABLE}] must be a table")
    return settings


def merge_variant_settings(settings: dict[str, Any], variant: str) -> dict[str, Any]:
    """Apply ``[tool.build-publish.variants.<variant>]`` over the shared keys."""
    shared = dict(settings)
    variants = shared.pop(VARIANTS_TABLE, {})
    if not isinstance(variants, dict):
        raise ConfigError(f"[tool.{TOOL_TABLE}.{VARIANTS_TABLE}] must be a table")
    overrides = variants.get(variant, {})
    if not isinstance(overrides, dict):
        raise ConfigError(f"[tool.{TOOL_TABLE}.{VARIANTS_TABLE}.{variant}] must be a table")
    return {**shared, **overrides}


def load_config(repo: Path, variant: str, config_path: Path | None = None) -> OutputConfig:
    """Load the settings for ``variant``.

    Args:
        repo: Repository root; its pyproject.toml is read by default.
        variant: Build variant whose overrides are applied.
        config_path: Explicit config file. Unlike the default location, it
            must exist.

    Returns:
        The merged settings. A missing pyproject.toml or table yields defaults.

    Raises:
        ConfigError: If the file is unreadable or invalid, a key is unknown,
            or a strategy name is not recognized.
    """
    if config_path is None:
        path = repo / "pyproject.toml"
        if not path.exists():
            return OutputConfig()
    else:
        path = config_path
        if not path.exists():
            raise ConfigError(f"Config file {path} does not exist")

    merged = merge_variant_settings(get_tool_settings(load_document(path)), variant)
    try:
        return OutputConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid [tool.{TOOL_TABLE}] settings for '{variant}' in {path}:\n{exc}"
        ) from exc
