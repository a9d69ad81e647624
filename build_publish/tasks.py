"""Per-variant build steps: resolve → version code → version name → output name → changelog.

Each step reads what earlier steps wrote to the output directory and writes
one variant-scoped file of its own:

1. Resolve the build tag snapshot (``tag-build-snapshot-<variant>.json``)
2. Compute the version code (``version-code-<variant>.txt``)
3. Compute the version name (``version-name-<variant>.txt``)
4. Compute the artifact file name (``output-name-<variant>.txt``)
5. Generate the changelog (``changelog-<variant>.txt``)

Steps only read the repository, so several variants can run in parallel as
long as each uses its own variant name.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from .changelog import ChangelogBuilder, decorated_tag_message, not_generated_message
from .config import OutputConfig
from .models import BuildTag, BuildTagSnapshot
from .naming import simple_apk_name
from .repository import GitRepository
from .resolver import (
    DEFAULT_BUILD_VERSION,
    DEFAULT_VERSION_CODE,
    TagResolver,
    next_tag_name,
    stub_tag,
)
from .shell import step, warn
from .snapshot import (
    changelog_file_name,
    output_name_file_name,
    read_snapshot,
    snapshot_file_name,
    version_code_file_name,
    version_name_file_name,
    write_snapshot,
    write_text_output,
)


def output_dir(repo: Path, config: OutputConfig) -> Path:
    """Directory the variant files go to; relative paths are under ``repo``."""
    return repo / config.output_dir


def _current_tag(repo: Path, variant: str, config: OutputConfig) -> BuildTag | None:
    """Current tag from the stored snapshot, or None when there is none yet."""
    path = output_dir(repo, config) / snapshot_file_name(variant)
    snapshot = read_snapshot(path)
    if snapshot is None:
        warn(f"no tag snapshot at {path}; run the snapshot step for {variant} first")
        return None
    return snapshot.current


def get_last_tag_snapshot(repo: Path, variant: str, config: OutputConfig) -> BuildTagSnapshot:
    """Resolve the variant's tag snapshot and store it as JSON.

    Raises:
        TagNotFoundError: If no tag matches and stub fallback is disabled.
        TagParseError: If a matching tag's build number is not an integer.
        SnapshotIOError: If the snapshot cannot be written.
    """
    resolver = TagResolver(GitRepository(repo))
    snapshot = resolver.resolve(
        variant,
        config.tag_pattern,
        use_stub_as_fallback=config.use_stubs_for_tag_as_fallback,
    )
    path = output_dir(repo, config) / snapshot_file_name(variant)
    write_snapshot(path, snapshot)
    print(f"  wrote {path}")
    return snapshot


def compute_version_code(repo: Path, variant: str, config: OutputConfig) -> int | None:
    """Compute and store the version code; None is stored as an empty file.

    With ``use_versions_from_tag`` the configured strategy is applied to the
    snapshot's current tag. Otherwise the default code 1 is used when
    ``use_defaults_for_versions_as_fallback`` is set, and the variant's own
    default (possibly None) when it is not.
    """
    step(f"Computing version code for {variant}")
    build_variant = config.build_variant(variant)

    if config.use_versions_from_tag:
        tag = _current_tag(repo, variant, config)
        code = config.version_code()(build_variant, tag) if tag is not None else None
    elif config.use_defaults_for_versions_as_fallback:
        code = DEFAULT_VERSION_CODE
    else:
        code = build_variant.default_version_code

    path = output_dir(repo, config) / version_code_file_name(variant)
    write_text_output(path, code)
    print(f"  version code: {code if code is not None else '<none>'}")
    return code


def compute_version_name(repo: Path, variant: str, config: OutputConfig) -> str | None:
    """Compute and store the version name, following the version code rules."""
    step(f"Computing version name for {variant}")
    build_variant = config.build_variant(variant)

    if config.use_versions_from_tag:
        tag = _current_tag(repo, variant, config)
        name = config.version_name()(build_variant, tag) if tag is not None else None
    elif config.use_defaults_for_versions_as_fallback:
        name = DEFAULT_BUILD_VERSION
    else:
        name = build_variant.default_version_name

    path = output_dir(repo, config) / version_name_file_name(variant)
    write_text_output(path, name)
    print(f"  version name: {name if name is not None else '<none>'}")
    return name


def compute_output_file_name(
    repo: Path,
    variant: str,
    config: OutputConfig,
    output_file_name: str,
    *,
    today: date | None = None,
) -> str:
    """Compute and store the artifact file name.

    Args:
        output_file_name: Name of the artifact as produced by the build,
            e.g. "app-debug.apk". Only its extension is used.
        today: Date stamped into versioned names; defaults to today.
    """
    step(f"Computing output file name for {variant}")

    if config.use_versions_from_tag:
        tag = _current_tag(repo, variant, config)
        strategy = config.output_name()
    else:
        tag = None
        strategy = simple_apk_name
    name = strategy(output_file_name, tag, config.base_file_name, today=today)

    path = output_dir(repo, config) / output_name_file_name(variant)
    write_text_output(path, name)
    print(f"  output file name: {name}")
    return name


def generate_changelog(repo: Path, variant: str, config: OutputConfig) -> str:
    """Build and store the changelog of the variant's stored snapshot.

    Without a snapshot the changelog cannot be generated, and an explanatory
    "not generated" text is stored instead.

    Raises:
        PatternError: If the issue number pattern is malformed.
        SnapshotIOError: If the stored snapshot cannot be parsed.
    """
    snapshot_path = output_dir(repo, config) / snapshot_file_name(variant)
    snapshot = read_snapshot(snapshot_path)

    if snapshot is None:
        step(f"Building changelog for {variant}")
        warn(f"no tag snapshot at {snapshot_path}; changelog not generated")
        text = not_generated_message(config.tag_pattern, stub_tag(variant))
    else:
        builder = ChangelogBuilder(GitRepository(repo), config.issue_number_pattern)
        text = builder.build(
            config.commit_message_key,
            snapshot,
            exclude_message_key=config.exclude_message_key,
            annotated_tag_strategy=(
                decorated_tag_message if config.annotate_changelog_with_tag_message else None
            ),
        )

    path = output_dir(repo, config) / changelog_file_name(variant)
    write_text_output(path, text)
    print(f"  wrote {path}")
    return text


def print_next_tag(repo: Path, variant: str, config: OutputConfig) -> str:
    """Name of the tag the next build of ``variant`` should create.

    Uses the stored snapshot when there is one, otherwise resolves afresh
    without writing anything.
    """
    snapshot = read_snapshot(output_dir(repo, config) / snapshot_file_name(variant))
    if snapshot is None:
        snapshot = TagResolver(GitRepository(repo)).resolve(
            variant,
            config.tag_pattern,
            use_stub_as_fallback=config.use_stubs_for_tag_as_fallback,
        )
    name = next_tag_name(snapshot.current, config.tag_pattern)
    print(f"  next tag: {name}")
    return name


def run_all(
    repo: Path,
    variant: str,
    config: OutputConfig,
    output_file_name: str,
    *,
    today: date | None = None,
) -> None:
    """Run every step for one variant, in order."""
    get_last_tag_snapshot(repo, variant, config)
    compute_version_code(repo, variant, config)
    compute_version_name(repo, variant, config)
    compute_output_file_name(repo, variant, config, output_file_name, today=today)
    generate_changelog(repo, variant, config)

    print(f"\n{'=' * 60}\nDone: {variant}\n{'=' * 60}")
