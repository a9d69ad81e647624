"""Snapshot and plain-text output files.

The tag snapshot is the only state shared between separate invocations for
the same variant, so it is written once and read back strictly. The other
outputs are single-value text files consumed by external collaborators.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from .errors import SnapshotIOError
from .models import BuildTagSnapshot

SNAPSHOT_FILE_TEMPLATE = "tag-build-snapshot-{variant}.json"
CHANGELOG_FILE_TEMPLATE = "changelog-{variant}.txt"
VERSION_CODE_FILE_TEMPLATE = "version-code-{variant}.txt"
VERSION_NAME_FILE_TEMPLATE = "version-name-{variant}.txt"
OUTPUT_NAME_FILE_TEMPLATE = "output-name-{variant}.txt"


def snapshot_file_name(variant: str) -> str:
    return SNAPSHOT_FILE_TEMPLATE.format(variant=variant)


def changelog_file_name(variant: str) -> str:
    return CHANGELOG_FILE_TEMPLATE.format(variant=variant)


def version_code_file_name(variant: str) -> str:
    return VERSION_CODE_FILE_TEMPLATE.format(variant=variant)


def version_name_file_name(variant: str) -> str:
    return VERSION_NAME_FILE_TEMPLATE.format(variant=variant)


def output_name_file_name(variant: str) -> str:
    return OUTPUT_NAME_FILE_TEMPLATE.format(variant=variant)


def to_json(snapshot: BuildTagSnapshot) -> str:
    """Serialize a snapshot with camelCase keys in a stable field order.

    Absent previous tags are written as ``null``, never omitted, so the
    object always has exactly ``current``, ``previousInOrder`` and
    ``previousOnDifferentCommit``.
    """
    return snapshot.model_dump_json(by_alias=True, indent=2)


def parse_snapshot(text: str, source: Path) -> BuildTagSnapshot:
    """Parse snapshot JSON read from ``source``.

    Raises:
        SnapshotIOError: If the text is not a valid snapshot object
            (malformed JSON, missing or unknown keys, wrong types).
    """
    try:
        return BuildTagSnapshot.model_validate_json(text)
    except ValidationError as exc:
        raise SnapshotIOError(source, f"invalid snapshot JSON\n{exc}") from exc


def from_json(path: Path) -> BuildTagSnapshot:
    """Read and parse the snapshot stored at ``path``.

    Raises:
        SnapshotIOError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SnapshotIOError(path, exc.strerror or str(exc)) from exc
    return parse_snapshot(text, path)


def read_snapshot(path: Path) -> BuildTagSnapshot | None:
    """Like ``from_json`` but a missing file means "no snapshot yet"."""
    if not path.exists():
        return None
    return from_json(path)


def write_snapshot(path: Path, snapshot: BuildTagSnapshot) -> None:
    """Write ``snapshot`` to ``path``, creating parent directories.

    Raises:
        SnapshotIOError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(to_json(snapshot), encoding="utf-8")
    except OSError as exc:
        raise SnapshotIOError(path, exc.strerror or str(exc)) from exc


def write_text_output(path: Path, value: str | int | None) -> None:
    """Write a single value as UTF-8 text; None writes an empty file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("" if value is None else str(value), encoding="utf-8")


def read_text_output(path: Path) -> str | None:
    """Read a text output; a missing or empty file means "no value"."""
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8") or None


def read_version_code(path: Path) -> int | None:
    """Read a version code file written by ``write_text_output``.

    Raises:
        ValueError: If the file holds something other than an integer.
    """
    value = read_text_output(path)
    return int(value.strip()) if value and value.strip() else None
