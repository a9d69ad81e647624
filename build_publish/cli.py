"""CLI entry point for build-publish."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager, redirect_stdout
from dataclasses import dataclass
from pathlib import Path

import click

from .config import OutputConfig, load_config
from .errors import BuildPublishError
from .tasks import (
    compute_output_file_name,
    compute_version_code,
    compute_version_name,
    generate_changelog,
    get_last_tag_snapshot,
    print_next_tag,
    run_all,
)


@dataclass(frozen=True)
class Settings:
    """Global options shared by every command."""

    repo: Path
    config_path: Path | None
    output_dir: Path | None

    def load(self, variant: str) -> OutputConfig:
        config = load_config(self.repo, variant, self.config_path)
        if self.output_dir is not None:
            config = config.model_copy(update={"output_dir": self.output_dir})
        return config


@contextmanager
def reported(settings: Settings, variant: str) -> Iterator[None]:
    """Turn build-publish errors into a click error naming variant and pattern."""
    try:
        yield
    except BuildPublishError as exc:
        pattern = getattr(exc, "pattern", None)
        if pattern is None:
            try:
                pattern = settings.load(variant).tag_pattern
            except BuildPublishError:
                pattern = "<unknown>"
        raise click.ClickException(
            f"Build variant '{variant}' (tag pattern `{pattern}`) failed:\n{exc}"
        ) from exc


variant_argument = click.argument("variant")


@click.group()
@click.version_option(package_name="build-publish")
@click.option(
    "--repo",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Git repository to read tags and commits from.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML file with a [tool.build-publish] table (default: <repo>/pyproject.toml).",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the variant files, overriding the configured one.",
)
@click.pass_context
def cli(ctx: click.Context, repo: Path, config_path: Path | None, output_dir: Path | None) -> None:
    """Resolve build tags, versions and changelogs for Android-style build variants."""
    ctx.obj = Settings(repo=repo, config_path=config_path, output_dir=output_dir)


@cli.command()
@variant_argument
@click.pass_obj
def snapshot(settings: Settings, variant: str) -> None:
    """Resolve the current and previous build tags and store the snapshot."""
    with reported(settings, variant):
        get_last_tag_snapshot(settings.repo, variant, settings.load(variant))


@cli.command("version-code")
@variant_argument
@click.pass_obj
def version_code(settings: Settings, variant: str) -> None:
    """Compute the version code from the stored snapshot."""
    with reported(settings, variant):
        compute_version_code(settings.repo, variant, settings.load(variant))


@cli.command("version-name")
@variant_argument
@click.pass_obj
def version_name(settings: Settings, variant: str) -> None:
    """Compute the version name from the stored snapshot."""
    with reported(settings, variant):
        compute_version_name(settings.repo, variant, settings.load(variant))


@cli.command("output-name")
@variant_argument
@click.argument("output_file_name")
@click.pass_obj
def output_name(settings: Settings, variant: str, output_file_name: str) -> None:
    """Compute the artifact file name for OUTPUT_FILE_NAME (e.g. app-debug.apk)."""
    with reported(settings, variant):
        compute_output_file_name(settings.repo, variant, settings.load(variant), output_file_name)


@cli.command()
@variant_argument
@click.pass_obj
def changelog(settings: Settings, variant: str) -> None:
    """Generate the changelog of the stored snapshot."""
    with reported(settings, variant):
        generate_changelog(settings.repo, variant, settings.load(variant))


@cli.command("next-tag")
@variant_argument
@click.pass_obj
def next_tag(settings: Settings, variant: str) -> None:
    """Print the name of the tag the next build should create."""
    # stdout carries only the tag name so scripts can capture it
    with reported(settings, variant), redirect_stdout(sys.stderr):
        name = print_next_tag(settings.repo, variant, settings.load(variant))
    click.echo(name)


@cli.command()
@variant_argument
@click.option(
    "--output-file-name",
    default="app.apk",
    show_default=True,
    help="Artifact name as produced by the build; only its extension matters.",
)
@click.pass_obj
def run(settings: Settings, variant: str, output_file_name: str) -> None:
    """Run every step for VARIANT (usually called from CI)."""
    with reported(settings, variant):
        run_all(settings.repo, variant, settings.load(variant), output_file_name)
