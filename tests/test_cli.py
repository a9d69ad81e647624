"""Tests for build_publish.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner, Result

from build_publish.cli import cli

from conftest import GitRepo


def _invoke(repo: Path, *args: str) -> Result:
    return CliRunner().invoke(cli, ["--repo", str(repo), *args])


class TestCommands:
    def test_run_writes_variant_files(self, released_repo: GitRepo) -> None:
        result = _invoke(released_repo.path, "run", "debug")

        assert result.exit_code == 0, result.output
        out = released_repo.path / "build"
        assert (out / "version-code-debug.txt").read_text() == "2"
        assert (out / "changelog-debug.txt").read_text().startswith("• [X-2]")

    def test_individual_steps(self, released_repo: GitRepo) -> None:
        for command in ("snapshot", "version-code", "version-name", "changelog"):
            result = _invoke(released_repo.path, command, "debug")
            assert result.exit_code == 0, result.output

        result = _invoke(released_repo.path, "output-name", "debug", "app-debug.aab")

        assert result.exit_code == 0, result.output
        assert (released_repo.path / "build" / "output-name-debug.txt").read_text() == "dev.aab"

    def test_next_tag(self, released_repo: GitRepo) -> None:
        result = _invoke(released_repo.path, "next-tag", "debug")

        assert result.exit_code == 0, result.output
        assert result.stdout == "v1.0.3-debug\n"
        assert "Resolving build tag" in result.stderr

    def test_output_dir_option(self, released_repo: GitRepo, tmp_path: Path) -> None:
        target = tmp_path / "artifacts"

        result = _invoke(released_repo.path, "--output-dir", str(target), "snapshot", "debug")

        assert result.exit_code == 0, result.output
        assert (target / "tag-build-snapshot-debug.json").exists()

    def test_config_option(self, released_repo: GitRepo, tmp_path: Path) -> None:
        config_path = tmp_path / "publish.toml"
        config_path.write_text(
            '[tool.build-publish]\nversion-name-strategy = "build-version-number"\n'
        )

        result = _invoke(released_repo.path, "--config", str(config_path), "run", "debug")

        assert result.exit_code == 0, result.output
        assert (released_repo.path / "build" / "version-name-debug.txt").read_text() == "1.0.2"


class TestErrors:
    def test_missing_tag_names_variant_and_pattern(self, git_repo: GitRepo) -> None:
        git_repo.commit("Initial commit")

        result = _invoke(git_repo.path, "snapshot", "googleRelease")

        assert result.exit_code == 1
        assert "googleRelease" in result.output
        assert r".+\.(\d+)-%s" in result.output

    def test_invalid_config(self, git_repo: GitRepo) -> None:
        (git_repo.path / "pyproject.toml").write_text(
            '[tool.build-publish]\noutput-name-strategy = "fancy"\n'
        )

        result = _invoke(git_repo.path, "snapshot", "debug")

        assert result.exit_code == 1
        assert "fancy" in result.output

    @patch("build_publish.cli.run_all")
    def test_run_dispatches_to_pipeline(self, mock_run_all: MagicMock, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "run", "debug", "--output-file-name", "app.aab")

        assert result.exit_code == 0, result.output
        (repo, variant, _config, output_file_name), _ = mock_run_all.call_args
        assert (repo, variant, output_file_name) == (tmp_path, "debug", "app.aab")
