from pathlib import Path

import pytest

from reconcile.utils import GIT_ENV_OVERRIDES, CommandConfig, run_command
from reconcile.vcs import GitAdapter
from tests.integration.conftest import init_git_repo


class TestRunCommand:
    def test_captures_output(self) -> None:
        result = run_command(CommandConfig(args=("git", "--version")))

        assert result.ok
        assert result.stdout.startswith("git version")
        assert result.command == ("git", "--version")

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        init_git_repo(tmp_path)
        result = run_command(
            CommandConfig(args=("git", "rev-parse", "--verify", "refs/heads/missing"), cwd=tmp_path)
        )

        assert not result.ok
        assert result.exit_code not in (None, 0)
        assert result.stderr

    def test_missing_program(self) -> None:
        result = run_command(CommandConfig(args=("reconcile-missing-program-xyz",)))

        assert result.command_not_found
        assert result.exit_code is None

    def test_stdin_is_piped(self) -> None:
        result = run_command(
            CommandConfig(args=("git", "hash-object", "--stdin"), stdin=b"hello\n")
        )

        assert result.stdout.strip() == "ce013625030ba8dba906f756967f9e9ca394464a"

    def test_git_dir_override_is_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        repo = tmp_path / "repo"
        repo.mkdir()
        init_git_repo(repo)
        monkeypatch.setenv("GIT_DIR", str(tmp_path / "elsewhere"))

        result = run_command(
            CommandConfig(
                args=("git", "rev-parse", "--git-dir"), cwd=repo, unset_env=GIT_ENV_OVERRIDES
            )
        )

        assert result.ok
        assert result.stdout.strip() == ".git"


class TestProbeVersion:
    def test_installed_git(self) -> None:
        version = GitAdapter.probe_version()

        assert version is not None
        assert version.split(".")[0].isdigit()
