"""Integration tests for snapvcs log command and its aliases."""

import hashlib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from snapvcs.cli.main import app

runner = CliRunner()


class TestLogCommand:
    """Test snapvcs log command."""

    def test_log_empty_repo(self, initialized_repo: Path) -> None:
        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0
        assert "no commits yet" in result.stdout.lower()

    def test_log_single_commit(self, initialized_repo: Path) -> None:
        """init -> add -> commit -> log end to end."""
        (initialized_repo / "file.txt").write_text("hello")
        runner.invoke(app, ["add", "file.txt"])
        runner.invoke(app, ["commit", "first"])

        result = runner.invoke(app, ["log"])

        object_id = hashlib.sha1(b"hello").hexdigest()
        tree = hashlib.sha1(f"{object_id} {object_id}".encode()).hexdigest()
        assert result.exit_code == 0
        assert f"tree {tree}\n\nfirst\n" in result.stdout
        assert result.stdout.count("tree ") == 1

    def test_log_multiple_commits(self, initialized_repo: Path) -> None:
        for i in (1, 2, 3):
            (initialized_repo / f"file{i}.txt").write_text(f"content{i}")
            runner.invoke(app, ["add", f"file{i}.txt"])
            runner.invoke(app, ["commit", f"Commit number {i}"])

        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0
        out = result.stdout
        assert out.index("Commit number 3") < out.index("Commit number 2") < out.index(
            "Commit number 1"
        )
        assert out.count("tree ") == 3

    def test_log_commits_track_full_store(self, initialized_repo: Path) -> None:
        (initialized_repo / "a.txt").write_text("a")
        runner.invoke(app, ["add", "a.txt"])
        runner.invoke(app, ["commit", "one"])
        runner.invoke(app, ["commit", "two"])

        result = runner.invoke(app, ["log"])

        tree_lines = [line for line in result.stdout.splitlines() if line.startswith("tree ")]
        assert len(tree_lines) == 2
        assert tree_lines[0] == tree_lines[1]

    @pytest.mark.parametrize("alias", ["push", "pull", "remote"])
    def test_aliases_match_log(self, initialized_repo: Path, alias: str) -> None:
        runner.invoke(app, ["commit", "aliased"])

        expected = runner.invoke(app, ["log"])
        result = runner.invoke(app, [alias])

        assert result.exit_code == 0
        assert result.stdout == expected.stdout

    def test_log_not_a_repository(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["log"])

        assert result.exit_code == 1
        assert "Not a SnapVCS repository" in result.stdout
