"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from snapvcs.constants import ROOT_ENV_VAR, SNAPVCS_DIR
from snapvcs.core import Repository


class FakeClock:
    """Clock returning a fixed time that advances only when told to."""

    def __init__(self, start: datetime = datetime(2024, 1, 2, 3, 4, 5)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def tick(self, seconds: int = 1) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def _no_root_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's $SNAPVCS_DIR from leaking into tests."""
    monkeypatch.delenv(ROOT_ENV_VAR, raising=False)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo(tmp_path: Path, clock: FakeClock) -> Repository:
    """An initialized repository under tmp_path with a controllable clock."""
    repository = Repository(tmp_path / SNAPVCS_DIR, clock=clock)
    repository.init()
    return repository


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a few sample files."""
    ws = tmp_path / "workspace"
    ws.mkdir()

    (ws / "file.txt").write_text("hello")
    (ws / "notes.md").write_text("# Notes\n\n- first\n- second\n")
    (ws / "data.bin").write_bytes(bytes(range(256)))

    return ws
