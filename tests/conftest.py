"""Shared fixtures for cfx tests."""

from pathlib import Path

import pytest

from cfx.config.system import SystemProbe, UserInfo


@pytest.fixture
def fake_probe() -> SystemProbe:
    """Host probe returning fixed identity values."""
    return SystemProbe(
        hostname=lambda: "test-host",
        machine_id=lambda: "0123456789abcdef",
        current_user=lambda: UserInfo(username="tester", uid="1000", gid="1000"),
    )


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Application directory with an empty ``config`` subdirectory."""
    (tmp_path / "config").mkdir()
    return tmp_path

