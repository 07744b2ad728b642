"""Tests for host and user identity probes."""

import sys
from types import SimpleNamespace

import pytest

from cfx.config import system
from cfx.config.errors import HostResolutionError


def _fake_winreg(guid: str | None) -> SimpleNamespace:
    def query_value(key: object, name: str) -> tuple[str, int]:
        if guid is None:
            raise OSError("value not found")
        return guid, 1

    return SimpleNamespace(
        HKEY_LOCAL_MACHINE=0,
        KEY_READ=1,
        KEY_WOW64_64KEY=2,
        OpenKey=lambda *args: object(),
        QueryValueEx=query_value,
        CloseKey=lambda key: None,
    )


class TestGetMachineId:
    """Test per-platform machine id lookup."""

    def test_windows_reads_machine_guid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system.platform, "system", lambda: "Windows")
        monkeypatch.setitem(sys.modules, "winreg", _fake_winreg("guid-123"))

        assert system.get_machine_id() == "guid-123"

    def test_windows_registry_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system.platform, "system", lambda: "Windows")
        monkeypatch.setitem(sys.modules, "winreg", _fake_winreg(None))

        with pytest.raises(HostResolutionError, match="machine uuid"):
            system.get_machine_id()

    def test_unknown_platform_without_hostid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system.platform, "system", lambda: "Plan9")
        monkeypatch.setattr(system, "_BSD_HOST_ID_PATH", "/nonexistent/hostid")

        with pytest.raises(HostResolutionError):
            system.get_machine_id()


class TestGetHostname:
    """Test hostname lookup."""

    def test_empty_hostname(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system.socket, "gethostname", lambda: "")

        with pytest.raises(HostResolutionError):
            system.get_hostname()
