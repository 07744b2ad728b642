"""Tests for environment context construction."""

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from cfx.config.environment import EnvironmentContext, build_environment_context
from cfx.config.errors import (
    HostResolutionError,
    IdentifierError,
    InvalidCharactersError,
    NotADirectoryPathError,
    PathAccessError,
    PathNotFoundError,
    PathPermissionError,
    UserResolutionError,
)
from cfx.config.system import SystemProbe, UserInfo


class TestBuildEnvironmentContext:
    """Test the happy paths of context construction."""

    def test_defaults(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        ctx = build_environment_context(
            environ={"CFX_APP_DIR": str(app_dir)}, probe=fake_probe
        )

        assert ctx.environment == "development"
        assert ctx.env_prefix == "CFX"
        assert ctx.app_path == app_dir
        assert ctx.config_path == app_dir / "config"
        assert ctx.host.hostname == "test-host"
        assert ctx.host.uuid == "0123456789abcdef"
        assert ctx.host.timezone
        assert ctx.user.username == "tester"
        assert ctx.user.uid == "1000"
        assert ctx.user.gid == "1000"
        assert ctx.process.pid == os.getpid()
        assert ctx.process.ppid == os.getppid()
        assert ctx.runtime.os
        assert ctx.runtime.version
        assert ctx.deployment.app_id == ""

    def test_reads_namespaced_variables(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        environ = {
            "MYAPP_APP_DIR": str(app_dir),
            "MYAPP_ENVIRONMENT": "staging",
            "MYAPP_APP_ID": "widget",
            "MYAPP_SERVICE_ID": "catalog",
            "MYAPP_INSTANCE_ID": "i-123",
            "MYAPP_REGION": "eu-west-1",
            "MYAPP_AVAILABILITY_ZONE": "eu-west-1a",
            "MYAPP_NETWORK_ID": "vpc-9",
            "MYAPP_DATACENTER_ID": "dc1",
            # Unprefixed and default-prefixed values must be ignored
            "CFX_REGION": "us-east-1",
            "REGION": "nowhere",
        }

        ctx = build_environment_context("MYAPP", environ=environ, probe=fake_probe)

        assert ctx.env_prefix == "MYAPP"
        assert ctx.environment == "staging"
        assert ctx.deployment.app_id == "widget"
        assert ctx.deployment.service_id == "catalog"
        assert ctx.deployment.instance_id == "i-123"
        assert ctx.deployment.region == "eu-west-1"
        assert ctx.deployment.availability_zone == "eu-west-1a"
        assert ctx.deployment.network_id == "vpc-9"
        assert ctx.deployment.datacenter_id == "dc1"

    def test_timezone_from_tz_variable(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        ctx = build_environment_context(
            environ={"CFX_APP_DIR": str(app_dir), "TZ": ":Europe/Paris"}, probe=fake_probe
        )
        assert ctx.host.timezone == "Europe/Paris"

    def test_app_path_defaults_to_cwd(
        self, app_dir: Path, fake_probe: SystemProbe, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(app_dir)

        ctx = build_environment_context(environ={}, probe=fake_probe)

        assert ctx.app_path == Path(os.getcwd())
        assert ctx.config_path == Path(os.getcwd()) / "config"

    def test_relative_paths_resolved_against_cwd(
        self, tmp_path: Path, fake_probe: SystemProbe, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "settings").mkdir()
        monkeypatch.chdir(tmp_path)

        ctx = build_environment_context(
            environ={"CFX_APP_DIR": "app", "CFX_CONFIG_DIR": "settings"}, probe=fake_probe
        )

        assert ctx.app_path.is_absolute()
        assert ctx.app_path == Path(os.getcwd()) / "app"
        assert ctx.config_path == Path(os.getcwd()) / "settings"

    def test_context_is_immutable(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        ctx = build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=fake_probe)

        with pytest.raises(ValidationError):
            ctx.environment = "production"  # type: ignore[assignment,misc]

    def test_serializes_with_snake_case_fields(
        self, app_dir: Path, fake_probe: SystemProbe
    ) -> None:
        ctx = build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=fake_probe)

        data = json.loads(ctx.model_dump_json())

        assert data["environment"] == "development"
        assert data["env_prefix"] == "CFX"
        assert data["config_path"] == str(app_dir / "config")
        assert set(data["deployment"]) == {
            "app_id",
            "service_id",
            "instance_id",
            "region",
            "availability_zone",
            "network_id",
            "datacenter_id",
        }
        assert EnvironmentContext.model_validate(data) == ctx


class TestBuildEnvironmentContextErrors:
    """Test that every failure aborts construction."""

    def test_invalid_prefix(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        with pytest.raises(IdentifierError):
            build_environment_context("my-app", environ={}, probe=fake_probe)

    def test_invalid_environment(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        environ = {"CFX_APP_DIR": str(app_dir), "CFX_ENVIRONMENT": "Staging"}

        with pytest.raises(InvalidCharactersError, match="CFX_ENVIRONMENT"):
            build_environment_context(environ=environ, probe=fake_probe)

    def test_hostname_failure(self, app_dir: Path) -> None:
        def broken() -> str:
            raise HostResolutionError("no hostname")

        probe = SystemProbe(hostname=broken)

        with pytest.raises(HostResolutionError, match="no hostname"):
            build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=probe)

    def test_machine_id_os_error_is_wrapped(
        self, app_dir: Path, fake_probe: SystemProbe
    ) -> None:
        def broken() -> str:
            raise OSError("permission denied")

        probe = SystemProbe(
            hostname=fake_probe.hostname, machine_id=broken, current_user=fake_probe.current_user
        )

        with pytest.raises(HostResolutionError) as exc_info:
            build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=probe)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_user_unavailable(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        probe = SystemProbe(
            hostname=fake_probe.hostname,
            machine_id=fake_probe.machine_id,
            current_user=lambda: None,
        )

        with pytest.raises(UserResolutionError):
            build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=probe)

    def test_user_lookup_error_is_wrapped(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        def broken() -> UserInfo:
            raise KeyError("uid not found")

        probe = SystemProbe(
            hostname=fake_probe.hostname, machine_id=fake_probe.machine_id, current_user=broken
        )

        with pytest.raises(UserResolutionError):
            build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=probe)

    def test_unreadable_working_directory(
        self, fake_probe: SystemProbe, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def deleted_cwd() -> str:
            raise FileNotFoundError("cwd was removed")

        monkeypatch.setattr("cfx.config.environment.os.getcwd", deleted_cwd)

        with pytest.raises(PathAccessError) as exc_info:
            build_environment_context(environ={}, probe=fake_probe)

        assert exc_info.value.variable == "CFX_APP_DIR"
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_missing_app_path(self, tmp_path: Path, fake_probe: SystemProbe) -> None:
        missing = tmp_path / "missing"

        with pytest.raises(PathNotFoundError) as exc_info:
            build_environment_context(environ={"CFX_APP_DIR": str(missing)}, probe=fake_probe)

        assert exc_info.value.path == missing
        assert exc_info.value.variable == "CFX_APP_DIR"

    def test_app_path_is_a_file(self, tmp_path: Path, fake_probe: SystemProbe) -> None:
        a_file = tmp_path / "file.txt"
        a_file.write_text("not a directory")

        with pytest.raises(NotADirectoryPathError) as exc_info:
            build_environment_context(environ={"CFX_APP_DIR": str(a_file)}, probe=fake_probe)

        assert exc_info.value.variable == "CFX_APP_DIR"

    def test_missing_default_config_dir(self, tmp_path: Path, fake_probe: SystemProbe) -> None:
        with pytest.raises(PathNotFoundError) as exc_info:
            build_environment_context(environ={"CFX_APP_DIR": str(tmp_path)}, probe=fake_probe)

        assert exc_info.value.path == tmp_path / "config"
        assert exc_info.value.variable == "CFX_CONFIG_DIR"

    def test_config_path_is_a_file(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        a_file = app_dir / "config.yaml"
        a_file.write_text("key: value")
        environ = {"CFX_APP_DIR": str(app_dir), "CFX_CONFIG_DIR": str(a_file)}

        with pytest.raises(NotADirectoryPathError) as exc_info:
            build_environment_context(environ=environ, probe=fake_probe)

        assert exc_info.value.variable == "CFX_CONFIG_DIR"

    def test_unreadable_directory(
        self, app_dir: Path, fake_probe: SystemProbe, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("cfx.config.validators.os.access", lambda path, mode: False)

        with pytest.raises(PathPermissionError) as exc_info:
            build_environment_context(environ={"CFX_APP_DIR": str(app_dir)}, probe=fake_probe)

        assert exc_info.value.variable == "CFX_APP_DIR"
