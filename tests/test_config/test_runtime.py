"""End-to-end tests for bootstrap."""

from pathlib import Path

import pytest
from pydantic import BaseModel

from cfx.config import ConfigRuntime, bootstrap
from cfx.config.errors import ConfigNotFoundError, PathNotFoundError
from cfx.config.system import SystemProbe


class Service(BaseModel):
    name: str
    port: int


class TestBootstrap:
    """Test the full startup sequence."""

    def test_staging_scenario(self, app_dir: Path, fake_probe: SystemProbe) -> None:
        (app_dir / "config" / "base.yaml").write_text("service:\n  name: widget\n")
        (app_dir / "config" / "staging.yaml").write_text("service:\n  port: 8080\n")
        environ = {"CFX_ENVIRONMENT": "staging", "CFX_APP_DIR": str(app_dir)}

        runtime = bootstrap(environ=environ, probe=fake_probe)

        assert isinstance(runtime, ConfigRuntime)
        assert runtime.env.environment == "staging"
        service = runtime.config.populate("service", Service)
        assert service.name == "widget"
        assert service.port == 8080

    def test_missing_environment_file_aborts(
        self, app_dir: Path, fake_probe: SystemProbe
    ) -> None:
        (app_dir / "config" / "base.yaml").write_text("service:\n  name: widget\n")

        with pytest.raises(ConfigNotFoundError):
            bootstrap(environ={"CFX_APP_DIR": str(app_dir)}, probe=fake_probe)

    def test_path_error_aborts(self, tmp_path: Path, fake_probe: SystemProbe) -> None:
        with pytest.raises(PathNotFoundError):
            bootstrap(environ={"CFX_APP_DIR": str(tmp_path / "gone")}, probe=fake_probe)

    def test_dotenv_feeds_context_and_expansion(
        self, app_dir: Path, fake_probe: SystemProbe
    ) -> None:
        (app_dir / ".env").write_text(
            f"MYAPP_APP_DIR={app_dir}\nMYAPP_ENVIRONMENT=qa\nSERVICE_PORT=7000\n"
        )
        (app_dir / "config" / "qa.yaml").write_text(
            "service:\n  name: widget\n  port: ${SERVICE_PORT}\n"
        )

        runtime = bootstrap(
            "MYAPP", environ={}, dotenv=True, dotenv_dir=app_dir, probe=fake_probe
        )

        assert runtime.env.environment == "qa"
        assert runtime.config.populate("service", Service).port == 7000
