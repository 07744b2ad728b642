"""One-call startup: resolve the environment, then load its configuration.

Applications call ``bootstrap`` once at process start and hand the resulting
``ConfigRuntime`` (or its parts) to whatever needs it. Any error is fatal and
is re-raised for the entry point to handle.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from cfx.config.container import ConfigContainer
from cfx.config.env_loader import load_env_files
from cfx.config.environment import EnvironmentContext, build_environment_context
from cfx.config.errors import CfxError
from cfx.config.loader import load_config
from cfx.config.system import SystemProbe
from cfx.telemetry import BOOTSTRAP_COMPLETED, BOOTSTRAP_FAILED, get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ConfigRuntime:
    """The environment context and the configuration loaded for it."""

    env: EnvironmentContext
    config: ConfigContainer


def bootstrap(
    prefix: str = "",
    *,
    environ: Mapping[str, str] | None = None,
    dotenv: bool = False,
    dotenv_dir: Path | str | None = None,
    probe: SystemProbe | None = None,
) -> ConfigRuntime:
    """Build the environment context and load the layered YAML configuration.

    Args:
        prefix: Environment variable prefix. Empty means ``CFX``.
        environ: Variable lookup. Defaults to ``os.environ``.
        dotenv: Layer ``.env`` files from ``dotenv_dir`` under ``environ``.
        dotenv_dir: Directory holding the ``.env`` files. Defaults to the cwd.
        probe: Host identity queries. Defaults to the real host.

    Returns:
        The populated ConfigRuntime.

    Raises:
        CfxError: Any construction failure. Nothing is partially returned.
    """
    if environ is None:
        environ = os.environ

    try:
        if dotenv:
            environ = load_env_files(dotenv_dir, prefix=prefix, environ=environ)
        env = build_environment_context(prefix, environ=environ, probe=probe)
        config = load_config(env, environ=environ)
    except CfxError as e:
        log.error(BOOTSTRAP_FAILED, error=str(e), error_type=type(e).__name__)
        raise

    log.info(
        BOOTSTRAP_COMPLETED,
        environment=str(env.environment),
        config_path=str(env.config_path),
    )
    return ConfigRuntime(env=env, config=config)
