"""Environment variable file loader with priority-based layering.

Reads ``.env`` files from a directory and layers them under the real process
environment, returning a new mapping. ``os.environ`` is never modified; the
result is meant to be passed as ``environ=`` to the context builder and the
config loader.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from cfx.config.identifiers import KEY_ENVIRONMENT, parse_env_key_prefix, parse_environment_id
from cfx.telemetry import ENV_FILES_LOADED, get_logger

log = get_logger(__name__)


def _read_env_file(path: Path) -> dict[str, str]:
    # Keys declared without a value come back as None; treat them as unset.
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def load_env_files(
    directory: Path | str | None = None,
    prefix: str = "",
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Layer .env files under the process environment.

    Priority order (highest to lowest):
    1. The process environment (``environ``)
    2. `.env.{environment}.local`
    3. `.env.{environment}`
    4. `.env.local`
    5. `.env`

    The environment name comes from ``<PREFIX>_ENVIRONMENT``, looked up in the
    process environment first and then in ``.env``/``.env.local``.

    Args:
        directory: Directory holding the files. Defaults to the current
            working directory.
        prefix: Environment variable prefix. Empty means ``CFX``.
        environ: Process environment. Defaults to ``os.environ``.

    Returns:
        A new dict with every variable visible to the application.

    Raises:
        IdentifierError: If the prefix or the environment name is invalid.
    """
    env_prefix = parse_env_key_prefix(prefix)
    root = Path(directory) if directory is not None else Path.cwd()
    if environ is None:
        environ = os.environ

    merged: dict[str, str] = {}
    loaded_files: list[str] = []

    def _layer(name: str) -> None:
        path = root / name
        if path.is_file():
            merged.update(_read_env_file(path))
            loaded_files.append(name)

    _layer(".env")
    _layer(".env.local")

    env_key = KEY_ENVIRONMENT.key(env_prefix)
    env_name = str(parse_environment_id(environ.get(env_key) or merged.get(env_key, "")))

    _layer(f".env.{env_name}")
    _layer(f".env.{env_name}.local")

    merged.update(environ)

    if loaded_files:
        log.info(ENV_FILES_LOADED, environment=env_name, files=loaded_files, directory=str(root))
    else:
        log.debug("no_env_files_found", environment=env_name, directory=str(root))

    return merged
