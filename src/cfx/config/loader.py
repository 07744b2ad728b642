"""Load and merge the two-tier YAML configuration.

The configuration directory holds an optional ``base.yaml`` and a required
``<environment>.yaml``. Both are read, ``${VAR}`` tokens are expanded against
the (unprefixed) process environment, and the environment file is deep-merged
over the base file:

- mappings merge key by key, recursively
- scalars and sequences from the environment file replace the base value
- an explicit ``null`` in the environment file clears the base value
"""

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from cfx.config.container import ConfigContainer
from cfx.config.environment import EnvironmentContext
from cfx.config.errors import ConfigLoadError, ConfigNotFoundError, ProviderConstructionError
from cfx.config.locator import locate_config_file
from cfx.telemetry import CONFIG_FILE_MISSING, CONFIG_LOADED, get_logger

log = get_logger(__name__)

BASE_CONFIG_NAME = "base"

# $$ is a literal dollar; ${NAME} or ${NAME:default} is a variable reference.
_EXPAND_PATTERN = re.compile(r"\$\$|\$\{([^}:]*)(?::([^}]*))?\}")


def expand_env(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``${NAME}`` and ``${NAME:default}`` tokens in ``text``.

    Args:
        text: Raw file contents.
        environ: Variable lookup. Defaults to ``os.environ``.

    Returns:
        The expanded text.

    Raises:
        ConfigLoadError: A referenced variable is unset and has no default,
            or a token has an empty name.
    """
    if environ is None:
        environ = os.environ

    def _replace(match: re.Match[str]) -> str:
        if match.group(0) == "$$":
            return "$"
        name, default = match.group(1), match.group(2)
        if not name:
            raise ConfigLoadError(f"Empty variable name in '{match.group(0)}'")
        value = environ.get(name)
        if value is not None:
            return value
        if default is not None:
            return default
        raise ConfigLoadError(f"Environment variable {name} is not set and has no default")

    return _EXPAND_PATTERN.sub(_replace, text)


def load_yaml_file(
    file_path: Path,
    error_class: type[Exception] = ConfigLoadError,
    environ: Mapping[str, str] | None = None,
    expand: bool = False,
) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        file_path: Path to the YAML file.
        error_class: Exception class to raise on errors. Defaults to ConfigLoadError.
        environ: Variable lookup used when ``expand`` is set.
        expand: Expand ``${VAR}`` tokens before parsing.

    Returns:
        Parsed YAML content as a dictionary. Returns empty dict if file is empty or None.

    Raises:
        error_class: If file cannot be read or parsed, or its top level is not
            a mapping. The error message includes the file path and details.

    Example:
        >>> from pathlib import Path
        >>> data = load_yaml_file(Path("config/base.yaml"))
        >>> print(data.get("service", {}))
    """
    try:
        text = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise error_class(f"Configuration file not found: {file_path}") from None
    except OSError as e:
        raise error_class(f"Unexpected error reading {file_path}: {e}") from None

    if expand:
        try:
            text = expand_env(text, environ)
        except ConfigLoadError as e:
            raise error_class(f"Failed to expand variables in {file_path}: {e}") from None

    try:
        content = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise error_class(f"Failed to parse YAML file {file_path}: {e}") from None

    if content is None:
        log.debug("yaml_file_empty", file_path=str(file_path))
        return {}
    if not isinstance(content, dict):
        raise error_class(
            f"Top level of {file_path} must be a mapping, got {type(content).__name__}"
        )
    return content


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def build_document(
    paths: Iterable[Path], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Read, expand and merge YAML files; later files win.

    Raises:
        ProviderConstructionError: Any file cannot be read, expanded or parsed.
    """
    document: dict[str, Any] = {}
    for path in paths:
        layer = load_yaml_file(
            path, error_class=ProviderConstructionError, environ=environ, expand=True
        )
        document = deep_merge(document, layer)
    return document


def load_config(
    env: EnvironmentContext, *, environ: Mapping[str, str] | None = None
) -> ConfigContainer:
    """Load ``base`` and ``<environment>`` YAML files into a container.

    Args:
        env: Resolved environment context; ``config_path`` and
            ``environment`` select the files.
        environ: Lookup for ``${VAR}`` expansion. Defaults to ``os.environ``.

    Returns:
        A ConfigContainer holding the merged document.

    Raises:
        ConfigNotFoundError: The environment file is missing. A missing base
            file is not an error.
        AmbiguousConfigError: Several files match one logical name.
        PathError: The configuration directory is unusable.
        ProviderConstructionError: A file could not be read or parsed.
    """
    layers: list[Path] = []

    try:
        layers.append(locate_config_file(env.config_path, BASE_CONFIG_NAME))
    except ConfigNotFoundError:
        log.debug(CONFIG_FILE_MISSING, name=BASE_CONFIG_NAME, config_path=str(env.config_path))

    layers.append(locate_config_file(env.config_path, str(env.environment)))

    document = build_document(layers, environ)
    container = ConfigContainer(document)

    log.info(
        CONFIG_LOADED,
        environment=str(env.environment),
        files=[str(p) for p in layers],
        keys=sorted(map(str, document)),
    )
    return container
