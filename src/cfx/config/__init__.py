"""Environment resolution and layered YAML configuration.

Typical startup::

    from cfx.config import bootstrap

    runtime = bootstrap("MYAPP")
    db = runtime.config.populate("database", DatabaseConfig)

The pieces can also be used on their own: ``build_environment_context``
resolves the environment, ``load_config`` loads ``base`` + ``<environment>``
YAML into a ``ConfigContainer``.
"""

from cfx.config.container import ConfigContainer
from cfx.config.env_loader import load_env_files
from cfx.config.environment import (
    DeploymentContext,
    EnvironmentContext,
    HostContext,
    ProcessContext,
    RuntimeContext,
    UserContext,
    build_environment_context,
)
from cfx.config.errors import (
    AmbiguousConfigError,
    CfxError,
    ConfigLoadError,
    ConfigNotFoundError,
    ConfigQueryError,
    HostResolutionError,
    IdentifierError,
    InvalidCharactersError,
    InvalidLengthError,
    NoConfigLoadedError,
    NotADirectoryPathError,
    PathAccessError,
    PathError,
    PathNotFoundError,
    PathPermissionError,
    PopulateError,
    ProviderConstructionError,
    UserResolutionError,
)
from cfx.config.identifiers import (
    DEFAULT_ENV_KEY_PREFIX,
    DEFAULT_ENVIRONMENT,
    EnvID,
    EnvKeyPrefix,
    EnvVar,
    parse_env_key_prefix,
    parse_environment_id,
)
from cfx.config.loader import deep_merge, expand_env, load_config, load_yaml_file
from cfx.config.locator import locate_config_file
from cfx.config.runtime import ConfigRuntime, bootstrap
from cfx.config.settings import CfxSettings, get_settings
from cfx.config.system import SystemProbe, UserInfo

__all__ = [
    # Startup
    "bootstrap",
    "ConfigRuntime",
    # Identifiers
    "EnvID",
    "EnvKeyPrefix",
    "EnvVar",
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_ENV_KEY_PREFIX",
    "parse_environment_id",
    "parse_env_key_prefix",
    # Environment context
    "EnvironmentContext",
    "HostContext",
    "RuntimeContext",
    "DeploymentContext",
    "UserContext",
    "ProcessContext",
    "build_environment_context",
    "load_env_files",
    "SystemProbe",
    "UserInfo",
    # Configuration loading
    "locate_config_file",
    "load_config",
    "load_yaml_file",
    "expand_env",
    "deep_merge",
    "ConfigContainer",
    # Library settings
    "CfxSettings",
    "get_settings",
    # Exception classes
    "CfxError",
    "IdentifierError",
    "InvalidLengthError",
    "InvalidCharactersError",
    "PathError",
    "PathNotFoundError",
    "PathPermissionError",
    "NotADirectoryPathError",
    "PathAccessError",
    "HostResolutionError",
    "UserResolutionError",
    "ConfigLoadError",
    "ConfigNotFoundError",
    "AmbiguousConfigError",
    "ProviderConstructionError",
    "ConfigQueryError",
    "NoConfigLoadedError",
    "PopulateError",
]
