"""Exception hierarchy for environment resolution and configuration loading.

Construction-time errors (identifiers, paths, host/user resolution, loading)
are meant to abort startup. Query-time errors (``ConfigQueryError``) are
per-call and recoverable by the caller.
"""

from pathlib import Path


class CfxError(Exception):
    """Base exception for all cfx errors."""

    pass


class IdentifierError(CfxError, ValueError):
    """Raised when an environment identifier or variable prefix is malformed."""

    def __init__(self, message: str, *, value: str = "", fallback: str = "") -> None:
        super().__init__(message)
        self.value = value
        self.fallback = fallback


class InvalidLengthError(IdentifierError):
    """Identifier is shorter than 2 or longer than 64 characters."""


class InvalidCharactersError(IdentifierError):
    """Identifier contains characters outside its allowed alphabet."""


class PathError(CfxError):
    """Raised when a required directory is missing, unreadable or not a directory.

    Attributes:
        path: The offending path, already resolved to an absolute path.
        variable: Namespaced environment variable the path came from
            (e.g. ``CFX_CONFIG_DIR``), or None when not variable-driven.
        cause: The underlying OS error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        variable: str | None = None,
        cause: OSError | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.variable = variable
        self.cause = cause


class PathNotFoundError(PathError):
    """Path does not exist."""


class PathPermissionError(PathError):
    """Path exists but permissions are too restrictive."""


class NotADirectoryPathError(PathError):
    """Path points at a file, not a directory."""


class PathAccessError(PathError):
    """Path could not be interpreted by the OS for any other reason."""


class HostResolutionError(CfxError):
    """Hostname or machine identifier could not be determined."""


class UserResolutionError(CfxError):
    """The current OS user could not be determined."""


class ConfigLoadError(CfxError):
    """Base exception for configuration loading errors."""

    pass


class ConfigNotFoundError(ConfigLoadError):
    """No YAML file matched the requested logical name."""

    def __init__(self, directory: Path, name: str) -> None:
        super().__init__(f"Could not find a {name}.yaml or {name}.yml config file in {directory}")
        self.directory = directory
        self.name = name


class AmbiguousConfigError(ConfigLoadError):
    """More than one YAML file matched the requested logical name."""

    def __init__(self, directory: Path, name: str, candidates: list[Path]) -> None:
        listed = ", ".join(sorted(p.name for p in candidates))
        super().__init__(
            f"Found several config files for '{name}' in {directory}: {listed}. "
            "Keep exactly one."
        )
        self.directory = directory
        self.name = name
        self.candidates = candidates


class ProviderConstructionError(ConfigLoadError):
    """The merged configuration document could not be built."""


class ConfigQueryError(CfxError):
    """Base exception for errors raised while querying a loaded configuration."""

    pass


class NoConfigLoadedError(ConfigQueryError):
    """The container holds no configuration document."""

    def __init__(self) -> None:
        super().__init__("No configuration files were loaded into the container")


class PopulateError(ConfigQueryError):
    """A configuration subtree could not be deserialized into the target type."""

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key
