"""Validators for settings values and filesystem paths.

Path helpers are shared by the environment context (app/config directories)
and the config file locator, so both report the same error shapes.
"""

import os
import stat
from pathlib import Path

from cfx.config.errors import (
    NotADirectoryPathError,
    PathAccessError,
    PathNotFoundError,
    PathPermissionError,
)


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Validated log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if value.upper() not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return value.upper()


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Args:
        value: Log format string.

    Returns:
        Validated log format.

    Raises:
        ValueError: If log format is not valid.
    """
    valid_formats = {"json", "console"}
    if value.lower() not in valid_formats:
        raise ValueError(f"log_format must be one of {valid_formats}, got {value}")
    return value.lower()


def resolve_path(value: Path | str) -> Path:
    """Resolve relative paths against the current working directory.

    Symlinks are left alone; only the path is made absolute.

    Args:
        value: Path value (can be string or Path).

    Returns:
        Absolute Path object.
    """
    path = Path(value)
    if not path.is_absolute():
        path = Path(os.path.abspath(path))
    return path


def ensure_directory(path: Path, variable: str | None = None) -> Path:
    """Check that ``path`` exists, is a directory and is readable.

    Args:
        path: Absolute path to check.
        variable: Environment variable the path came from, used in messages.

    Returns:
        The same path, for chaining.

    Raises:
        PathNotFoundError: The path does not exist.
        PathPermissionError: The path (or a parent) is not accessible.
        NotADirectoryPathError: The path is a file.
        PathAccessError: Any other OS error while inspecting the path.
    """
    label = f"{variable} is set to {path}" if variable else f"directory {path}"

    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise PathNotFoundError(
            f"{label} - which does not exist: {e}", path=path, variable=variable, cause=e
        ) from e
    except PermissionError as e:
        raise PathPermissionError(
            f"{label} - which has too restrictive permissions: {e}",
            path=path,
            variable=variable,
            cause=e,
        ) from e
    except OSError as e:
        raise PathAccessError(
            f"{label} - which could not be interpreted by the os: {e}",
            path=path,
            variable=variable,
            cause=e,
        ) from e

    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryPathError(
            f"{label} - which points to a file, not a directory", path=path, variable=variable
        )

    if not os.access(path, os.R_OK | os.X_OK):
        raise PathPermissionError(
            f"{label} - which has too restrictive permissions", path=path, variable=variable
        )

    return path
