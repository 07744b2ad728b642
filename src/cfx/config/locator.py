"""Locate YAML configuration files by logical name.

A logical name such as ``base`` or ``staging`` matches ``base.yaml``,
``Base.YML`` and so on: both the stem and the extension compare
case-insensitively. Only regular entries directly inside the directory are
considered.
"""

from pathlib import Path

from cfx.config.errors import AmbiguousConfigError, ConfigNotFoundError, PathAccessError
from cfx.config.validators import ensure_directory
from cfx.telemetry import get_logger

log = get_logger(__name__)

YAML_EXTENSIONS = frozenset({".yaml", ".yml"})


def locate_config_file(directory: Path | str, name: str) -> Path:
    """Find the single YAML file for ``name`` in ``directory``.

    Args:
        directory: Directory to search (non-recursive).
        name: Logical config name, without extension.

    Returns:
        Path to the matching file.

    Raises:
        PathError: The directory is missing, unreadable or not a directory.
        ConfigNotFoundError: No file matches.
        AmbiguousConfigError: More than one file matches, e.g. ``base.yaml``
            next to ``Base.yml``.
    """
    directory = ensure_directory(Path(directory))
    wanted = name.casefold()

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise PathAccessError(
            f"could not list config directory {directory}: {e}", path=directory, cause=e
        ) from e

    matches = [
        entry
        for entry in entries
        if entry.suffix.lower() in YAML_EXTENSIONS
        and entry.stem.casefold() == wanted
        and not entry.is_dir()
    ]

    if not matches:
        raise ConfigNotFoundError(directory, name)
    if len(matches) > 1:
        raise AmbiguousConfigError(directory, name, matches)

    log.debug("config_file_located", name=name, path=str(matches[0]))
    return matches[0]
