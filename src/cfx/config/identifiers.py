"""Validated identifier types: environment names, variable prefixes and variable keys.

``EnvID`` and ``EnvKeyPrefix`` check their invariants when constructed, so a
value of either type is always valid. Both are ``str`` subclasses and can be
used directly as pydantic field types.
"""

import os
import string
from collections.abc import Mapping
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from cfx.config.errors import InvalidCharactersError, InvalidLengthError

MIN_LENGTH = 2
MAX_LENGTH = 64

DEFAULT_ENVIRONMENT = "development"
DEFAULT_ENV_KEY_PREFIX = "CFX"
ENV_VAR_SEPARATOR = "_"

_ENV_ID_ALPHABET = frozenset(string.ascii_lowercase + string.digits)
_PREFIX_ALPHABET = frozenset(string.ascii_uppercase + string.digits + "_")


class _ValidatedStr(str):
    """Base for string value objects validated on construction."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"


class EnvID(_ValidatedStr):
    """Deployment tier identifier, e.g. ``development`` or ``staging``.

    Lowercase ASCII letters and digits, 2 to 64 characters. An empty value
    resolves to ``development``.
    """

    def __new__(cls, value: str = "") -> "EnvID":
        if value == "":
            return super().__new__(cls, DEFAULT_ENVIRONMENT)

        if len(value) > MAX_LENGTH:
            raise InvalidLengthError(
                f"environment identifier must not be longer than {MAX_LENGTH} characters",
                value=value,
            )
        if len(value) < MIN_LENGTH:
            raise InvalidLengthError(
                f"environment identifier must be at least {MIN_LENGTH} characters long",
                value=value,
            )
        if not set(value) <= _ENV_ID_ALPHABET:
            raise InvalidCharactersError(
                "environment identifier contains invalid characters, "
                "must be only lowercase alphanumeric",
                value=value,
            )
        return super().__new__(cls, value)

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_ENVIRONMENT


class EnvKeyPrefix(_ValidatedStr):
    """Namespace prepended to every recognized environment variable.

    Uppercase ASCII letters, digits and ``_``, 2 to 64 characters, not
    starting or ending with ``_``. An empty value resolves to ``CFX``.
    """

    def __new__(cls, value: str = "") -> "EnvKeyPrefix":
        if value == "":
            return super().__new__(cls, DEFAULT_ENV_KEY_PREFIX)

        if len(value) > MAX_LENGTH:
            raise InvalidLengthError(
                f"env key prefix must not be longer than {MAX_LENGTH} characters",
                value=value,
                fallback=DEFAULT_ENV_KEY_PREFIX,
            )
        if len(value) < MIN_LENGTH:
            raise InvalidLengthError(
                f"env key prefix must be at least {MIN_LENGTH} characters long",
                value=value,
                fallback=DEFAULT_ENV_KEY_PREFIX,
            )
        if value[0] == "_" or value[-1] == "_":
            raise InvalidCharactersError(
                "env key prefix cannot start or end with an underscore character",
                value=value,
                fallback=DEFAULT_ENV_KEY_PREFIX,
            )
        if not set(value) <= _PREFIX_ALPHABET:
            raise InvalidCharactersError(
                "env key prefix contains invalid characters, "
                "must be only uppercase alphanumeric or underscore",
                value=value,
                fallback=DEFAULT_ENV_KEY_PREFIX,
            )
        return super().__new__(cls, value)


def parse_environment_id(value: str) -> EnvID:
    """Parse an environment identifier.

    Args:
        value: Raw identifier. Empty means the default environment.

    Returns:
        The validated identifier, verbatim.

    Raises:
        InvalidLengthError: If the value is not 2 to 64 characters long.
        InvalidCharactersError: If the value is not lowercase alphanumeric.
    """
    return EnvID(value)


def parse_env_key_prefix(value: str) -> EnvKeyPrefix:
    """Parse an environment variable prefix.

    Args:
        value: Raw prefix. Empty means ``CFX``.

    Returns:
        The validated prefix.

    Raises:
        InvalidLengthError: If the value is not 2 to 64 characters long.
        InvalidCharactersError: If the value has characters outside
            ``[A-Z0-9_]`` or starts/ends with ``_``. The exception's
            ``fallback`` attribute holds the default prefix.
    """
    return EnvKeyPrefix(value)


class EnvVar(str):
    """Suffix of a namespaced environment variable, e.g. ``APP_DIR``."""

    def key(self, prefix: str = "") -> str:
        """Return the full variable name, ``PREFIX_SUFFIX``."""
        return ENV_VAR_SEPARATOR.join([prefix or DEFAULT_ENV_KEY_PREFIX, str(self)])

    def get(self, prefix: str = "", environ: Mapping[str, str] | None = None) -> str:
        """Read the namespaced variable, returning ``""`` when it is unset."""
        if environ is None:
            environ = os.environ
        return environ.get(self.key(prefix), "")


KEY_ENVIRONMENT = EnvVar("ENVIRONMENT")
KEY_APP_PATH = EnvVar("APP_DIR")
KEY_CONFIG_PATH = EnvVar("CONFIG_DIR")
KEY_APP_ID = EnvVar("APP_ID")
KEY_SERVICE_ID = EnvVar("SERVICE_ID")
# Populated from environment variables only; no cloud metadata lookups.
KEY_INSTANCE_ID = EnvVar("INSTANCE_ID")
KEY_REGION = EnvVar("REGION")
KEY_AVAILABILITY_ZONE = EnvVar("AVAILABILITY_ZONE")
KEY_NETWORK_ID = EnvVar("NETWORK_ID")
KEY_DATACENTER_ID = EnvVar("DATACENTER_ID")
