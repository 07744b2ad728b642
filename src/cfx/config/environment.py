"""Environment context: a snapshot of where and how the process is running.

The context combines defaults, namespaced environment variables and OS
queries. It is built once at startup by ``build_environment_context`` and is
immutable afterwards. Construction is all-or-nothing: any failure raises and
no partially populated context is ever returned.
"""

import os
import platform
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from cfx.config.errors import (
    HostResolutionError,
    IdentifierError,
    PathAccessError,
    UserResolutionError,
)
from cfx.config.identifiers import (
    KEY_APP_ID,
    KEY_APP_PATH,
    KEY_AVAILABILITY_ZONE,
    KEY_CONFIG_PATH,
    KEY_DATACENTER_ID,
    KEY_ENVIRONMENT,
    KEY_INSTANCE_ID,
    KEY_NETWORK_ID,
    KEY_REGION,
    KEY_SERVICE_ID,
    EnvID,
    EnvKeyPrefix,
    parse_env_key_prefix,
    parse_environment_id,
)
from cfx.config.system import SystemProbe
from cfx.config.validators import ensure_directory, resolve_path
from cfx.telemetry import ENVIRONMENT_CONTEXT_BUILT, get_logger

log = get_logger(__name__)

DEFAULT_CONFIG_DIR = "config"


class HostContext(BaseModel):
    """Information about the underlying host."""

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(default="", description="Name of the machine running the code")
    uuid: str = Field(default="", description="Machine id unique to the OS installation")
    timezone: str = Field(default="", description="Local timezone of the operating system")


class RuntimeContext(BaseModel):
    """Operating system, CPU architecture and interpreter version."""

    model_config = ConfigDict(frozen=True)

    os: str = ""
    arch: str = ""
    version: str = ""


class DeploymentContext(BaseModel):
    """Deployment identifiers, all free-form and possibly empty."""

    model_config = ConfigDict(frozen=True)

    app_id: str = Field(default="", description="Identifier of the application")
    service_id: str = Field(default="", description="Groups several related apps together")
    instance_id: str = Field(default="", description="Unique instance identifier")
    region: str = Field(default="", description="Regional location of the environment")
    availability_zone: str = Field(default="", description="Zone within the region")
    network_id: str = Field(default="", description="Classifies the environment's network")
    datacenter_id: str = Field(default="", description="Classifies the environment's datacenter")


class UserContext(BaseModel):
    """The user the process runs as."""

    model_config = ConfigDict(frozen=True)

    username: str = ""
    uid: str = ""
    gid: str = ""


class ProcessContext(BaseModel):
    """Process and parent process ids."""

    model_config = ConfigDict(frozen=True)

    pid: int = 0
    ppid: int = 0


class EnvironmentContext(BaseModel):
    """Everything known about the running application's environment.

    Environment-aware code can use this to decide how to behave depending on
    where it is executing. ``app_path`` and ``config_path`` are always
    absolute paths to existing, readable directories.
    """

    model_config = ConfigDict(frozen=True)

    environment: EnvID = Field(default_factory=EnvID, description="Deployment tier")
    env_prefix: EnvKeyPrefix = Field(
        default_factory=EnvKeyPrefix, description="Prefix of the application's env vars"
    )
    app_path: Path = Field(description="Base working directory of the application")
    config_path: Path = Field(description="Directory holding the YAML configuration files")
    host: HostContext = Field(default_factory=HostContext)
    runtime: RuntimeContext = Field(default_factory=RuntimeContext)
    deployment: DeploymentContext = Field(default_factory=DeploymentContext)
    user: UserContext = Field(default_factory=UserContext)
    process: ProcessContext = Field(default_factory=ProcessContext)


def _local_timezone(environ: Mapping[str, str]) -> str:
    """Best-effort name of the local timezone."""
    tz = environ.get("TZ", "").lstrip(":")
    if tz:
        return tz

    try:
        target = Path("/etc/localtime").resolve(strict=True)
    except OSError:
        target = None
    if target is not None and "zoneinfo" in target.parts:
        index = target.parts.index("zoneinfo")
        name = "/".join(target.parts[index + 1 :])
        if name:
            return name

    return datetime.now().astimezone().tzname() or "Local"


def _resolve_app_path(raw: str, variable: str) -> Path:
    if raw == "":
        try:
            raw = os.getcwd()
        except OSError as e:
            raise PathAccessError(
                f"{variable} was not set - default of current directory was not possible: {e}",
                path=Path("."),
                variable=variable,
                cause=e,
            ) from e
    return ensure_directory(resolve_path(raw), variable)


def build_environment_context(
    prefix: str = "",
    *,
    environ: Mapping[str, str] | None = None,
    probe: SystemProbe | None = None,
) -> EnvironmentContext:
    """Create a fully populated EnvironmentContext.

    Args:
        prefix: Environment variable prefix. Empty means ``CFX``.
        environ: Variable lookup. Defaults to ``os.environ``.
        probe: Host identity queries. Defaults to the real host.

    Returns:
        The populated, immutable context.

    Raises:
        IdentifierError: Invalid prefix or ``<PREFIX>_ENVIRONMENT`` value.
        HostResolutionError: Hostname or machine id unavailable.
        UserResolutionError: Current user unavailable.
        PathError: ``app_path`` or ``config_path`` missing, unreadable or
            not a directory.

    Example:
        >>> ctx = build_environment_context("MYAPP")
        >>> ctx.config_path
        PosixPath('/srv/myapp/config')
    """
    env_prefix = parse_env_key_prefix(prefix)
    if environ is None:
        environ = os.environ
    if probe is None:
        probe = SystemProbe()

    deployment = DeploymentContext(
        app_id=KEY_APP_ID.get(env_prefix, environ),
        service_id=KEY_SERVICE_ID.get(env_prefix, environ),
        instance_id=KEY_INSTANCE_ID.get(env_prefix, environ),
        region=KEY_REGION.get(env_prefix, environ),
        availability_zone=KEY_AVAILABILITY_ZONE.get(env_prefix, environ),
        network_id=KEY_NETWORK_ID.get(env_prefix, environ),
        datacenter_id=KEY_DATACENTER_ID.get(env_prefix, environ),
    )
    runtime = RuntimeContext(
        os=platform.system().lower(),
        arch=platform.machine(),
        version=platform.python_version(),
    )
    process = ProcessContext(pid=os.getpid(), ppid=os.getppid())

    # --- Host identity
    try:
        hostname = probe.hostname()
        machine_id = probe.machine_id()
    except HostResolutionError:
        raise
    except Exception as e:
        raise HostResolutionError(f"could not resolve host identity: {e}") from e
    host = HostContext(hostname=hostname, uuid=machine_id, timezone=_local_timezone(environ))

    # --- Current user
    try:
        current = probe.current_user()
    except UserResolutionError:
        raise
    except Exception as e:
        raise UserResolutionError(f"could not determine the current user: {e}") from e
    if current is None:
        raise UserResolutionError("current user lookup is not supported on this system")
    user = UserContext(username=current.username, uid=current.uid, gid=current.gid)

    # --- Environment identifier
    environment = EnvID()
    raw_env = KEY_ENVIRONMENT.get(env_prefix, environ)
    if raw_env:
        try:
            environment = parse_environment_id(raw_env)
        except IdentifierError as e:
            raise type(e)(
                f"{KEY_ENVIRONMENT.key(env_prefix)}={raw_env!r} is not a valid environment: {e}",
                value=raw_env,
            ) from e

    # --- Directories
    app_path = _resolve_app_path(
        KEY_APP_PATH.get(env_prefix, environ), KEY_APP_PATH.key(env_prefix)
    )
    raw_config = KEY_CONFIG_PATH.get(env_prefix, environ)
    config_path = ensure_directory(
        resolve_path(raw_config) if raw_config else app_path / DEFAULT_CONFIG_DIR,
        KEY_CONFIG_PATH.key(env_prefix),
    )

    ctx = EnvironmentContext(
        environment=environment,
        env_prefix=env_prefix,
        app_path=app_path,
        config_path=config_path,
        host=host,
        runtime=runtime,
        deployment=deployment,
        user=user,
        process=process,
    )
    log.debug(
        ENVIRONMENT_CONTEXT_BUILT,
        environment=str(ctx.environment),
        env_prefix=str(ctx.env_prefix),
        app_path=str(ctx.app_path),
        config_path=str(ctx.config_path),
    )
    return ctx
