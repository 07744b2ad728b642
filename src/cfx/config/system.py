"""Host and user identity probes.

Each probe is a plain function; ``SystemProbe`` bundles them so callers (and
tests) can swap in fixed values without touching the real host.
"""

import getpass
import os
import platform
import socket
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

from cfx.config.errors import HostResolutionError, UserResolutionError

_LINUX_MACHINE_ID_PATHS = ("/var/lib/dbus/machine-id", "/etc/machine-id")
_BSD_HOST_ID_PATH = "/etc/hostid"


@dataclass(frozen=True)
class UserInfo:
    """Identity of the user running the process."""

    username: str
    uid: str
    gid: str


def get_hostname() -> str:
    """Return the machine's hostname.

    Raises:
        HostResolutionError: If the hostname cannot be read.
    """
    try:
        hostname = socket.gethostname()
    except OSError as e:
        raise HostResolutionError(f"could not determine the system's hostname: {e}") from e
    if not hostname:
        raise HostResolutionError("could not determine the system's hostname: empty result")
    return hostname


def get_machine_id() -> str:
    """Return a stable identifier unique to this OS installation.

    Reads the systemd/dbus machine id on Linux, ``IOPlatformUUID`` on macOS,
    ``/etc/hostid`` on the BSDs and ``MachineGuid`` from the registry on
    Windows.

    Raises:
        HostResolutionError: If no identifier source is available.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            result = subprocess.run(
                ["ioreg", "-rd1", "-c", "IOPlatformExpertDevice"],
                capture_output=True,
                text=True,
                timeout=5,
                check=True,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise HostResolutionError(f"could not determine the machine uuid: {e}") from e
        for line in result.stdout.splitlines():
            if "IOPlatformUUID" in line:
                # "IOPlatformUUID" = "..."
                parts = line.split("=")
                if len(parts) >= 2:
                    return parts[1].strip().strip('"')

    elif system == "Windows":
        try:
            import winreg  # noqa: PLC0415

            key = winreg.OpenKey(
                winreg.HKEY_LOCAL_MACHINE,
                r"SOFTWARE\Microsoft\Cryptography",
                0,
                winreg.KEY_READ | winreg.KEY_WOW64_64KEY,
            )
            value, _ = winreg.QueryValueEx(key, "MachineGuid")
            winreg.CloseKey(key)
            return str(value)
        except (OSError, ImportError, AttributeError) as e:
            raise HostResolutionError(f"could not determine the machine uuid: {e}") from e

    else:
        paths = _LINUX_MACHINE_ID_PATHS if system == "Linux" else (_BSD_HOST_ID_PATH,)
        for path in paths:
            try:
                with open(path, encoding="utf-8") as f:
                    value = f.read().strip()
            except OSError:
                continue
            if value:
                return value

    raise HostResolutionError(f"could not determine the machine uuid on {system or 'unknown'}")


def get_current_user() -> UserInfo:
    """Return the user the process runs as.

    Raises:
        UserResolutionError: If the user cannot be determined.
    """
    try:
        username = getpass.getuser()
    except (OSError, KeyError, ImportError) as e:
        raise UserResolutionError(f"could not determine the current user: {e}") from e

    # Windows has no numeric uid/gid.
    uid = str(os.getuid()) if hasattr(os, "getuid") else ""
    gid = str(os.getgid()) if hasattr(os, "getgid") else ""
    return UserInfo(username=username, uid=uid, gid=gid)


@dataclass(frozen=True)
class SystemProbe:
    """Bundle of host identity queries used to build an environment context."""

    hostname: Callable[[], str] = get_hostname
    machine_id: Callable[[], str] = get_machine_id
    current_user: Callable[[], UserInfo | None] = get_current_user
