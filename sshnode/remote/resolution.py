"""SSH host alias resolution for configured nodes."""

from __future__ import annotations

import ipaddress
import socket
from pathlib import Path

import paramiko  # type: ignore[import-untyped]


def _load_ssh_config(path: Path | None = None) -> paramiko.SSHConfig | None:
    config_path = path or Path.home() / ".ssh" / "config"
    if config_path.exists():
        return paramiko.SSHConfig.from_path(str(config_path))
    else:
        return None


def resolve_hostname(hostname: str, ssh_config: Path | None = None) -> str:
    """Resolve a node host through the ssh client config.

    The ssh client honours ``HostName`` entries, so a node host may
    be an alias. Returns the host unchanged when no entry applies.
    """
    config = _load_ssh_config(ssh_config)
    if config is None:
        return hostname
    return config.lookup(hostname).get("hostname", hostname)


def is_private_host(
    hostname: str, ssh_config: Path | None = None
) -> bool | None:
    """Check whether a node host resolves only to private addresses.

    Returns None if the hostname cannot be resolved.
    """
    real_host = resolve_hostname(hostname, ssh_config)
    try:
        results = socket.getaddrinfo(real_host, None)
    except socket.gaierror:
        return None
    addrs = {str(r[4][0]) for r in results}
    return all(ipaddress.ip_address(a).is_private for a in addrs)
