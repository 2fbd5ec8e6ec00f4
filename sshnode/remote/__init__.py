"""Remote command assembly and process spawning."""

from .command import (
    CommandParams,
    RemoteCommand,
    apply_params,
    build_remote_shell_line,
    build_ssh_args,
    escape_arg,
    escape_command,
)
from .process import ProcessRunner, SpawnError, SubprocessRunner

__all__ = [
    "CommandParams",
    "ProcessRunner",
    "RemoteCommand",
    "SpawnError",
    "SubprocessRunner",
    "apply_params",
    "build_remote_shell_line",
    "build_ssh_args",
    "escape_arg",
    "escape_command",
]
