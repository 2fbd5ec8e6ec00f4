"""Remote shell command assembly for the local ssh client.

Every remote command is wrapped as::

    <shell> <flag> '[cd "<dir>" && ]<command> "<arg1>" "<arg2>" ...'

and appended to an ssh argument vector that always forces the
identity file, batch mode and no pseudo-tty allocation.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from .process import ProcessRunner, SubprocessRunner

logger = logging.getLogger(__name__)

Arg = Union[str, int, float]

_LINE_BREAK = re.compile(r"\r?\n")

# Source key -> CommandParams field. "cwd" is renamed so it is never
# mistaken for the spawn option of the same name.
_PARAM_KEYS: dict[str, str] = {
    "host": "host",
    "port": "port",
    "user": "user",
    "identity_file": "identity_file",
    "identity-file": "identity_file",
    "cwd": "working_directory",
    "args": "extra_args",
}


class CommandParams(BaseModel):
    """Connection and shell settings for a remote command."""

    model_config = ConfigDict(frozen=True)
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    user: Optional[str] = None
    identity_file: Optional[str] = None
    shell: str = "/bin/sh"
    shell_cmd_arg: str = "-c"
    working_directory: Optional[str] = None
    extra_args: List[str] = Field(default_factory=list)


def apply_params(
    params: CommandParams, update: Mapping[str, Any]
) -> CommandParams:
    """Merge whitelisted keys from ``update`` into a new CommandParams.

    Unknown keys are ignored and falsy values leave the current
    setting untouched.
    """
    changes: dict[str, Any] = {}
    for key, value in update.items():
        field = _PARAM_KEYS.get(key)
        if field is None or not value:
            continue
        if field == "extra_args":
            # a single flag given as a bare string stays one argument
            if isinstance(value, str):
                value = [value]
            value = [str(v) for v in value]
        changes[field] = value
    if not changes:
        return params
    return CommandParams.model_validate({**params.model_dump(), **changes})


def escape_command(cmd: str) -> str:
    """Double single quotes and drop line breaks."""
    return _LINE_BREAK.sub("", cmd.replace("'", "''"))


def escape_arg(arg: Arg) -> str:
    return str(arg).replace('"', '\\"')


def build_remote_shell_line(
    params: CommandParams,
    cmd: str,
    args: Sequence[Arg] = (),
    cwd: str | None = None,
) -> str:
    """Build the shell invocation executed on the remote host.

    ``cwd`` takes priority over the configured working directory.
    The argument list is always preceded by a single space, even
    when empty.
    """
    body = ""
    directory = cwd or params.working_directory
    if directory:
        body += f'cd "{directory}" && '
    body += escape_command(cmd)
    body += " " + " ".join(f'"{escape_arg(arg)}"' for arg in args)
    return f"{params.shell} {params.shell_cmd_arg} '{body}'"


def build_ssh_args(params: CommandParams, remote_line: str) -> list[str]:
    """Build the ssh client arguments for a remote shell line.

    Returns args like:
        -i key -o IdentitiesOnly=yes -o BatchMode=yes -T
        [-p port] [extra args] user@host '<remote line>'
    """
    args = [
        "-i",
        f"{params.identity_file}",
        # never fall back to keys other than the identity file
        "-o",
        "IdentitiesOnly=yes",
        # no passphrase or password prompts
        "-o",
        "BatchMode=yes",
        "-T",
    ]
    if params.port:
        args.extend(["-p", str(params.port)])
    args.extend(params.extra_args)
    args.append(f"{params.user}@{params.host}")
    args.append(remote_line)
    return args


class RemoteCommand:
    """Run shell commands on a remote host through the ssh client."""

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        options = options or {}
        base = CommandParams(
            shell=options.get("shell") or "/bin/sh",
            shell_cmd_arg=options.get("shell_cmd_arg") or "-c",
        )
        self.params = apply_params(base, options)
        self.collect_out = bool(options.get("collect_out"))
        self.runner: ProcessRunner = runner or SubprocessRunner()

    def set_params(self, update: Mapping[str, Any]) -> None:
        self.params = apply_params(self.params, update)

    def build(
        self,
        cmd: str,
        args: Sequence[Arg] = (),
        cwd: str | None = None,
    ) -> list[str]:
        """Return the ssh argument vector, without the program name."""
        remote_line = build_remote_shell_line(self.params, cmd, args, cwd)
        return build_ssh_args(self.params, remote_line)

    def run(
        self,
        cmd: str,
        args: Sequence[Arg] = (),
        options: Mapping[str, Any] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run ``cmd`` remotely and return the runner's result."""
        options = dict(options or {})
        cwd = options.pop("cwd", None)
        if self.collect_out:
            options.setdefault("collect_out", True)
        ssh_args = self.build(cmd, args, cwd)
        logger.debug(
            "Running on %s@%s: %s", self.params.user, self.params.host, cmd
        )
        return self.runner.run("ssh", ssh_args, options)
