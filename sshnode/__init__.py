"""sshnode: quoted remote commands and workspace bootstrapping over ssh."""

from .node import Node
from .remote import (
    CommandParams,
    ProcessRunner,
    RemoteCommand,
    SpawnError,
    SubprocessRunner,
    apply_params,
)
from .workspace import PrepareState, WorkspacePreparer

__all__ = [
    "CommandParams",
    "Node",
    "PrepareState",
    "ProcessRunner",
    "RemoteCommand",
    "SpawnError",
    "SubprocessRunner",
    "WorkspacePreparer",
    "apply_params",
]
