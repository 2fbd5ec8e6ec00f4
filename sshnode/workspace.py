"""Remote workspace bootstrapping.

The existence check echoes the exit code of ``test -e`` so that a
missing directory shows up as output, while a failing ssh session
still shows up as an error.
"""

from __future__ import annotations

import enum
import logging
import posixpath
import subprocess
from typing import Any, Mapping, Sequence

from .config import DEFAULT_BASE_DIR
from .remote import ProcessRunner, RemoteCommand
from .remote.command import Arg

logger = logging.getLogger(__name__)


class PrepareState(str, enum.Enum):
    """Steps of the workspace preparation protocol."""

    START = "start"
    CHECK_EXISTENCE = "check-existence"
    EXISTS_DONE = "exists-done"
    CREATE_PARENT = "create-parent"
    DONE = "done"


def workspace_path(base_dir: str | None, project: str) -> str:
    return posixpath.join(base_dir or DEFAULT_BASE_DIR, project, "workspace")


class WorkspacePreparer:
    """Make sure a project workspace can be checked out on a node."""

    def __init__(
        self,
        project: str,
        options: Mapping[str, Any],
        runner: ProcessRunner | None = None,
    ) -> None:
        self.project = project
        self.options = dict(options)
        self.runner = runner
        self._workspace_root = workspace_path(
            self.options.get("base_dir"), project
        )

    @property
    def workspace_root(self) -> str:
        return self._workspace_root

    def create_command(
        self, params: Mapping[str, Any] | None = None
    ) -> RemoteCommand:
        """Create a command from the preparer options merged with params."""
        return RemoteCommand({**self.options, **(params or {})}, self.runner)

    def run(
        self,
        cmd: str,
        args: Sequence[Arg] = (),
        options: Mapping[str, Any] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a command with the workspace as working directory."""
        run_options = {"cwd": self.workspace_root, **(options or {})}
        return self.create_command().run(cmd, args, run_options)

    def exists(self) -> bool:
        """Check whether the workspace directory exists on the node."""
        command = RemoteCommand(
            {**self.options, "collect_out": True}, self.runner
        )
        result = command.run(f'test -e "{self.workspace_root}"; echo $?')
        lines = (result.stdout or "").splitlines()
        return bool(lines) and lines[0].strip() == "0"

    def ensure_ready(self) -> bool:
        """Ensure the workspace parent exists.

        Returns whether the workspace itself already existed. The
        workspace directory is left for the checkout to create.
        """
        self._transition(PrepareState.START, PrepareState.CHECK_EXISTENCE)
        existed = self.exists()
        if existed:
            self._transition(
                PrepareState.CHECK_EXISTENCE, PrepareState.EXISTS_DONE
            )
        else:
            self._transition(
                PrepareState.CHECK_EXISTENCE, PrepareState.CREATE_PARENT
            )
            parent = posixpath.dirname(self.workspace_root)
            RemoteCommand(self.options, self.runner).run(
                f'mkdir -p "{parent}"'
            )
            self._transition(PrepareState.CREATE_PARENT, PrepareState.DONE)
        return existed

    def _transition(self, src: PrepareState, dst: PrepareState) -> None:
        logger.debug(
            "Workspace %s: %s -> %s", self.workspace_root, src.value, dst.value
        )
