"""A configured remote node."""

from __future__ import annotations

from typing import Any, Mapping

from .config import NodeConfig
from .remote import ProcessRunner, RemoteCommand
from .workspace import WorkspacePreparer


class Node:
    """SSH host that hands out workspaces and commands."""

    def __init__(
        self,
        slug: str,
        options: Mapping[str, Any],
        runner: ProcessRunner | None = None,
    ) -> None:
        self.slug = slug
        self.options = dict(options)
        self.runner = runner

    @classmethod
    def from_config(
        cls, config: NodeConfig, runner: ProcessRunner | None = None
    ) -> Node:
        return cls(config.slug, config.to_options(), runner)

    def create_workspace(self, project: str) -> WorkspacePreparer:
        return WorkspacePreparer(project, self.options, self.runner)

    def create_command(
        self, params: Mapping[str, Any] | None = None
    ) -> RemoteCommand:
        return RemoteCommand({**self.options, **(params or {})}, self.runner)
