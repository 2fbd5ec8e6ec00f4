from __future__ import annotations

from typing import Any, Annotated, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

DEFAULT_BASE_DIR = "/var/tmp/nci/data/projects"


def _to_kebab(name: str) -> str:
    return name.replace("_", "-")


class _BaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_kebab,
        populate_by_name=True,
    )


Slug = Annotated[
    str,
    Field(
        min_length=1,
        max_length=50,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
    ),
]


class NodeConfig(_BaseModel):
    """A remote host reachable through the local ssh client."""

    model_config = ConfigDict(frozen=True)
    slug: Slug
    host: str = Field(..., min_length=1)
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    user: Optional[str] = None
    identity_file: Optional[str] = None
    shell: str = Field(default="/bin/sh", min_length=1)
    shell_cmd_arg: str = Field(default="-c", min_length=1)
    # Extra ssh client flags, placed before user@host
    args: List[str] = Field(default_factory=list)
    cwd: Optional[str] = None
    base_dir: str = Field(default=DEFAULT_BASE_DIR, min_length=1)

    def to_options(self) -> dict[str, Any]:
        """Options mapping understood by RemoteCommand and friends."""
        options: dict[str, Any] = {
            "host": self.host,
            "user": self.user,
            "identity_file": self.identity_file,
            "shell": self.shell,
            "shell_cmd_arg": self.shell_cmd_arg,
            "base_dir": self.base_dir,
        }
        if self.port is not None:
            options["port"] = self.port
        if self.args:
            options["args"] = list(self.args)
        if self.cwd:
            options["cwd"] = self.cwd
        return options


class Config(_BaseModel):
    """Top-level sshnode configuration."""

    nodes: Dict[str, NodeConfig] = Field(default_factory=dict)

    # The node slug is the key in the nodes dict,
    # but we also want it as a field in the NodeConfig objects.
    @field_validator("nodes", mode="before")
    @classmethod
    def inject_node_slugs(cls, v: Any, info: ValidationInfo) -> Any:
        if not isinstance(v, dict):
            return v
        return {
            slug: (
                {**data, "slug": slug}
                if isinstance(data, dict) and "slug" not in data
                else data
            )
            for slug, data in v.items()
        }

    def get_node(self, slug: str) -> NodeConfig:
        """Look up a node by slug, raising KeyError with a readable message."""
        try:
            return self.nodes[slug]
        except KeyError:
            known = ", ".join(sorted(self.nodes)) or "none"
            raise KeyError(f"Unknown node '{slug}' (known: {known})") from None
