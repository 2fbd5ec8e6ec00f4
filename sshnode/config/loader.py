"""Node configuration file discovery and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .protocol import Config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SSHNODE_CONFIG"


class ConfigError(Exception):
    """Raised when configuration is invalid."""


class _DuplicateKeyError(yaml.YAMLError):
    def __init__(self, key: object, line: int) -> None:
        self.key = key
        self.line = line
        super().__init__(f"duplicate key {key!r} on line {line}")


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses repeated mapping keys.

    A repeated node slug would otherwise silently replace the
    earlier node.
    """

    def construct_mapping(
        self, node: yaml.MappingNode, deep: bool = False
    ) -> dict[Any, Any]:
        self.flatten_mapping(node)
        seen: set[object] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise _DuplicateKeyError(key, key_node.start_mark.line + 1)
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _search_paths() -> list[Path]:
    paths: list[Path] = []
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path))
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser(
        "~/.config"
    )
    paths.append(Path(xdg) / "sshnode" / "config.yaml")
    paths.append(Path("/etc/sshnode/config.yaml"))
    return paths


def find_config_file(config_path: str | None = None) -> Path:
    """Locate the config file.

    An explicit path must exist. Otherwise the first existing file
    among $SSHNODE_CONFIG, $XDG_CONFIG_HOME/sshnode/config.yaml and
    /etc/sshnode/config.yaml wins.
    """
    if config_path is not None:
        explicit = Path(config_path)
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return explicit

    candidates = _search_paths()
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(c) for c in candidates)
    raise ConfigError(f"No config file found. Searched: {searched}")


def _check_node_shapes(raw: dict[str, Any]) -> None:
    nodes = raw.get("nodes")
    if nodes is None:
        return
    if not isinstance(nodes, dict):
        raise ConfigError("'nodes' must map node slugs to node settings")
    for slug, data in nodes.items():
        if not isinstance(data, dict):
            raise ConfigError(
                f"Node '{slug}' must be a mapping of settings,"
                f" got {type(data).__name__}"
            )


def _describe_validation_error(e: ValidationError) -> str:
    lines: list[str] = []
    for err in e.errors():
        loc = err["loc"]
        if len(loc) >= 2 and loc[0] == "nodes":
            field = ".".join(str(p) for p in loc[2:]) or "slug"
            lines.append(f"Node '{loc[1]}': {field}: {err['msg']}")
        else:
            where = ".".join(str(p) for p in loc)
            lines.append(f"{where}: {err['msg']}" if where else err["msg"])
    return "\n".join(lines)


def load_config(config_path: str | None = None) -> Config:
    """Load and validate the node configuration."""
    path = find_config_file(config_path)
    logger.debug("Loading config from %s", path)
    try:
        with open(path) as f:
            raw = yaml.load(f, Loader=_UniqueKeyLoader)
    except _DuplicateKeyError as e:
        raise ConfigError(
            f"Duplicate key '{e.key}' on line {e.line} of {path}"
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigError("Config file must be a YAML mapping")
    _check_node_shapes(raw)
    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(_describe_validation_error(e)) from e
