"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sshnode.config import Config, NodeConfig

SAMPLE_YAML = """\
nodes:
  build-01:
    host: 192.168.0.1
    port: 1122
    user: nci
    identity-file: ~/.ssh/id_rsa_01
    args:
      - -q
    base-dir: /srv/nci/projects

  build-02:
    host: build-02.example.com
"""


def _completed(
    stdout: str = "", returncode: int = 0
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        ["ssh"], returncode, stdout=stdout, stderr=""
    )


@pytest.fixture()
def runner() -> MagicMock:
    """ProcessRunner double that succeeds with empty output."""
    mock = MagicMock()
    mock.run.return_value = _completed()
    return mock


@pytest.fixture()
def node_config() -> NodeConfig:
    return NodeConfig(
        slug="build-01",
        host="192.168.0.1",
        port=1122,
        user="nci",
        identity_file="~/.ssh/id_rsa_01",
        args=["-q"],
        base_dir="/srv/nci/projects",
    )


@pytest.fixture()
def node_config_minimal() -> NodeConfig:
    return NodeConfig(slug="build-02", host="build-02.example.com")


@pytest.fixture()
def sample_config(
    node_config: NodeConfig, node_config_minimal: NodeConfig
) -> Config:
    return Config(
        nodes={
            "build-01": node_config,
            "build-02": node_config_minimal,
        }
    )


@pytest.fixture()
def sample_config_file(tmp_path: Path) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(SAMPLE_YAML)
    return p
