"""Tests for sshnode.cli."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from sshnode.cli import app
from sshnode.config import Config, ConfigError
from sshnode.remote import SpawnError

runner = CliRunner()


def _output(stdout: str) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(["ssh"], 0, stdout=stdout, stderr="")


class TestNodesCommand:
    @patch("sshnode.output.is_private_host", return_value=True)
    @patch("sshnode.output.resolve_hostname", side_effect=lambda h: h)
    def test_json_output(
        self,
        mock_resolve: MagicMock,
        mock_private: MagicMock,
        sample_config_file: Path,
    ) -> None:
        result = runner.invoke(
            app, ["nodes", "-c", str(sample_config_file), "-o", "json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [n["slug"] for n in data] == ["build-01", "build-02"]
        assert data[0]["endpoint"] == "nci@192.168.0.1:1122"
        assert data[1]["endpoint"] == "build-02.example.com"
        assert data[0]["private"] is True

    @patch("sshnode.output.is_private_host", return_value=None)
    @patch("sshnode.output.resolve_hostname", side_effect=lambda h: h)
    def test_human_output(
        self,
        mock_resolve: MagicMock,
        mock_private: MagicMock,
        sample_config_file: Path,
    ) -> None:
        result = runner.invoke(app, ["nodes", "-c", str(sample_config_file)])
        assert result.exit_code == 0, result.output
        assert "Nodes" in result.output
        assert "build-01" in result.output

    def test_missing_config(self) -> None:
        result = runner.invoke(app, ["nodes", "-c", "/nonexistent.yaml"])
        assert result.exit_code == 2

    @patch("sshnode.cli.load_config")
    def test_invalid_config(self, mock_load: MagicMock) -> None:
        mock_load.side_effect = ConfigError("broken")
        result = runner.invoke(app, ["nodes"])
        assert result.exit_code == 2


class TestExecCommand:
    def test_dry_run(self, sample_config_file: Path) -> None:
        result = runner.invoke(
            app,
            [
                "exec",
                "build-01",
                "beep",
                "1",
                "2",
                "--dry-run",
                "-c",
                str(sample_config_file),
            ],
        )
        assert result.exit_code == 0, result.output
        assert result.output.startswith(
            "ssh -i '~/.ssh/id_rsa_01' -o IdentitiesOnly=yes"
            " -o BatchMode=yes -T -p 1122 -q nci@192.168.0.1"
        )
        assert "beep" in result.output

    @patch("sshnode.remote.process.SubprocessRunner.run")
    def test_runs_remote_command(
        self, mock_run: MagicMock, sample_config_file: Path
    ) -> None:
        mock_run.return_value = _output("")
        result = runner.invoke(
            app,
            [
                "exec",
                "build-02",
                "ls",
                "/tmp",
                "--cwd",
                "/srv",
                "-c",
                str(sample_config_file),
            ],
        )
        assert result.exit_code == 0, result.output
        cmd, ssh_args, options = mock_run.call_args.args
        assert cmd == "ssh"
        assert ssh_args[-1] == "/bin/sh -c 'cd \"/srv\" && ls \"/tmp\"'"
        assert "cwd" not in options
        assert callable(options["on_output"])

    @patch("sshnode.remote.process.SubprocessRunner.run")
    def test_spawn_error(
        self, mock_run: MagicMock, sample_config_file: Path
    ) -> None:
        mock_run.side_effect = SpawnError("ssh", ["x"], 255, "refused")
        result = runner.invoke(
            app, ["exec", "build-02", "ls", "-c", str(sample_config_file)]
        )
        assert result.exit_code == 1

    def test_unknown_node(self, sample_config_file: Path) -> None:
        result = runner.invoke(
            app, ["exec", "nope", "ls", "-c", str(sample_config_file)]
        )
        assert result.exit_code == 2


class TestPrepareCommand:
    @patch("sshnode.remote.process.SubprocessRunner.run")
    def test_existing(
        self, mock_run: MagicMock, sample_config_file: Path
    ) -> None:
        mock_run.return_value = _output("0\n")
        result = runner.invoke(
            app, ["prepare", "build-01", "app", "-c", str(sample_config_file)]
        )
        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert mock_run.call_count == 1

    @patch("sshnode.remote.process.SubprocessRunner.run")
    def test_missing(
        self, mock_run: MagicMock, sample_config_file: Path
    ) -> None:
        mock_run.side_effect = [_output("1\n"), _output("")]
        result = runner.invoke(
            app, ["prepare", "build-01", "app", "-c", str(sample_config_file)]
        )
        assert result.exit_code == 0, result.output
        assert "ready to be created" in result.output
        mkdir_line = mock_run.call_args_list[1].args[1][-1]
        assert 'mkdir -p "/srv/nci/projects/app"' in mkdir_line

    @patch("sshnode.remote.process.SubprocessRunner.run")
    def test_transport_failure(
        self, mock_run: MagicMock, sample_config_file: Path
    ) -> None:
        mock_run.side_effect = SpawnError("ssh", [], 255, "timeout")
        result = runner.invoke(
            app, ["prepare", "build-01", "app", "-c", str(sample_config_file)]
        )
        assert result.exit_code == 1

    @patch("sshnode.cli.load_config")
    def test_unknown_node(self, mock_load: MagicMock) -> None:
        mock_load.return_value = Config()
        result = runner.invoke(app, ["prepare", "nope", "app"])
        assert result.exit_code == 2
