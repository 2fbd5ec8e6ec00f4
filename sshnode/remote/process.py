"""Local process spawning for the ssh client."""

from __future__ import annotations

import logging
import shlex
import subprocess
import threading
from typing import Any, Callable, Mapping, Protocol, Sequence

logger = logging.getLogger(__name__)


class SpawnError(Exception):
    """Raised when a spawned process fails or cannot be started."""

    def __init__(
        self,
        cmd: str,
        args: Sequence[str],
        returncode: int | None,
        stderr: str = "",
        reason: str | None = None,
    ) -> None:
        self.cmd = cmd
        self.cmd_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
        if reason is None:
            reason = f"exited with code {returncode}"
        message = f"{cmd} {reason}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)

    @property
    def command_line(self) -> str:
        return shlex.join([self.cmd, *self.cmd_args])


class ProcessRunner(Protocol):
    """Capability that spawns a program and waits for it to finish."""

    def run(
        self,
        cmd: str,
        args: Sequence[str],
        options: Mapping[str, Any],
    ) -> subprocess.CompletedProcess[str]: ...


class SubprocessRunner:
    """ProcessRunner backed by the subprocess module.

    Recognised options:
        collect_out: capture stdout into the result instead of
            letting it go to the parent's stdout
        on_output: callable receiving merged stdout/stderr chunks
        env: environment mapping for the child
        timeout: seconds before the child is considered failed

    Any other option is ignored. A non-zero exit status raises
    SpawnError.
    """

    def run(
        self,
        cmd: str,
        args: Sequence[str],
        options: Mapping[str, Any],
    ) -> subprocess.CompletedProcess[str]:
        argv = [cmd, *args]
        on_output: Callable[[str], None] | None = options.get("on_output")
        logger.debug("Spawning: %s", shlex.join(argv))
        try:
            if on_output is None:
                result = self._run_captured(argv, options)
            else:
                result = self._run_streamed(argv, options, on_output)
        except FileNotFoundError as e:
            raise SpawnError(cmd, args, None, reason=f"not found ({e})") from e
        except subprocess.TimeoutExpired as e:
            raise SpawnError(
                cmd,
                args,
                None,
                reason=f"timed out after {e.timeout}s",
            ) from e

        if result.returncode != 0:
            raise SpawnError(cmd, args, result.returncode, result.stderr or "")
        return result

    def _run_captured(
        self,
        argv: list[str],
        options: Mapping[str, Any],
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            argv,
            stdout=subprocess.PIPE if options.get("collect_out") else None,
            stderr=subprocess.PIPE,
            text=True,
            env=options.get("env"),
            timeout=options.get("timeout"),
        )

    def _run_streamed(
        self,
        argv: list[str],
        options: Mapping[str, Any],
        on_output: Callable[[str], None],
    ) -> subprocess.CompletedProcess[str]:
        timeout: float | None = options.get("timeout")
        expired = threading.Event()
        output_chunks: list[str] = []

        with subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            env=options.get("env"),
        ) as proc:
            assert proc.stdout is not None

            def expire() -> None:
                expired.set()
                proc.kill()

            # killing the child closes its stdout, which ends the read loop
            timer = threading.Timer(timeout, expire) if timeout else None
            try:
                if timer is not None:
                    timer.start()
                for line in proc.stdout:
                    output_chunks.append(line)
                    on_output(line)
                returncode = proc.wait()
            except BaseException:
                proc.kill()
                raise
            finally:
                if timer is not None:
                    timer.cancel()

        output = "".join(output_chunks)
        if expired.is_set():
            raise subprocess.TimeoutExpired(argv, timeout, output=output)
        # stderr is merged into stdout while streaming
        return subprocess.CompletedProcess(
            argv,
            returncode,
            stdout=output,
            stderr="" if returncode == 0 else output,
        )
