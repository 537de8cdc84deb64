"""Synchronous execution of external build tools."""

import shlex
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from . import log
from .constants import FAILURE_OUTPUT_TAIL


@dataclass
class CommandResult:
    """Exit status and combined output of one external command."""

    args: list[str]
    returncode: int
    output: str = ""
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class Executor(ABC):
    """Runs external commands and reports only their exit status."""

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        sources: Sequence[Path] = (),
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            args: Command and arguments
            cwd: Working directory for the command
            sources: Shell setup files to source before the command runs

        Returns:
            CommandResult for the finished command
        """
        pass


def sourced_command(args: Sequence[str], sources: Sequence[Path]) -> list[str]:
    """Wrap a command so it runs after sourcing ROS setup files."""
    if not sources:
        return list(args)
    steps = [f"source {shlex.quote(str(s))}" for s in sources]
    steps.append("exec " + " ".join(shlex.quote(a) for a in args))
    return ["bash", "-c", " && ".join(steps)]


class SubprocessExecutor(Executor):
    """Executor backed by subprocess.run, blocking until each command exits."""

    def __init__(self, timeout: float | None = None, verbose: bool = False):
        self.timeout = timeout
        self.verbose = verbose

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        sources: Sequence[Path] = (),
    ) -> CommandResult:
        args = list(args)
        cmd = sourced_command(args, sources)

        if self.verbose:
            log.info(f"Running: {shlex.join(args)} (in {cwd})")

        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = e.stdout or ""
            if isinstance(output, bytes):
                output = output.decode(errors="replace")
            log.error(f"{args[0]} timed out after {self.timeout} seconds")
            return CommandResult(args, -1, output, timed_out=True)
        except OSError as e:
            return self._launch_failure(args, cwd, e)

        result = CommandResult(args, proc.returncode, proc.stdout or "")
        if self.verbose and result.output:
            log.output(result.output.rstrip())
        elif not result.success and result.output:
            tail = result.output.rstrip().splitlines()[-FAILURE_OUTPUT_TAIL:]
            log.output("\n".join(tail))
        return result

    def _launch_failure(self, args: list[str], cwd: Path, e: OSError) -> CommandResult:
        """Turn an error starting the process into a failed result (shell exit codes)."""
        if not Path(cwd).is_dir():
            log.error(f"Working directory not found: {cwd}")
            return CommandResult(args, 127, str(e))
        if isinstance(e, FileNotFoundError):
            log.error(f"Command not found: {args[0]}")
            return CommandResult(args, 127, str(e))
        log.error(f"Cannot execute {args[0]}: {e}")
        return CommandResult(args, 126, str(e))
