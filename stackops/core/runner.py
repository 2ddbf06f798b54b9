"""Command execution helpers for out-of-band stack maintenance."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from stackops.core.deployment import Deployment
from stackops.core.errors import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletedCommand:
    """Normalized command execution result."""

    cmd: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


class CommandRunner:
    """Thin subprocess wrapper with deterministic logging."""

    def __init__(self, *, printer: Callable[[str], None] | None = None) -> None:
        self._printer = printer or logger.info

    def format_cmd(self, cmd: Sequence[str]) -> str:
        return "$ " + " ".join(shlex.quote(str(token)) for token in cmd)

    def emit(self, message: str) -> None:
        self._printer(message)

    def which(self, command: str) -> str | None:
        resolved = shutil.which(command)
        if resolved is None:
            return None
        return str(Path(resolved).resolve())

    def require_command(self, command: str) -> str:
        resolved = self.which(command)
        if resolved is None:
            raise CommandExecutionError(f"required command not found: {command}")
        return resolved

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
    ) -> CompletedCommand:
        rendered = self.format_cmd(cmd)
        self.emit(rendered)

        run_env = os.environ.copy()
        if env:
            run_env.update({str(key): str(value) for key, value in env.items()})

        try:
            completed = subprocess.run(
                [str(token) for token in cmd],
                cwd=str(cwd) if cwd else None,
                env=run_env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
                errors="replace",
            )
        except OSError as exc:
            raise CommandExecutionError(f"failed to execute {rendered}: {exc}") from exc

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if check and completed.returncode != 0:
            detail = stderr.strip() or stdout.strip()
            message = f"command failed with exit code {completed.returncode}: {rendered}"
            if detail:
                message = f"{message}\n{detail}"
            raise CommandExecutionError(
                message,
                returncode=completed.returncode,
                output=detail,
            )

        return CompletedCommand(
            tuple(str(token) for token in cmd),
            completed.returncode,
            stdout,
            stderr,
        )


class StackCommandExecutor:
    """Runs engine CLI commands scoped to a single stack and its work dir."""

    def __init__(self, runner: CommandRunner | None = None, *, pulumi_bin: str = "pulumi") -> None:
        self.runner = runner or CommandRunner()
        self.pulumi_bin = pulumi_bin

    def run(self, stack: Deployment, args: Sequence[str]) -> CompletedCommand:
        cmd = [self.pulumi_bin, "--stack", stack.name, *args]
        return self.runner.run(cmd, cwd=Path(stack.work_dir), check=True)

    def unprotect_all(self, stack: Deployment) -> None:
        # --yes is required when the engine runs without a terminal.
        self.run(stack, ["state", "unprotect", "--all", "--yes"])
