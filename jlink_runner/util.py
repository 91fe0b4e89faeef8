from __future__ import annotations

import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from jlink_runner.errors import ExecutionError


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def expand_path(s: str) -> Path:
    # Expand ~ and $VARS
    return Path(os.path.expandvars(os.path.expanduser(s)))


def sh_join(args: Sequence[str]) -> str:
    return shlex.join(list(args))


def executable_name(tool: str) -> str:
    return f"{tool}.exe" if sys.platform.startswith("win") else tool


def split_env_paths(value: str) -> list[Path]:
    out: list[Path] = []
    for part in value.split(os.pathsep):
        part = part.strip()
        if not part:
            continue
        out.append(Path(part))
    return out


def output_lines(text: str) -> list[str]:
    """
    Lines of captured tool output as they are written to the log.

    Empty output yields nothing. Otherwise the trimmed text is prefixed with a
    newline, so the first logged line is always blank and separates the tool
    output from whatever was logged before it.
    """
    if not text:
        return []
    return ("\n" + text.strip()).split("\n")


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    """Runs a command to completion with stdout and stderr captured as text."""

    def __init__(self, *, logger) -> None:
        self._logger = logger

    def run(self, args: Iterable[str]) -> RunResult:
        argv = list(args)

        # Keep low-level process logs at DEBUG; tool output is logged by the caller.
        self._logger.debug("RUN %s", sh_join(argv))

        try:
            cp = subprocess.run(
                argv,
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise ExecutionError(f"Unable to execute {argv[0]} command: {e}") from e
        return RunResult(
            args=argv,
            returncode=cp.returncode,
            stdout=cp.stdout or "",
            stderr=cp.stderr or "",
        )
