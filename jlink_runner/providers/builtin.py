from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, TextIO

from jlink_runner.providers.api import ToolProvider
from jlink_runner.util import executable_name


@dataclass(frozen=True)
class JdkToolProvider:
    """
    Runs a tool of the JDK the current environment points at.

    The executable is looked up in $JAVA_HOME/bin first, then on PATH.
    """

    name: str = "jlink"

    def executable(self) -> Path | None:
        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            candidate = Path(java_home) / "bin" / executable_name(self.name)
            if candidate.is_file():
                return candidate
        found = shutil.which(self.name)
        return Path(found) if found else None

    def is_available(self) -> tuple[bool, str | None]:
        if self.executable() is None:
            return False, f"`{self.name}` not found in $JAVA_HOME/bin or on PATH"
        return True, None

    def run(self, out: TextIO, err: TextIO, args: Sequence[str]) -> int:
        exe = self.executable()
        if exe is None:
            raise FileNotFoundError(f"`{self.name}` not found in $JAVA_HOME/bin or on PATH")
        cp = subprocess.run(
            [str(exe), *args],
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            check=False,
        )
        out.write(cp.stdout or "")
        err.write(cp.stderr or "")
        return cp.returncode


def builtin_providers() -> list[ToolProvider]:
    # Keep ordering stable for predictable lookup.
    return [JdkToolProvider(name="jlink")]
