"""
Pytest configuration and shared fixtures for jlink-runner tests.

Provides stub tool providers and fake JDK installations so tests never need a
real JDK on the machine.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path

import pytest


class StubProvider:
    """Tool provider that writes canned output and records the streams it got."""

    def __init__(
        self,
        *,
        name: str = "jlink",
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        error: Exception | None = None,
        available: bool = True,
    ) -> None:
        self.name = name
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.available = available
        self.calls: list[list[str]] = []
        self.streams: list = []

    def is_available(self):
        if self.available:
            return True, None
        return False, "stub disabled"

    def run(self, out, err, args):
        self.calls.append(list(args))
        self.streams.extend([out, err])
        out.write(self.stdout)
        err.write(self.stderr)
        if self.error is not None:
            raise self.error
        return self.exit_code


def write_fake_jlink(jdk_home: Path, *, stdout: str = "", stderr: str = "", exit_code: int = 0) -> Path:
    """Create <jdk_home>/bin/jlink as a shell script that records its arguments."""
    bin_dir = jdk_home / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    (jdk_home / "jmods").mkdir(exist_ok=True)
    script = bin_dir / "jlink"
    lines = [
        "#!/bin/sh",
        "PATH=/usr/bin:/bin",
        'for a in "$@"; do printf "%s\\n" "$a"; done > "$(dirname "$0")/../last-args"',
        'case "$1" in @*) cp "${1#@}" "$(dirname "$0")/../last-args-file";; esac',
    ]
    if stdout:
        lines.append(f"printf '%s' '{stdout}'")
    if stderr:
        lines.append(f"printf '%s' '{stderr}' >&2")
    lines.append(f"exit {exit_code}")
    script.write_text("\n".join(lines) + "\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def logger() -> logging.Logger:
    log = logging.getLogger("jlink-runner-test")
    log.setLevel(logging.DEBUG)
    log.propagate = True
    return log


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider(stdout="Linking modules\nDone\n")


@pytest.fixture
def fake_jdk(tmp_path: Path) -> Path:
    home = tmp_path / "jdk-17"
    write_fake_jlink(home, stdout="image created\n")
    return home


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # Keep user config and env overrides from leaking into tests.
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("JLINK_RUNNER_TOOLCHAINS", raising=False)
    monkeypatch.delenv("JLINK_RUNNER_PROVIDERS_DIRS", raising=False)
    monkeypatch.delenv("JAVA_HOME", raising=False)
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    monkeypatch.setenv("PATH", str(empty_bin))
    yield
