"""
jlink-runner error types.

Provides a hierarchy of exceptions for the ways a jlink run can fail.
"""

from __future__ import annotations

__all__ = ["JLinkRunnerError", "ToolNotFoundError", "ExecutionError", "ConfigError"]


class JLinkRunnerError(Exception):
    """Base exception for all jlink-runner errors."""
    pass


class ToolNotFoundError(JLinkRunnerError):
    """Raised when no jlink capability can be located."""
    pass


class ExecutionError(JLinkRunnerError):
    """
    Raised when a jlink run fails (non-zero exit code or I/O failure).

    Attributes:
        exit_code: The non-zero exit code, or None if the tool never finished
        stderr: Standard error output captured from the tool
        command_line: The reconstructed command line that was run
    """
    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stderr: str = "",
        command_line: str | None = None,
    ):
        self.exit_code = exit_code
        self.stderr = stderr
        self.command_line = command_line
        super().__init__(message)

    @classmethod
    def for_exit(cls, *, exit_code: int, stderr: str, command_line: str) -> "ExecutionError":
        msg = f"\nExit code: {exit_code}"
        if stderr:
            msg += f" - {stderr}"
        msg += f"\nCommand line was: {command_line}\n\n"
        return cls(msg, exit_code=exit_code, stderr=stderr, command_line=command_line)


class ConfigError(JLinkRunnerError):
    """Raised when toolchain configuration is missing or invalid."""
    pass
