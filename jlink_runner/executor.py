"""
Executors for jlink.

Two ways to run jlink are supported:

- ``ToolProviderJLinkExecutor`` looks up a tool provider named ``jlink`` in the
  current environment and runs it with output captured into in-memory buffers.
- ``ToolchainJLinkExecutor`` runs ``bin/jlink`` of a configured JDK toolchain
  as a subprocess.

When a toolchain is configured the tool-provider executor delegates every call
to the toolchain executor and never touches a provider.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from jlink_runner.errors import ExecutionError, ToolNotFoundError
from jlink_runner.providers.api import ToolProvider
from jlink_runner.providers.builtin import builtin_providers
from jlink_runner.providers.registry import ToolProviderRegistry
from jlink_runner.toolchain import Toolchain
from jlink_runner.util import CommandRunner, output_lines, sh_join

JLINK = "jlink"
JMODS = "jmods"
ARGS_FILE_NAME = "jlinkArgs"


class JLinkExecutor(Protocol):
    def execute_jlink(self, args: Sequence[str]) -> int: ...

    def get_jmods_folder(self, source_jdk_modules: Path | None) -> Path | None: ...


def _quote_arg(arg: str) -> str:
    # @argfiles split on whitespace; quoted tokens treat backslash as an escape.
    if arg and not any(c.isspace() or c in "\"'#\\" for c in arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _finish(logger: logging.Logger, *, exit_code: int, stdout: str, stderr: str, command_line: str) -> int:
    lines = output_lines(stdout)
    if exit_code != 0:
        for line in lines:
            logger.error(line)
        raise ExecutionError.for_exit(exit_code=exit_code, stderr=stderr, command_line=command_line)

    for line in lines:
        logger.info(line)
    return exit_code


@dataclass(frozen=True)
class ToolchainJLinkExecutor:
    toolchain: Toolchain
    runner: CommandRunner
    logger: logging.Logger
    args_file_dir: Path | None = None

    def get_jlink_executable(self) -> Path:
        exe = self.toolchain.find_tool(JLINK)
        if exe is None:
            raise ToolNotFoundError(
                f"Unable to find '{JLINK}' command in toolchain {self.toolchain.describe()}"
            )
        return exe

    @staticmethod
    def _write_args_file(directory: Path, args: Sequence[str]) -> Path:
        path = directory / ARGS_FILE_NAME
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("".join(_quote_arg(a) + "\n" for a in args), encoding="utf-8")
        except OSError as e:
            raise ExecutionError(f"Unable to write jlink arguments file {path}: {e}") from e
        return path

    def execute_jlink(self, args: Sequence[str]) -> int:
        exe = self.get_jlink_executable()
        args_file: Path | None = None
        if self.args_file_dir is not None:
            args_file = self._write_args_file(self.args_file_dir, args)
            argv = [str(exe), f"@{args_file}"]
        else:
            argv = [str(exe), *args]

        try:
            res = self.runner.run(argv)
        finally:
            # Keep the file around for inspection when debugging.
            if args_file is not None and not self.logger.isEnabledFor(logging.DEBUG):
                args_file.unlink(missing_ok=True)

        return _finish(
            self.logger,
            exit_code=res.returncode,
            stdout=res.stdout,
            stderr=res.stderr,
            command_line=sh_join(argv),
        )

    def get_jmods_folder(self, source_jdk_modules: Path | None) -> Path | None:
        if source_jdk_modules is not None and source_jdk_modules.is_dir():
            return source_jdk_modules / JMODS

        # <jdk_home>/bin/jlink -> <jdk_home>/jmods
        return self.get_jlink_executable().parent.parent / JMODS


class ToolProviderJLinkExecutor:
    """
    Runs jlink through a tool provider, so the output never reaches the
    caller's streams directly.

    Captured stdout is logged line by line: at INFO on success, at ERROR
    before an ``ExecutionError`` is raised for a non-zero exit code.
    """

    def __init__(
        self,
        *,
        logger: logging.Logger,
        registry: ToolProviderRegistry,
        toolchain_executor: ToolchainJLinkExecutor | None = None,
    ) -> None:
        self._logger = logger
        self._delegate = toolchain_executor
        self._provider: ToolProvider | None = None
        if toolchain_executor is None:
            self._provider = self._find_jlink(registry)

    @staticmethod
    def _find_jlink(registry: ToolProviderRegistry) -> ToolProvider:
        provider = registry.find_first(JLINK)
        if provider is None:
            reasons = registry.unavailable_reasons(JLINK)
            detail = "".join(f"\n  - {r}" for r in reasons)
            raise ToolNotFoundError(f"No jlink tool found.{detail}")
        return provider

    @property
    def toolchain(self) -> Toolchain | None:
        return self._delegate.toolchain if self._delegate is not None else None

    @property
    def provider(self) -> ToolProvider | None:
        return self._provider

    def execute_jlink(self, args: Sequence[str]) -> int:
        provider = self._provider
        if provider is None:
            return self._delegate.execute_jlink(args)

        argv = list(args)
        command_line = sh_join([provider.name, *argv])
        self._logger.debug("%s", command_line)

        try:
            with io.StringIO() as out, io.StringIO() as err:
                exit_code = provider.run(out, err, argv)
                out.flush()
                err.flush()
                stdout = out.getvalue()
                stderr = err.getvalue()
        except OSError as e:
            raise ExecutionError(f"Unable to execute jlink command: {e}") from e

        return _finish(
            self._logger,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            command_line=command_line,
        )

    def get_jmods_folder(self, source_jdk_modules: Path | None) -> Path | None:
        if self._delegate is not None:
            return self._delegate.get_jmods_folder(source_jdk_modules)

        if source_jdk_modules is not None and source_jdk_modules.is_dir():
            return source_jdk_modules / JMODS

        # The tool provider does not need the jmods folder to be set.
        return None


def create_executor(
    *,
    logger: logging.Logger,
    toolchain: Toolchain | None = None,
    registry: ToolProviderRegistry | None = None,
    runner: CommandRunner | None = None,
    args_file_dir: Path | None = None,
) -> JLinkExecutor:
    delegate: ToolchainJLinkExecutor | None = None
    if toolchain is not None:
        delegate = ToolchainJLinkExecutor(
            toolchain=toolchain,
            runner=runner if runner is not None else CommandRunner(logger=logger),
            logger=logger,
            args_file_dir=args_file_dir,
        )
    if registry is None:
        registry = ToolProviderRegistry(builtin_providers())
    return ToolProviderJLinkExecutor(logger=logger, registry=registry, toolchain_executor=delegate)
