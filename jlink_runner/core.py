from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from jlink_runner.config_loader import find_toolchains_file, load_toolchains_file
from jlink_runner.executor import JLinkExecutor, create_executor
from jlink_runner.providers.loader import load_providers
from jlink_runner.providers.registry import ToolProviderRegistry
from jlink_runner.toolchain import Toolchain, ToolchainManager
from jlink_runner.util import CommandRunner


@dataclass(frozen=True)
class Options:
    toolchains_file: Path | None = None
    jdk_version: str | None = None
    jdk_vendor: str | None = None
    provider_dirs: Sequence[Path] = field(default_factory=tuple)
    args_file_dir: Path | None = None

    @property
    def requirements(self) -> dict[str, str]:
        reqs: dict[str, str] = {}
        if self.jdk_version:
            reqs["version"] = self.jdk_version
        if self.jdk_vendor:
            reqs["vendor"] = self.jdk_vendor
        return reqs


@dataclass(frozen=True)
class Context:
    logger: logging.Logger
    runner: CommandRunner
    registry: ToolProviderRegistry
    toolchains: ToolchainManager
    options: Options

    def select_toolchain(self) -> Toolchain | None:
        """
        Pick the JDK toolchain to run jlink from.

        With explicit requirements a matching toolchain is mandatory. Without
        requirements the first configured jdk toolchain is used, if any.
        """
        reqs = self.options.requirements
        if reqs:
            return self.toolchains.require("jdk", reqs)
        return self.toolchains.select("jdk")

    def executor(self) -> JLinkExecutor:
        toolchain = self.select_toolchain()
        if toolchain is not None:
            self.logger.debug("Using toolchain %s", toolchain.describe())
        return create_executor(
            logger=self.logger,
            toolchain=toolchain,
            registry=self.registry,
            runner=self.runner,
            args_file_dir=self.options.args_file_dir,
        )


def build_context(*, options: Options, logger: logging.Logger) -> Context:
    runner = CommandRunner(logger=logger)

    toolchains: list[Toolchain] = []
    path = find_toolchains_file(options.toolchains_file)
    if path is not None:
        loaded = load_toolchains_file(path)
        logger.debug("Loaded %d toolchains from %s", len(loaded.toolchains), path)
        toolchains = loaded.toolchains

    loaded_providers = load_providers(provider_dirs=list(options.provider_dirs))
    for err in loaded_providers.errors:
        logger.warning("%s", err)
    for override in loaded_providers.overrides:
        logger.info("Using provider %s instead of the built-in JDK lookup", override)

    return Context(
        logger=logger,
        runner=runner,
        registry=ToolProviderRegistry(loaded_providers.providers),
        toolchains=ToolchainManager(toolchains),
        options=options,
    )
