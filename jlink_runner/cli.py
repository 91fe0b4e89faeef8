from __future__ import annotations

import argparse
import logging
from pathlib import Path

from jlink_runner.core import Options, build_context
from jlink_runner.errors import ConfigError, ExecutionError, ToolNotFoundError


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("jlink-runner")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--toolchains",
        type=Path,
        default=None,
        help="Toolchains file describing JDK installations. Supported: *.json, *.toml, *.yaml, *.yml. "
        "Also supports JLINK_RUNNER_TOOLCHAINS and ~/.config/jlink-runner/toolchains.*",
    )
    parser.add_argument(
        "--jdk-version",
        default=None,
        help="Required JDK toolchain version, e.g. 17 or [17,21).",
    )
    parser.add_argument(
        "--jdk-vendor",
        default=None,
        help="Required JDK toolchain vendor.",
    )
    parser.add_argument(
        "--providers-dir",
        action="append",
        type=Path,
        default=[],
        help="Directory containing additional tool providers (*.py). Can be specified multiple times. "
        "Also supports JLINK_RUNNER_PROVIDERS_DIRS and ~/.config/jlink-runner/providers.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jlink-runner")
    sub = parser.add_subparsers(dest="command", required=True)

    link = sub.add_parser("link", help="Run jlink with the given arguments.")
    _add_common_options(link)
    link.add_argument(
        "--args-file-dir",
        type=Path,
        default=None,
        help="Write toolchain jlink arguments to <dir>/jlinkArgs and pass them as @file.",
    )
    link.add_argument(
        "jlink_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to jlink (put them after --).",
    )

    jmods = sub.add_parser("jmods", help="Print the jmods folder jlink should use.")
    _add_common_options(jmods)
    jmods.add_argument(
        "--source-jdk-modules",
        type=Path,
        default=None,
        help="JDK whose jmods folder should be used instead of the toolchain's.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    jlink_args: list[str] = list(getattr(args, "jlink_args", None) or [])
    if jlink_args and jlink_args[0] == "--":
        jlink_args = jlink_args[1:]
    if args.command == "link" and not jlink_args:
        parser.error("link: no jlink arguments given (pass them after --)")

    logger = _setup_logger(args.verbose)

    options = Options(
        toolchains_file=args.toolchains,
        jdk_version=args.jdk_version,
        jdk_vendor=args.jdk_vendor,
        provider_dirs=tuple(args.providers_dir),
        args_file_dir=getattr(args, "args_file_dir", None),
    )

    try:
        ctx = build_context(options=options, logger=logger)
        executor = ctx.executor()
    except (ConfigError, ToolNotFoundError) as e:
        logger.error("%s", e)
        return 2

    if args.command == "jmods":
        try:
            folder = executor.get_jmods_folder(args.source_jdk_modules)
        except ToolNotFoundError as e:
            logger.error("%s", e)
            return 2
        if folder is None:
            logger.info("No jmods folder needed; jlink runs through a tool provider.")
            return 0
        print(folder)
        return 0

    try:
        return executor.execute_jlink(jlink_args)
    except ToolNotFoundError as e:
        logger.error("%s", e)
        return 2
    except ExecutionError as e:
        logger.error("jlink failed: %s", str(e).strip())
        return 1
