"""
Tests for running jlink from a configured JDK toolchain.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import write_fake_jlink
from jlink_runner.errors import ExecutionError, ToolNotFoundError
from jlink_runner.executor import ToolchainJLinkExecutor
from jlink_runner.toolchain import Toolchain
from jlink_runner.util import CommandRunner, RunResult


class FakeRunner:
    def __init__(self, result: RunResult | None = None) -> None:
        self.result = result
        self.calls: list[list[str]] = []

    def run(self, args) -> RunResult:
        argv = list(args)
        self.calls.append(argv)
        if self.result is not None:
            return self.result
        return RunResult(args=argv, returncode=0, stdout="", stderr="")


def _executor(jdk: Path, logger, runner=None, **kwargs) -> ToolchainJLinkExecutor:
    return ToolchainJLinkExecutor(
        toolchain=Toolchain(type="jdk", jdk_home=jdk, provides={"version": "17"}),
        runner=runner if runner is not None else CommandRunner(logger=logger),
        logger=logger,
        **kwargs,
    )


class TestExecutable:
    def test_found_in_jdk_bin(self, fake_jdk, logger):
        assert _executor(fake_jdk, logger).get_jlink_executable() == fake_jdk / "bin" / "jlink"

    def test_missing(self, tmp_path, logger):
        with pytest.raises(ToolNotFoundError, match="Unable to find 'jlink' command in toolchain"):
            _executor(tmp_path / "no-jdk", logger).get_jlink_executable()


class TestExecute:
    def test_runs_toolchain_jlink(self, fake_jdk, logger, caplog):
        caplog.set_level(logging.INFO, logger=logger.name)
        assert _executor(fake_jdk, logger).execute_jlink(["--add-modules", "java.base"]) == 0

        recorded = (fake_jdk / "last-args").read_text(encoding="utf-8").splitlines()
        assert recorded == ["--add-modules", "java.base"]
        assert [r.getMessage() for r in caplog.records] == ["", "image created"]

    def test_failure_raises_and_logs_error(self, tmp_path, logger, caplog):
        caplog.set_level(logging.INFO, logger=logger.name)
        jdk = tmp_path / "jdk-bad"
        write_fake_jlink(jdk, stdout="partial output\n", stderr="Error: bad option", exit_code=4)

        with pytest.raises(ExecutionError) as excinfo:
            _executor(jdk, logger).execute_jlink(["--bad"])

        err = excinfo.value
        assert err.exit_code == 4
        assert err.stderr == "Error: bad option"
        assert "Exit code: 4 - Error: bad option" in str(err)
        assert f"Command line was: {jdk / 'bin' / 'jlink'} --bad" in str(err)
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.ERROR, ""),
            (logging.ERROR, "partial output"),
        ]

    def test_uses_runner(self, fake_jdk, logger):
        runner = FakeRunner()
        _executor(fake_jdk, logger, runner=runner).execute_jlink(["--version"])
        assert runner.calls == [[str(fake_jdk / "bin" / "jlink"), "--version"]]

    def test_missing_jlink_raises_before_running(self, tmp_path, logger):
        runner = FakeRunner()
        with pytest.raises(ToolNotFoundError):
            _executor(tmp_path, logger, runner=runner).execute_jlink(["--version"])
        assert runner.calls == []


class TestArgsFile:
    def test_passes_args_as_file(self, fake_jdk, tmp_path, logger):
        out_dir = tmp_path / "target"
        _executor(fake_jdk, logger, args_file_dir=out_dir).execute_jlink(
            ["--module-path", "/opt/my mods", "--add-modules", "app"]
        )

        recorded = (fake_jdk / "last-args").read_text(encoding="utf-8").splitlines()
        assert recorded == [f"@{out_dir / 'jlinkArgs'}"]
        contents = (fake_jdk / "last-args-file").read_text(encoding="utf-8").splitlines()
        assert contents == ["--module-path", '"/opt/my mods"', "--add-modules", "app"]

    def test_file_removed_unless_debug(self, fake_jdk, tmp_path, logger):
        logger.setLevel(logging.INFO)
        out_dir = tmp_path / "target"
        _executor(fake_jdk, logger, args_file_dir=out_dir).execute_jlink(["--version"])
        assert not (out_dir / "jlinkArgs").exists()

    def test_file_kept_when_debugging(self, fake_jdk, tmp_path, logger):
        out_dir = tmp_path / "target"
        _executor(fake_jdk, logger, args_file_dir=out_dir).execute_jlink(["--version"])
        assert (out_dir / "jlinkArgs").read_text(encoding="utf-8") == "--version\n"

    def test_quotes_special_characters(self, fake_jdk, tmp_path, logger):
        runner = FakeRunner()
        out_dir = tmp_path / "target"
        _executor(fake_jdk, logger, runner=runner, args_file_dir=out_dir).execute_jlink(
            ['say "hi"', "C:\\jdk", ""]
        )
        assert (out_dir / "jlinkArgs").read_text(encoding="utf-8").splitlines() == [
            '"say \\"hi\\""',
            '"C:\\\\jdk"',
            '""',
        ]


class TestJmodsFolder:
    def test_source_directory_wins(self, fake_jdk, tmp_path, logger):
        source = tmp_path / "other-jdk"
        source.mkdir()
        assert _executor(fake_jdk, logger).get_jmods_folder(source) == source / "jmods"

    def test_falls_back_to_toolchain(self, fake_jdk, logger):
        assert _executor(fake_jdk, logger).get_jmods_folder(None) == fake_jdk / "jmods"

    def test_missing_source_falls_back_to_toolchain(self, fake_jdk, tmp_path, logger):
        assert _executor(fake_jdk, logger).get_jmods_folder(tmp_path / "nope") == fake_jdk / "jmods"
