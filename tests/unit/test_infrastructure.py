from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from bezelgen.errors import CommandError, PayloadBuildFailed
from bezelgen.infrastructure.shell import run_command
from bezelgen.infrastructure.xcodebuild import PRODUCTS_SUBDIR, XcodeBuilder

BUILD_LOG = "\n".join(
    [
        "note: Using codesigning identity override",
        "ViewController.swift:12: warning: unused variable 'x'",
        "ViewController.swift:30: error: cannot find 'foo' in scope",
        "** BUILD FAILED **",
    ]
)


class _ScriptedRunner:
    def __init__(self, error_output: Optional[str] = None) -> None:
        self.error_output = error_output
        self.calls: List[List[str]] = []

    def __call__(
        self,
        executable: str,
        arguments: Sequence[str],
        merge_stderr: bool = False,
        timeout: Optional[float] = None,
    ) -> str:
        self.calls.append([executable, *arguments])
        assert merge_stderr
        if self.error_output is not None:
            raise CommandError([executable, *arguments], returncode=65, output=self.error_output)
        return ""


def _builder(tmp_path: Path, runner, writer) -> XcodeBuilder:
    return XcodeBuilder(
        project_path=tmp_path / "FetchBezel.xcodeproj",
        scheme="FetchBezel",
        derived_data_path=tmp_path / "output",
        writer=writer,
        xcodebuild_path="xcodebuild",
        runner=runner,
    )


def test_run_command_returns_stripped_stdout() -> None:
    output = run_command(sys.executable, ["-c", "print('  hello  ')"])

    assert output == "hello"


def test_run_command_raises_on_non_zero_exit() -> None:
    with pytest.raises(CommandError) as excinfo:
        run_command(sys.executable, ["-c", "import sys; print('boom'); sys.exit(3)"])

    assert excinfo.value.returncode == 3
    assert "boom" in excinfo.value.output


def test_run_command_raises_when_executable_missing(tmp_path: Path) -> None:
    with pytest.raises(CommandError):
        run_command(str(tmp_path / "no-such-tool"), [])


def test_run_command_honours_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def _timeout(*args, **kwargs):
        raise subprocess.TimeoutExpired(cmd=args[0], timeout=1.0)

    monkeypatch.setattr(subprocess, "run", _timeout)

    with pytest.raises(CommandError, match="timed out"):
        run_command("xcrun", ["simctl", "boot", "UDID"], timeout=1.0)


def test_build_payload_returns_app_bundle(tmp_path: Path, writer) -> None:
    runner = _ScriptedRunner()
    builder = _builder(tmp_path, runner, writer)
    (tmp_path / "output" / PRODUCTS_SUBDIR / "FetchBezel.app").mkdir(parents=True)

    app_path = builder.build_payload()

    assert app_path == tmp_path / "output" / PRODUCTS_SUBDIR / "FetchBezel.app"
    assert runner.calls[0][-2:] == ["clean", "build"]
    assert "-derivedDataPath" in runner.calls[0]


def test_build_payload_surfaces_errors_without_warnings(tmp_path: Path, writer) -> None:
    builder = _builder(tmp_path, _ScriptedRunner(error_output=BUILD_LOG), writer)

    with pytest.raises(PayloadBuildFailed):
        builder.build_payload()

    errors = writer.of_kind("error")
    assert "ViewController.swift:30: error: cannot find 'foo' in scope" in errors
    assert not any("warning:" in line for line in errors)


def test_build_payload_fails_when_bundle_missing(tmp_path: Path, writer) -> None:
    builder = _builder(tmp_path, _ScriptedRunner(), writer)

    with pytest.raises(PayloadBuildFailed):
        builder.build_payload()


def test_clean_removes_derived_data(tmp_path: Path, writer) -> None:
    builder = _builder(tmp_path, _ScriptedRunner(), writer)
    (tmp_path / "output" / "Build").mkdir(parents=True)

    builder.clean()
    builder.clean()

    assert not (tmp_path / "output").exists()
    assert writer.of_kind("detail") == [f"- Deleted {tmp_path / 'output'}"]
