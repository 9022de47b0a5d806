"""
Probe app builder.

Builds the FetchBezel app for the simulator SDK once per batch. Build output
is captured and only surfaced (minus warning lines) when the build fails.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from bezelgen.errors import CommandError, PayloadBuildFailed
from bezelgen.infrastructure.shell import CommandRunner, run_command
from bezelgen.utils.console import StatusWriter

PRODUCTS_SUBDIR = Path("Build") / "Products" / "Debug-iphonesimulator"


class XcodeBuilder:
    def __init__(
        self,
        project_path: Path,
        scheme: str,
        derived_data_path: Path,
        writer: StatusWriter,
        xcodebuild_path: str = "/usr/bin/xcodebuild",
        runner: CommandRunner = run_command,
        timeout: Optional[float] = None,
    ) -> None:
        self.project_path = Path(project_path)
        self.scheme = scheme
        self.derived_data_path = Path(derived_data_path)
        self.xcodebuild_path = xcodebuild_path
        self._writer = writer
        self._run = runner
        self._timeout = timeout

    @property
    def app_path(self) -> Path:
        return self.derived_data_path / PRODUCTS_SUBDIR / f"{self.scheme}.app"

    def build_payload(self) -> Path:
        """
        Clean-build the probe app and return the `.app` bundle path.

        Raises
        ------
        PayloadBuildFailed
            If xcodebuild fails or the bundle is missing afterwards.
        """
        self._writer.info(f"Building {self.scheme} app...")
        try:
            self._run(
                self.xcodebuild_path,
                [
                    "-project", str(self.project_path),
                    "-scheme", self.scheme,
                    "-sdk", "iphonesimulator",
                    "-configuration", "Debug",
                    "-derivedDataPath", str(self.derived_data_path),
                    "clean", "build",
                ],
                merge_stderr=True,
                timeout=self._timeout,
            )
        except CommandError as exc:
            for line in exc.output.splitlines():
                if "warning:" not in line.lower():
                    self._writer.error(line)
            raise PayloadBuildFailed(f"xcodebuild failed: {exc}") from exc

        if not self.app_path.exists():
            raise PayloadBuildFailed(f"Build succeeded but no app bundle at {self.app_path}")

        self._writer.success(f"Built app: {self.app_path}")
        return self.app_path

    def clean(self) -> None:
        """Remove the derived data directory; failures only warn."""
        if not self.derived_data_path.exists():
            return
        try:
            shutil.rmtree(self.derived_data_path)
        except OSError as exc:
            self._writer.warn(f"Could not delete '{self.derived_data_path}': {exc}")
            return
        self._writer.detail(f"- Deleted {self.derived_data_path}", indent=6)


__all__ = ["PRODUCTS_SUBDIR", "XcodeBuilder"]
