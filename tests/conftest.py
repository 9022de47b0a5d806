"""
Pytest configuration for bezelgen.

Provides fixtures for:
- A small device database (as raw JSON and on disk)
- Settings pointing every path into a temp directory
- In-memory stand-ins for the simulator controller, probe builder and
  status writer, so lifecycle tests never touch xcrun
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from bezelgen.config import Settings
from bezelgen.domain.models import (
    ProbeResult,
    RuntimeProfile,
    SimulatorTarget,
    SupportedDeviceType,
)
from bezelgen.errors import CommandError, PayloadBuildFailed

SAMPLE_DATABASE: Dict[str, Any] = {
    "_metadata": {
        "Author": "Mark Battistella",
        "Project": "BezelKit",
        "Website": "https://markbattistella.com",
    },
    "devices": {
        "iPad": {
            "iPad14,1": {"bezel": 21.5, "name": "iPad mini (6th generation)"},
        },
        "iPhone": {
            "iPhone15,2": {"bezel": 55, "name": "iPhone 14 Pro"},
            "iPhone14,2": {"bezel": 47.33, "name": "iPhone 13 Pro"},
        },
        "iPod": {},
    },
    "pending": {
        "iPhone18,1": {"name": "iPhone 17 Pro"},
    },
    "problematic": {
        "iPad17,1": {"name": "iPad mini (A17 Pro)"},
        "iPad17,2": {"name": "iPad mini (A17 Pro)"},
    },
}


class _RecordingWriter:
    """StatusWriter that keeps every message as (kind, text)."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def info(self, message: str, indent: int = 0) -> None:
        self.messages.append(("info", message))

    def success(self, message: str, indent: int = 0) -> None:
        self.messages.append(("success", message))

    def warn(self, message: str, indent: int = 0) -> None:
        self.messages.append(("warn", message))

    def error(self, message: str, indent: int = 0) -> None:
        self.messages.append(("error", message))

    def detail(self, message: str, indent: int = 0) -> None:
        self.messages.append(("detail", message))

    def banner(self, message: str) -> None:
        self.messages.append(("banner", message))

    def summary(self, message: str) -> None:
        self.messages.append(("summary", message))

    def of_kind(self, kind: str) -> List[str]:
        return [text for k, text in self.messages if k == kind]


class _FakeController:
    """
    In-memory simulator controller.

    `metrics` maps display name -> measured corner radius. `fail` maps an
    operation name to the set of handles (or display names, for provision)
    on which it raises `CommandError`.
    """

    def __init__(
        self,
        targets: Optional[List[SimulatorTarget]] = None,
        supported: Optional[List[str]] = None,
        metrics: Optional[Dict[str, float]] = None,
        fail: Optional[Dict[str, Set[str]]] = None,
    ) -> None:
        self.targets: List[SimulatorTarget] = list(targets or [])
        self.supported = list(supported or [])
        self.metrics = dict(metrics or {})
        self.fail = {key: set(value) for key, value in (fail or {}).items()}
        self.calls: List[Tuple[str, ...]] = []
        self._created = 0

    def _names(self) -> Dict[str, str]:
        return {target.handle: target.name for target in self.targets}

    def _maybe_fail(self, operation: str, key: str) -> None:
        if key in self.fail.get(operation, set()):
            raise CommandError(["xcrun", "simctl", operation, key], returncode=1)

    def _set_state(self, handle: str, state: str) -> None:
        self.targets = [
            target.model_copy(update={"state": state}) if target.handle == handle else target
            for target in self.targets
        ]

    def list_targets(self) -> List[SimulatorTarget]:
        return list(self.targets)

    def list_profiles(self) -> List[RuntimeProfile]:
        return [
            RuntimeProfile(
                version="26.0",
                identifier="com.apple.CoreSimulator.SimRuntime.iOS-26-0",
                is_available=True,
                supported_device_types=[
                    SupportedDeviceType(
                        name=name,
                        identifier=f"com.apple.CoreSimulator.SimDeviceType.{name.replace(' ', '-')}",
                    )
                    for name in self.supported
                ],
            )
        ]

    def provision(self, name: str, profile_id: str, runtime_id: str) -> str:
        self.calls.append(("provision", name))
        self._maybe_fail("provision", name)
        self._created += 1
        handle = f"NEW-{self._created}"
        self.targets.append(
            SimulatorTarget(name=name, handle=handle, state="Shutdown", is_available=True)
        )
        return handle

    def set_quiescent(self, handle: str) -> None:
        self.calls.append(("shutdown", handle))
        self._maybe_fail("shutdown", handle)
        self._set_state(handle, "Shutdown")

    def boot(self, handle: str) -> None:
        self.calls.append(("boot", handle))
        self._maybe_fail("boot", handle)
        self._set_state(handle, "Booted")

    def install(self, handle: str, payload_path: Path) -> None:
        self.calls.append(("install", handle))
        self._maybe_fail("install", handle)

    def launch(self, handle: str, payload_id: str) -> None:
        self.calls.append(("launch", handle))
        self._maybe_fail("launch", handle)

    def read_result(self, handle: str, payload_id: str) -> ProbeResult:
        self.calls.append(("read_result", handle))
        self._maybe_fail("read_result", handle)
        name = self._names()[handle]
        if name not in self.metrics:
            raise FileNotFoundError(f"no output.json for {name}")
        return ProbeResult(identifier="x86_64", metric=self.metrics[name])

    def terminate(self, handle: str, payload_id: str) -> None:
        self.calls.append(("terminate", handle))
        self._maybe_fail("terminate", handle)

    def uninstall(self, handle: str, payload_id: str) -> None:
        self.calls.append(("uninstall", handle))
        self._maybe_fail("uninstall", handle)

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


class _FakeBuilder:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.build_calls = 0
        self.clean_calls = 0

    def build_payload(self) -> Path:
        self.build_calls += 1
        if self.fail:
            raise PayloadBuildFailed("xcodebuild failed: intentional")
        return Path("/tmp/FetchBezel.app")

    def clean(self) -> None:
        self.clean_calls += 1


def _no_sleep(seconds: float) -> None:
    del seconds


@pytest.fixture()
def sample_data() -> Dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_DATABASE))


@pytest.fixture()
def database_file(tmp_path: Path, sample_data: Dict[str, Any]) -> Path:
    path = tmp_path / "apple-device-database.json"
    path.write_text(json.dumps(sample_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def test_settings(tmp_path: Path, database_file: Path) -> Settings:
    """
    Settings with every file location inside `tmp_path` and zero settle time.
    """
    return Settings(
        database_path=database_file,
        output_path=tmp_path / "Resources" / "bezel.min.json",
        docs_input_path=tmp_path / "Resources" / "bezel.min.json",
        docs_output_path=tmp_path / "SupportedDeviceList.md",
        app_output_dir=tmp_path / "output",
        launch_settle_seconds=0.0,
        teardown_settle_seconds=0.0,
        verbose=False,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture()
def writer() -> _RecordingWriter:
    return _RecordingWriter()


@pytest.fixture()
def no_sleep():
    return _no_sleep


@pytest.fixture()
def make_controller():
    """Factory for `_FakeController` so tests can shape each scenario."""
    return _FakeController


@pytest.fixture()
def make_builder():
    return _FakeBuilder
