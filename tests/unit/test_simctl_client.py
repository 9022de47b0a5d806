from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from bezelgen.domain.models import FailureReason, LifecycleStage, WorkGroup
from bezelgen.errors import CommandError
from bezelgen.infrastructure.simctl import PROBE_OUTPUT_RELATIVE, SimctlClient
from bezelgen.lifecycle.runner import LifecycleRunner

DEVICES_LISTING = {
    "devices": {
        "com.apple.CoreSimulator.SimRuntime.iOS-18-0": [
            {
                "name": "iPhone 16 Pro",
                "udid": "AAAA-1111",
                "state": "Shutdown",
                "isAvailable": True,
                "deviceTypeIdentifier": "com.apple.CoreSimulator.SimDeviceType.iPhone-16-Pro",
            }
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-26-0": [
            {"name": "iPhone 17 Pro", "udid": "BBBB-2222", "state": "Booted", "isAvailable": True},
            {"name": "iPhone 8", "udid": "CCCC-3333", "state": "Shutdown", "isAvailable": False},
        ],
    }
}

RUNTIMES_LISTING = {
    "runtimes": [
        {
            "version": "18.0",
            "identifier": "com.apple.CoreSimulator.SimRuntime.iOS-18-0",
            "isAvailable": True,
            "supportedDeviceTypes": [],
        },
        {
            "version": "26.0",
            "identifier": "com.apple.CoreSimulator.SimRuntime.iOS-26-0",
            "isAvailable": True,
            "supportedDeviceTypes": [
                {
                    "name": "iPhone 17 Pro",
                    "identifier": "com.apple.CoreSimulator.SimDeviceType.iPhone-17-Pro",
                }
            ],
        },
        {
            "version": "17.5",
            "identifier": "com.apple.CoreSimulator.SimRuntime.iOS-17-5",
            "isAvailable": False,
            "supportedDeviceTypes": [],
        },
    ]
}


class _FakeRunner:
    """Records argument vectors and answers from a canned table."""

    def __init__(self, responses: Optional[Dict[str, str]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[List[str]] = []
        self.failures_left = 0

    def __call__(
        self,
        executable: str,
        arguments: Sequence[str],
        merge_stderr: bool = False,
        timeout: Optional[float] = None,
    ) -> str:
        self.calls.append([executable, *arguments])
        if self.failures_left:
            self.failures_left -= 1
            raise CommandError([executable, *arguments], returncode=164)
        return self.responses.get(" ".join(arguments[1:3]), "")


@pytest.fixture(autouse=True)
def _fast_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda seconds: None)


def test_list_targets_flattens_runtimes() -> None:
    runner = _FakeRunner({"list devices": json.dumps(DEVICES_LISTING)})
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    targets = client.list_targets()

    assert [(t.name, t.handle, t.state, t.is_available) for t in targets] == [
        ("iPhone 16 Pro", "AAAA-1111", "Shutdown", True),
        ("iPhone 17 Pro", "BBBB-2222", "Booted", True),
        ("iPhone 8", "CCCC-3333", "Shutdown", False),
    ]
    assert runner.calls == [["xcrun", "simctl", "list", "devices", "-j"]]


def test_list_profiles_keeps_available_runtimes_newest_first() -> None:
    runner = _FakeRunner({"list runtimes": json.dumps(RUNTIMES_LISTING)})
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    profiles = client.list_profiles()

    assert [p.version for p in profiles] == ["26.0", "18.0"]
    assert profiles[0].supported_device_types[0].name == "iPhone 17 Pro"


def test_enumeration_retries_transient_failures() -> None:
    runner = _FakeRunner({"list devices": json.dumps(DEVICES_LISTING)})
    runner.failures_left = 2
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    targets = client.list_targets()

    assert len(targets) == 3
    assert len(runner.calls) == 3


def test_enumeration_gives_up_after_three_attempts() -> None:
    runner = _FakeRunner()
    runner.failures_left = 5
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    with pytest.raises(CommandError):
        client.list_targets()
    assert len(runner.calls) == 3


def test_lifecycle_commands_issue_expected_arguments() -> None:
    runner = _FakeRunner({"create iPhone 17 Pro": "NEW-UDID"})
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    handle = client.provision("iPhone 17 Pro", "type-id", "runtime-id")
    client.boot(handle)
    client.install(handle, Path("/tmp/FetchBezel.app"))
    client.launch(handle, "com.example.probe")
    client.terminate(handle, "com.example.probe")
    client.uninstall(handle, "com.example.probe")
    client.set_quiescent(handle)

    assert handle == "NEW-UDID"
    assert [call[2:] for call in runner.calls] == [
        ["create", "iPhone 17 Pro", "type-id", "runtime-id"],
        ["boot", "NEW-UDID"],
        ["bootstatus", "NEW-UDID", "-b"],
        ["install", "NEW-UDID", "/tmp/FetchBezel.app"],
        ["launch", "NEW-UDID", "com.example.probe"],
        ["terminate", "NEW-UDID", "com.example.probe"],
        ["uninstall", "NEW-UDID", "com.example.probe"],
        ["shutdown", "NEW-UDID"],
    ]


def test_read_result_parses_probe_output(tmp_path: Path) -> None:
    output = tmp_path / PROBE_OUTPUT_RELATIVE
    output.parent.mkdir(parents=True)
    output.write_text(json.dumps({"identifiers": "arm64", "bezel": 62}), encoding="utf-8")
    runner = _FakeRunner({"get_app_container UDID": str(tmp_path)})
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    result = client.read_result("UDID", "com.example.probe")

    assert result.metric == 62.0
    assert runner.calls[0][2:] == ["get_app_container", "UDID", "com.example.probe", "data"]


def test_read_result_raises_when_output_missing(tmp_path: Path) -> None:
    runner = _FakeRunner({"get_app_container UDID": str(tmp_path)})
    client = SimctlClient(xcrun_path="xcrun", runner=runner)

    with pytest.raises(OSError):
        client.read_result("UDID", "com.example.probe")


@pytest.mark.parametrize(
    "contents",
    [
        "{not json",
        '{"identifiers": "arm64"}',
        '{"identifiers": "arm64", "bezel": "round"}',
        '{"identifiers": "arm64", "bezel": 1e400}',
        '{"identifiers": "arm64", "bezel": NaN}',
    ],
)
def test_malformed_output_file_fails_group_as_result_unavailable(
    tmp_path: Path, writer, no_sleep, contents: str
) -> None:
    output = tmp_path / PROBE_OUTPUT_RELATIVE
    output.parent.mkdir(parents=True)
    output.write_text(contents, encoding="utf-8")
    runner = _FakeRunner(
        {
            "list devices": json.dumps(DEVICES_LISTING),
            "get_app_container BBBB-2222": str(tmp_path),
        }
    )
    lifecycle = LifecycleRunner(
        controller=SimctlClient(xcrun_path="xcrun", runner=runner),
        writer=writer,
        payload_id="com.example.probe",
        launch_settle_seconds=0.0,
        teardown_settle_seconds=0.0,
        sleep=no_sleep,
    )

    outcome = lifecycle.run_group(
        WorkGroup(identifiers=("iPhone18,1",), display_name="iPhone 17 Pro"),
        Path("/tmp/FetchBezel.app"),
    )

    assert outcome.reason is FailureReason.RESULT_UNAVAILABLE
    assert outcome.stage is LifecycleStage.PROBE_RUNNING
    assert outcome.group.metric is None
    assert runner.calls[-1][2:] == ["shutdown", "BBBB-2222"]
