"""
`xcrun simctl` adapter.

Implements the target catalog and lifecycle interfaces used by the runner.
Read-only enumeration calls are retried with tenacity because simctl
occasionally fails while CoreSimulator is still starting; lifecycle commands
are issued once and their errors propagate to the runner.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from bezelgen.domain.models import (
    ProbeResult,
    RuntimeProfile,
    RuntimeProfileList,
    SimulatorTarget,
    SimulatorTargetList,
)
from bezelgen.errors import CommandError
from bezelgen.infrastructure.shell import CommandRunner, run_command

PROBE_OUTPUT_RELATIVE = Path("Documents") / "output.json"

_enumeration_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((CommandError, json.JSONDecodeError)),
    reraise=True,
)


class SimctlClient:
    """
    Thin typed wrapper over `xcrun simctl`.

    Handles are simulator UDIDs; the payload id is the probe's bundle id.
    """

    def __init__(
        self,
        xcrun_path: str = "/usr/bin/xcrun",
        runner: CommandRunner = run_command,
        timeout: Optional[float] = None,
    ) -> None:
        self.xcrun_path = xcrun_path
        self._run = runner
        self._timeout = timeout

    def _simctl(self, *arguments: str) -> str:
        return self._run(self.xcrun_path, ["simctl", *arguments], timeout=self._timeout)

    # Enumeration

    @_enumeration_retry
    def list_targets(self) -> List[SimulatorTarget]:
        """All simulators across runtimes, in simctl's order."""
        payload = json.loads(self._simctl("list", "devices", "-j"))
        listing = SimulatorTargetList.model_validate(payload)
        return [target for targets in listing.devices.values() for target in targets]

    @_enumeration_retry
    def list_profiles(self) -> List[RuntimeProfile]:
        """Available runtimes only, newest version first."""
        payload = json.loads(self._simctl("list", "runtimes", "-j"))
        listing = RuntimeProfileList.model_validate(payload)
        available = [runtime for runtime in listing.runtimes if runtime.is_available]
        return sorted(available, key=lambda runtime: runtime.version_key, reverse=True)

    # Lifecycle

    def provision(self, name: str, profile_id: str, runtime_id: str) -> str:
        return self._simctl("create", name, profile_id, runtime_id)

    def set_quiescent(self, handle: str) -> None:
        self._simctl("shutdown", handle)

    def boot(self, handle: str) -> None:
        """Boot and block until the simulator reports it has finished booting."""
        self._simctl("boot", handle)
        self._simctl("bootstatus", handle, "-b")

    def install(self, handle: str, payload_path: Path) -> None:
        self._simctl("install", handle, str(payload_path))

    def launch(self, handle: str, payload_id: str) -> None:
        self._simctl("launch", handle, payload_id)

    def read_result(self, handle: str, payload_id: str) -> ProbeResult:
        container = self._simctl("get_app_container", handle, payload_id, "data")
        output_file = Path(container) / PROBE_OUTPUT_RELATIVE
        return ProbeResult.model_validate_json(output_file.read_text(encoding="utf-8"))

    def terminate(self, handle: str, payload_id: str) -> None:
        self._simctl("terminate", handle, payload_id)

    def uninstall(self, handle: str, payload_id: str) -> None:
        self._simctl("uninstall", handle, payload_id)


__all__ = ["PROBE_OUTPUT_RELATIVE", "SimctlClient"]
