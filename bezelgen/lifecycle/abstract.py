"""
Interfaces the lifecycle runner depends on, and its result contracts.

`SimctlClient` and `XcodeBuilder` satisfy these against real tooling; tests
supply in-memory fakes. Only the blocking/error contract matters: each call
returns when the step is done or raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from bezelgen.domain.models import (
    FailureReason,
    LifecycleStage,
    ProbeResult,
    RuntimeProfile,
    SimulatorTarget,
    WorkGroup,
)


@runtime_checkable
class TargetCatalog(Protocol):
    """Enumeration of existing simulators and installable runtimes."""

    def list_targets(self) -> List[SimulatorTarget]: ...

    def list_profiles(self) -> List[RuntimeProfile]:
        """Available runtimes, preferred (newest) first."""
        ...


@runtime_checkable
class DeviceLifecycle(Protocol):
    """Per-simulator operations; `boot` blocks until the device is ready."""

    def provision(self, name: str, profile_id: str, runtime_id: str) -> str: ...

    def set_quiescent(self, handle: str) -> None: ...

    def boot(self, handle: str) -> None: ...

    def install(self, handle: str, payload_path: Path) -> None: ...

    def launch(self, handle: str, payload_id: str) -> None: ...

    def read_result(self, handle: str, payload_id: str) -> ProbeResult: ...

    def terminate(self, handle: str, payload_id: str) -> None: ...

    def uninstall(self, handle: str, payload_id: str) -> None: ...


@runtime_checkable
class DeviceController(TargetCatalog, DeviceLifecycle, Protocol):
    pass


@runtime_checkable
class PayloadBuilder(Protocol):
    def build_payload(self) -> Path:
        """Build the probe once per batch; raises PayloadBuildFailed."""
        ...

    def clean(self) -> None:
        """Remove build artifacts; must not raise."""
        ...


@dataclass(frozen=True)
class GroupOutcome:
    """
    What happened to one work group.

    `group.metric` is set on success; `reason`/`message` on failure.
    `stage` is the last lifecycle stage reached.
    """

    group: WorkGroup
    stage: LifecycleStage
    reason: Optional[FailureReason] = None
    message: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.reason is None and self.group.metric is not None


@dataclass
class BatchResult:
    outcomes: List[GroupOutcome] = field(default_factory=list)

    @property
    def processed(self) -> List[WorkGroup]:
        return [outcome.group for outcome in self.outcomes if outcome.succeeded]

    @property
    def failed(self) -> List[WorkGroup]:
        return [outcome.group for outcome in self.outcomes if not outcome.succeeded]


__all__ = [
    "BatchResult",
    "DeviceController",
    "DeviceLifecycle",
    "GroupOutcome",
    "PayloadBuilder",
    "TargetCatalog",
]
