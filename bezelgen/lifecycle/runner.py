"""
Device lifecycle runner.

Drives one work group at a time through

    Unacquired -> Acquired -> Booted -> ProbeInstalled -> ProbeRunning
    -> ResultCaptured -> TornDown

Groups run strictly one after another. Any failure is caught at the group
boundary and recorded in the group's outcome; the batch always moves on to
the next group. Only the one-time probe build can abort a batch.

The two settle waits are fixed sleeps; the probe gives no completion signal.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from bezelgen.domain.models import FailureReason, LifecycleStage, SimulatorTarget, WorkGroup
from bezelgen.errors import (
    BootFailed,
    CommandError,
    LifecycleError,
    NoSupportedProfile,
    ProbeLaunchFailed,
    ProvisionFailed,
    ResultUnavailable,
)
from bezelgen.lifecycle.abstract import BatchResult, DeviceController, GroupOutcome, PayloadBuilder
from bezelgen.utils.console import StatusWriter

QUIESCENT_STATE = "Shutdown"
DEFAULT_SETTLE_SECONDS = 5.0


class LifecycleRunner:
    """
    Runs simulator lifecycles for work groups.

    Parameters
    ----------
    controller : DeviceController
        Target enumeration plus per-simulator operations.
    writer : StatusWriter
        Where progress and failures are reported.
    payload_id : str
        Bundle id of the probe app.
    launch_settle_seconds, teardown_settle_seconds : float
        Fixed waits after launching the probe and after terminating it.
    sleep : callable
        Injected for tests; defaults to `time.sleep`.
    """

    def __init__(
        self,
        controller: DeviceController,
        writer: StatusWriter,
        payload_id: str,
        launch_settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        teardown_settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._controller = controller
        self._writer = writer
        self.payload_id = payload_id
        self.launch_settle_seconds = launch_settle_seconds
        self.teardown_settle_seconds = teardown_settle_seconds
        self._sleep = sleep

    # Acquisition

    def find_target(self, name: str) -> Optional[SimulatorTarget]:
        """
        First available simulator named `name`.

        Stale entries whose runtime was deleted (`isAvailable == false`) are
        skipped so a fresh simulator gets created instead.
        """
        for target in self._controller.list_targets():
            if target.name == name and target.is_available:
                return target
        return None

    def find_profile(self, name: str) -> Optional[Tuple[str, str]]:
        """(device type id, runtime id) from the first runtime supporting `name`."""
        for runtime in self._controller.list_profiles():
            if not runtime.is_available:
                continue
            for device_type in runtime.supported_device_types:
                if device_type.name == name:
                    return device_type.identifier, runtime.identifier
        return None

    def acquire(self, group: WorkGroup) -> WorkGroup:
        """
        Reuse an existing simulator or create one; returns the group with its handle.

        Raises
        ------
        NoSupportedProfile
            No installed runtime supports the display name.
        ProvisionFailed
            `simctl create` failed or returned no UDID.
        """
        identifiers = ", ".join(group.identifiers)
        existing = self.find_target(group.display_name)
        if existing is not None:
            self._writer.detail(f"- Found '{group.display_name}' → {identifiers}", indent=4)
            return group.model_copy(update={"handle": existing.handle})

        profile = self.find_profile(group.display_name)
        if profile is None:
            raise NoSupportedProfile(f"No supported runtime for: {group.display_name}")

        device_type_id, runtime_id = profile
        try:
            handle = self._controller.provision(group.display_name, device_type_id, runtime_id)
        except CommandError as exc:
            raise ProvisionFailed(
                f"Failed to install simulator for: {group.display_name} ({exc})"
            ) from exc
        if not handle:
            raise ProvisionFailed(f"Failed to install simulator for: {group.display_name}")

        self._writer.detail(f"- Installed '{group.display_name}' → {identifiers}", indent=4)
        return group.model_copy(update={"handle": handle})

    # Per-stage steps

    def _current_state(self, handle: str) -> str:
        for target in self._controller.list_targets():
            if target.handle == handle:
                return target.state
        return QUIESCENT_STATE

    def _boot(self, handle: str) -> None:
        try:
            if self._current_state(handle) != QUIESCENT_STATE:
                self._writer.warn("Simulator not shut down, shutting down now", indent=2)
                self._controller.set_quiescent(handle)
                self._writer.success("Simulator shut down", indent=2)

            self._writer.info("Booting the simulator for testing", indent=2)
            self._writer.detail("- Waiting for simulator to be ready", indent=6)
            self._controller.boot(handle)
        except CommandError as exc:
            raise BootFailed(str(exc)) from exc

    def _install(self, handle: str, payload_path: Path) -> None:
        self._writer.info(f"Installing local project with bundle ID: {self.payload_id}", indent=2)
        self._writer.detail("- Installing app", indent=6)
        try:
            self._controller.install(handle, payload_path)
        except CommandError as exc:
            raise ProbeLaunchFailed(str(exc)) from exc

    def _launch(self, handle: str) -> None:
        self._writer.detail("- Launching app", indent=6)
        try:
            self._controller.launch(handle, self.payload_id)
        except CommandError as exc:
            raise ProbeLaunchFailed(str(exc)) from exc

    def _capture_result(self, handle: str) -> float:
        self._writer.detail(f"- Waiting {self.launch_settle_seconds:g} seconds", indent=6)
        self._sleep(self.launch_settle_seconds)

        self._writer.detail("- Reading bezel data from device", indent=6)
        try:
            result = self._controller.read_result(handle, self.payload_id)
        except (CommandError, OSError, ValueError) as exc:
            raise ResultUnavailable(f"Could not read probe output: {exc}") from exc

        self._writer.detail(f"- Found device data (bezel: {result.metric:g})", indent=6)
        return result.metric

    def _teardown(self, handle: str) -> None:
        """Best-effort: the captured result stays valid whatever happens here."""
        self._writer.detail("- Terminating app", indent=6)
        try:
            self._controller.terminate(handle, self.payload_id)
        except Exception as exc:  # noqa: BLE001 - best-effort teardown
            self._writer.detail(f"- Terminate failed (ignored): {exc}", indent=6)

        self._writer.detail("- Deleting app from simulator", indent=6)
        try:
            self._controller.uninstall(handle, self.payload_id)
        except Exception as exc:  # noqa: BLE001 - best-effort teardown
            self._writer.warn(f"Could not uninstall probe: {exc}", indent=2)

        self._writer.detail(f"- Waiting {self.teardown_settle_seconds:g} seconds", indent=6)
        self._sleep(self.teardown_settle_seconds)

        self._writer.info("Shutting down the simulator", indent=2)
        try:
            self._controller.set_quiescent(handle)
        except Exception as exc:  # noqa: BLE001 - best-effort teardown
            self._writer.warn(f"Could not shut down simulator: {exc}", indent=2)

    def _release_after_failure(self, handle: Optional[str]) -> None:
        if handle is None:
            return
        try:
            self._controller.set_quiescent(handle)
        except Exception as exc:  # noqa: BLE001 - best-effort cleanup
            self._writer.detail(f"- Shutdown after failure did not complete: {exc}", indent=6)

    # Group / batch boundaries

    def run_group(
        self,
        group: WorkGroup,
        payload_path: Path,
        index: int = 0,
        total: int = 1,
    ) -> GroupOutcome:
        """
        Run the full lifecycle for one group. Never raises.
        """
        start = time.perf_counter()
        stage = LifecycleStage.UNACQUIRED
        current = group

        self._writer.banner(f"** Start work on simulator: {index + 1} / {total} **")
        self._writer.info(f"Current device: {group.display_name}", indent=2)

        try:
            current = self.acquire(group)
            stage = LifecycleStage.ACQUIRED
            handle = current.handle or ""
            self._writer.detail(f"- Name:        {current.display_name}", indent=6)
            self._writer.detail(f"- Identifiers: {', '.join(current.identifiers)}", indent=6)
            self._writer.detail(f"- UDID:        {handle}", indent=6)

            self._boot(handle)
            stage = LifecycleStage.BOOTED

            self._install(handle, payload_path)
            stage = LifecycleStage.PROBE_INSTALLED

            self._launch(handle)
            stage = LifecycleStage.PROBE_RUNNING

            metric = self._capture_result(handle)
            current = current.model_copy(update={"metric": metric})
            stage = LifecycleStage.RESULT_CAPTURED

            self._teardown(handle)
            stage = LifecycleStage.TORN_DOWN
        except LifecycleError as exc:
            return self._failed(current, stage, exc.reason, str(exc), start)
        except Exception as exc:  # noqa: BLE001 - a single group must not abort the batch
            return self._failed(
                current, stage, FailureReason.UNEXPECTED, f"{type(exc).__name__}: {exc}", start
            )

        return GroupOutcome(
            group=current,
            stage=stage,
            duration_seconds=time.perf_counter() - start,
        )

    def _failed(
        self,
        group: WorkGroup,
        stage: LifecycleStage,
        reason: FailureReason,
        message: str,
        start: float,
    ) -> GroupOutcome:
        self._writer.warn(f"Simulator '{group.display_name}' failed [{reason.value}]: {message}")
        self._writer.detail(f"- {', '.join(group.identifiers)} → moving to problematic", indent=6)
        if stage is not LifecycleStage.UNACQUIRED:
            self._release_after_failure(group.handle)
        return GroupOutcome(
            group=group.model_copy(update={"metric": None}),
            stage=stage,
            reason=reason,
            message=message,
            duration_seconds=time.perf_counter() - start,
        )

    def run_batch(self, groups: Sequence[WorkGroup], builder: PayloadBuilder) -> BatchResult:
        """
        Build the probe once, then run every group in order.

        Raises
        ------
        PayloadBuildFailed
            Propagated from the builder; no group is attempted.
        """
        result = BatchResult()
        if not groups:
            self._writer.warn("No simulators available to run; nothing to build.")
            return result

        payload_path = builder.build_payload()
        for index, group in enumerate(groups):
            result.outcomes.append(self.run_group(group, payload_path, index, len(groups)))
        return result


__all__ = ["DEFAULT_SETTLE_SECONDS", "LifecycleRunner", "QUIESCENT_STATE"]
