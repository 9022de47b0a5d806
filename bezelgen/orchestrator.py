"""
Pipeline driver: load -> resolve -> measure -> reconcile -> save.

Usage (example from CLI):
    from bezelgen.orchestrator import run_generate

    report = run_generate(settings)
    print(len(report.batch.processed), len(report.batch.failed))

The record store is only written once, after every work group has finished.
A crash mid-batch loses that batch's results but never corrupts the files on
disk; a fatal error (probe build, load, write) leaves both files untouched.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from bezelgen.config import Settings, get_settings
from bezelgen.database.reconciler import reconcile
from bezelgen.database.resolver import resolve_work_groups
from bezelgen.database.store import load_record_store, save_record_store
from bezelgen.domain.models import RecordStore, WorkGroup
from bezelgen.errors import FatalPipelineError
from bezelgen.infrastructure.simctl import SimctlClient
from bezelgen.infrastructure.xcodebuild import XcodeBuilder
from bezelgen.lifecycle.abstract import BatchResult, DeviceController, GroupOutcome, PayloadBuilder
from bezelgen.lifecycle.runner import LifecycleRunner
from bezelgen.utils.console import ConsoleWriter, StatusWriter


@dataclass
class PipelineReport:
    groups: List[WorkGroup] = field(default_factory=list)
    batch: BatchResult = field(default_factory=BatchResult)
    store: Optional[RecordStore] = None
    written: bool = False

    @property
    def nothing_to_do(self) -> bool:
        return not self.groups


def build_controller(settings: Settings) -> SimctlClient:
    return SimctlClient(xcrun_path=settings.xcrun_path, timeout=settings.command_timeout_seconds)


def build_builder(settings: Settings, writer: StatusWriter) -> XcodeBuilder:
    return XcodeBuilder(
        project_path=settings.project_path,
        scheme=settings.scheme,
        derived_data_path=settings.app_output_dir,
        writer=writer,
        xcodebuild_path=settings.xcodebuild_path,
    )


def _build_runner(
    settings: Settings,
    controller: DeviceController,
    writer: StatusWriter,
    sleep: Callable[[float], None],
) -> LifecycleRunner:
    return LifecycleRunner(
        controller=controller,
        writer=writer,
        payload_id=settings.bundle_id,
        launch_settle_seconds=settings.launch_settle_seconds,
        teardown_settle_seconds=settings.teardown_settle_seconds,
        sleep=sleep,
    )


def run_generate(
    settings: Optional[Settings] = None,
    controller: Optional[DeviceController] = None,
    builder: Optional[PayloadBuilder] = None,
    writer: Optional[StatusWriter] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineReport:
    """
    Measure every pending/problematic device and persist the results.

    Parameters
    ----------
    settings : Settings | None
        Paths and timings. Defaults to `get_settings()`.
    controller, builder, writer : optional
        Collaborators; default to simctl, xcodebuild and a console writer.
    sleep : callable
        Used for the settle waits.

    Returns
    -------
    PipelineReport
        The resolved groups, per-group outcomes and the reconciled store.

    Raises
    ------
    FatalPipelineError
        Load, probe build or write failure. No output file is modified.
    """
    settings = settings or get_settings()
    writer = writer or ConsoleWriter(verbose=settings.verbose)
    controller = controller or build_controller(settings)
    builder = builder or build_builder(settings, writer)

    writer.info(f"Loading database: {settings.database_path}")
    store = load_record_store(settings.database_path)

    groups = resolve_work_groups(store)
    report = PipelineReport(groups=groups, store=store)
    if not groups:
        writer.success("There are no new simulators to process 🎉")
        return report

    pending_count = sum(len(group.identifiers) for group in groups)
    writer.info(
        f"Found {pending_count} pending device(s) across {len(groups)} simulator(s) to process"
    )

    runner = _build_runner(settings, controller, writer, sleep)
    report.batch = runner.run_batch(groups, builder)

    failed = report.batch.failed
    if failed:
        writer.warn(f"{len(failed)} simulator(s) failed and will be marked problematic")

    writer.banner("** Finalizing **")
    writer.info("Merging results into database...", indent=2)
    updated = reconcile(store, report.batch.processed, failed)

    overlap = updated.overlapping_identifiers()
    if overlap:
        raise FatalPipelineError(
            f"Identifiers classified more than once: {', '.join(sorted(overlap))}"
        )

    writer.info("Saving output files...", indent=2)
    save_record_store(updated, settings.database_path, settings.output_path, writer=writer)
    report.store = updated
    report.written = True

    writer.info("Cleaning up build artifacts...", indent=2)
    builder.clean()

    writer.summary(f"Processed {len(report.batch.processed)} group(s); {len(failed)} failed")
    writer.success("Done.")
    return report


def run_single_device(
    name: str,
    settings: Optional[Settings] = None,
    controller: Optional[DeviceController] = None,
    builder: Optional[PayloadBuilder] = None,
    writer: Optional[StatusWriter] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GroupOutcome:
    """
    Run the full simulator lifecycle for one display name.

    The record store is neither read nor written; useful for checking a new
    simulator/runtime combination before queueing it.
    """
    settings = settings or get_settings()
    writer = writer or ConsoleWriter(verbose=True)
    controller = controller or build_controller(settings)
    builder = builder or build_builder(settings, writer)

    runner = _build_runner(settings, controller, writer, sleep)
    payload_path = builder.build_payload()
    outcome = runner.run_group(WorkGroup(identifiers=("test",), display_name=name), payload_path)
    builder.clean()

    if outcome.succeeded:
        writer.success(f"Test passed for '{name}': bezel = {outcome.group.metric:g}")
    else:
        writer.warn(f"No bezel data returned for '{name}'")
    return outcome


__all__ = [
    "PipelineReport",
    "build_builder",
    "build_controller",
    "run_generate",
    "run_single_device",
]
