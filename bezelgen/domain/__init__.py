"""
Domain package for bezelgen.

Exports the record-store models, the simulator enumeration shapes and the
runtime work-group types shared by the resolver, runner and reconciler.
"""

from bezelgen.domain.models import (
    CATEGORIES,
    DeviceCategories,
    DeviceRecord,
    FailureReason,
    LifecycleStage,
    Metadata,
    PendingEntry,
    ProbeResult,
    RecordStore,
    RuntimeProfile,
    SimulatorTarget,
    SupportedDeviceType,
    WorkGroup,
)

__all__ = [
    "CATEGORIES",
    "DeviceCategories",
    "DeviceRecord",
    "FailureReason",
    "LifecycleStage",
    "Metadata",
    "PendingEntry",
    "ProbeResult",
    "RecordStore",
    "RuntimeProfile",
    "SimulatorTarget",
    "SupportedDeviceType",
    "WorkGroup",
]
