"""
Lifecycle package for bezelgen.

Re-exports the controller/builder interfaces, the result contracts and the
sequential runner so callers can import from `bezelgen.lifecycle` directly.
"""

from bezelgen.lifecycle.abstract import (
    BatchResult,
    DeviceController,
    DeviceLifecycle,
    GroupOutcome,
    PayloadBuilder,
    TargetCatalog,
)
from bezelgen.lifecycle.runner import LifecycleRunner

__all__ = [
    # Interfaces
    "DeviceController",
    "DeviceLifecycle",
    "PayloadBuilder",
    "TargetCatalog",
    # Results
    "BatchResult",
    "GroupOutcome",
    # Runner
    "LifecycleRunner",
]
