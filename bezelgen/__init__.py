"""
bezelgen - BezelKit device data generator.

Extracts each device's display corner radius from iOS simulators and folds
the results into the versioned device database shipped with BezelKit:

- Resolving which device identifiers still need measuring
- Driving one simulator per display name through boot / probe / teardown
- Reconciling results into devices / pending / problematic
- Writing a byte-stable full cache file and a minified distribution file
"""

from __future__ import annotations

__version__ = "3.0.0"
__author__ = "Mark Battistella"
__license__ = "MIT"

# Public API exports
from bezelgen.config import Settings, get_settings
from bezelgen.database import (
    load_record_store,
    reconcile,
    render,
    resolve_work_groups,
    save_record_store,
)
from bezelgen.domain.models import RecordStore, WorkGroup
from bezelgen.lifecycle import BatchResult, GroupOutcome, LifecycleRunner
from bezelgen.orchestrator import PipelineReport, run_generate, run_single_device
from bezelgen.utils.console import ConsoleWriter, StatusWriter
from bezelgen.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Record store
    "RecordStore",
    "WorkGroup",
    "load_record_store",
    "reconcile",
    "render",
    "resolve_work_groups",
    "save_record_store",
    # Lifecycle
    "BatchResult",
    "GroupOutcome",
    "LifecycleRunner",
    # Orchestration
    "PipelineReport",
    "run_generate",
    "run_single_device",
    # Logging
    "ConsoleWriter",
    "StatusWriter",
    "configure_logging",
    "get_logger",
]
