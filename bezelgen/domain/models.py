"""
Domain models for bezelgen.

Covers the persisted device database (`apple-device-database.json` and its
minified twin), the shapes returned by `xcrun simctl list ... -j`, the probe
app's output file, and the runtime-only work group. Persisted models keep the
on-disk key names as aliases (`bezel`, `name`, `_metadata`) while exposing
descriptive attribute names to Python code.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Literal, Optional, Set, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

Category = Literal["iPad", "iPhone", "iPod"]
CATEGORIES: Tuple[Category, ...] = ("iPad", "iPhone", "iPod")

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
}


class Metadata(BaseModel):
    """Static attribution block; never mutated by the pipeline."""

    author: str = Field(..., alias="Author")
    project: str = Field(..., alias="Project")
    website: str = Field(..., alias="Website")

    model_config = _FROZEN


class DeviceRecord(BaseModel):
    """A measured device: corner radius plus the simulator display name."""

    metric: float = Field(
        ..., alias="bezel", allow_inf_nan=False, description="Measured corner radius."
    )
    display_name: str = Field(..., alias="name", description="Simulator display name.")

    model_config = _FROZEN


class PendingEntry(BaseModel):
    """An identifier waiting to be measured (or previously failed)."""

    display_name: str = Field(..., alias="name")

    model_config = _FROZEN


class DeviceCategories(BaseModel):
    """
    Measured devices keyed by category, then by device identifier.

    An identifier may live in at most one category.
    """

    iPad: Dict[str, DeviceRecord] = Field(default_factory=dict)
    iPhone: Dict[str, DeviceRecord] = Field(default_factory=dict)
    iPod: Dict[str, DeviceRecord] = Field(default_factory=dict)

    model_config = _FROZEN

    @model_validator(mode="after")
    def _identifiers_unique_across_categories(self) -> "DeviceCategories":
        seen: Dict[str, str] = {}
        for category, records in self.items():
            for identifier in records:
                if identifier in seen:
                    raise ValueError(
                        f"Identifier '{identifier}' appears in both "
                        f"'{seen[identifier]}' and '{category}'"
                    )
                seen[identifier] = category
        return self

    def section(self, category: Category) -> Dict[str, DeviceRecord]:
        return getattr(self, category)

    def items(self) -> Iterator[Tuple[Category, Dict[str, DeviceRecord]]]:
        for category in CATEGORIES:
            yield category, self.section(category)

    def identifiers(self) -> Set[str]:
        found: Set[str] = set()
        for _, records in self.items():
            found.update(records)
        return found


class RecordStore(BaseModel):
    """
    The full persistent dataset.

    Treated as an immutable value: pipeline stages return a new store via
    `model_copy(update=...)` rather than editing dictionaries in place.
    `pending` and `problematic` default to empty so the minified
    distribution file loads into the same model.
    """

    metadata: Metadata = Field(..., alias="_metadata")
    devices: DeviceCategories = Field(default_factory=DeviceCategories)
    pending: Dict[str, PendingEntry] = Field(default_factory=dict)
    problematic: Dict[str, PendingEntry] = Field(default_factory=dict)

    model_config = _FROZEN

    def overlapping_identifiers(self) -> Set[str]:
        """Identifiers present in more than one of devices/pending/problematic."""
        devices = self.devices.identifiers()
        pending = set(self.pending)
        problematic = set(self.problematic)
        return (devices & pending) | (devices & problematic) | (pending & problematic)


class WorkGroup(BaseModel):
    """
    Identifiers sharing one simulator display name, processed as a unit.

    Created fresh each run and never persisted. `handle` is the simulator
    UDID once acquired; `metric` is set after a successful lifecycle.
    """

    identifiers: Tuple[str, ...]
    display_name: str
    handle: Optional[str] = None
    metric: Optional[float] = None

    model_config = {"frozen": True}

    @field_validator("identifiers")
    @classmethod
    def _non_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("a work group needs at least one identifier")
        return value


class FailureReason(str, Enum):
    """Why a work group did not produce a metric."""

    NO_SUPPORTED_PROFILE = "NoSupportedProfile"
    PROVISION_FAILED = "ProvisionFailed"
    BOOT_FAILED = "BootFailed"
    PROBE_LAUNCH_FAILED = "ProbeLaunchFailed"
    RESULT_UNAVAILABLE = "ResultUnavailable"
    UNEXPECTED = "Unexpected"


class LifecycleStage(str, Enum):
    UNACQUIRED = "Unacquired"
    ACQUIRED = "Acquired"
    BOOTED = "Booted"
    PROBE_INSTALLED = "ProbeInstalled"
    PROBE_RUNNING = "ProbeRunning"
    RESULT_CAPTURED = "ResultCaptured"
    TORN_DOWN = "TornDown"


# `xcrun simctl list devices -j`


class SimulatorTarget(BaseModel):
    name: str
    handle: str = Field(..., alias="udid")
    state: str
    is_available: bool = Field(False, alias="isAvailable")

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}


class SimulatorTargetList(BaseModel):
    devices: Dict[str, List[SimulatorTarget]] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}


# `xcrun simctl list runtimes -j`


class SupportedDeviceType(BaseModel):
    name: str
    identifier: str

    model_config = {"frozen": True, "extra": "ignore"}


class RuntimeProfile(BaseModel):
    version: str
    identifier: str
    is_available: bool = Field(False, alias="isAvailable")
    supported_device_types: List[SupportedDeviceType] = Field(
        default_factory=list, alias="supportedDeviceTypes"
    )

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @property
    def version_key(self) -> Tuple[int, ...]:
        parts: List[int] = []
        for piece in self.version.split("."):
            parts.append(int(piece) if piece.isdigit() else 0)
        return tuple(parts)


class RuntimeProfileList(BaseModel):
    runtimes: List[RuntimeProfile] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ProbeResult(BaseModel):
    """Contents of the probe's `Documents/output.json`."""

    identifier: str = Field(..., alias="identifiers")
    metric: float = Field(..., alias="bezel", allow_inf_nan=False)

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}


__all__ = [
    "CATEGORIES",
    "Category",
    "DeviceCategories",
    "DeviceRecord",
    "FailureReason",
    "LifecycleStage",
    "Metadata",
    "PendingEntry",
    "ProbeResult",
    "RecordStore",
    "RuntimeProfile",
    "RuntimeProfileList",
    "SimulatorTarget",
    "SimulatorTargetList",
    "SupportedDeviceType",
    "WorkGroup",
]
