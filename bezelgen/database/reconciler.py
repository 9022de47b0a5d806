"""
Reconciler: folds a finished batch back into the record store.

Every function returns a new `RecordStore`; the input is never modified.
After `reconcile`, devices / pending / problematic are pairwise disjoint.
"""

from __future__ import annotations

from typing import Dict, Iterable

from bezelgen.domain.models import (
    CATEGORIES,
    Category,
    DeviceCategories,
    DeviceRecord,
    PendingEntry,
    RecordStore,
    WorkGroup,
)


def category_for(display_name: str) -> Category:
    """
    Category from the first space-delimited word of the display name.

    "iPad ..." and "iPod ..." map to themselves; anything else is "iPhone".
    """
    token = display_name.split(" ", 1)[0]
    if token == "iPad":
        return "iPad"
    if token == "iPod":
        return "iPod"
    return "iPhone"


def merge_results(store: RecordStore, processed: Iterable[WorkGroup]) -> RecordStore:
    """Write each group's metric under every one of its identifiers."""
    sections: Dict[str, Dict[str, DeviceRecord]] = {
        category: dict(records) for category, records in store.devices.items()
    }
    for group in processed:
        if group.metric is None:
            continue
        category = category_for(group.display_name)
        record = DeviceRecord(metric=group.metric, display_name=group.display_name)
        for identifier in group.identifiers:
            for other in CATEGORIES:
                if other != category:
                    sections[other].pop(identifier, None)
            sections[category][identifier] = record

    return store.model_copy(update={"devices": DeviceCategories(**sections)})


def clean(store: RecordStore, failed: Iterable[WorkGroup]) -> RecordStore:
    """
    Empty `pending`, file failures under `problematic`, drop resolved ones.

    Existing problematic entries keep their metadata; anything now present
    in `devices` leaves `problematic`.
    """
    problematic: Dict[str, PendingEntry] = dict(store.problematic)
    for group in failed:
        for identifier in group.identifiers:
            if identifier not in problematic:
                problematic[identifier] = PendingEntry(display_name=group.display_name)

    measured = store.devices.identifiers()
    problematic = {ident: entry for ident, entry in problematic.items() if ident not in measured}
    return store.model_copy(update={"pending": {}, "problematic": problematic})


def reconcile(
    store: RecordStore,
    processed: Iterable[WorkGroup],
    failed: Iterable[WorkGroup],
) -> RecordStore:
    return clean(merge_results(store, processed), failed)


__all__ = ["category_for", "clean", "merge_results", "reconcile"]
