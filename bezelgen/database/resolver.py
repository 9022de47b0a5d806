"""
Pending resolver: which identifiers still need measuring, grouped by
simulator display name.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Mapping

from bezelgen.database.serializer import device_sort_key
from bezelgen.domain.models import PendingEntry, RecordStore, WorkGroup


def extract_pending(store: RecordStore) -> Dict[str, PendingEntry]:
    """
    Combine `problematic` and `pending`, dropping anything already measured.

    A `pending` entry wins over a stale `problematic` entry for the same
    identifier. Identifiers present in any `devices` category are skipped,
    so a manual edit that adds a device also retires its problematic entry.
    """
    combined: Dict[str, PendingEntry] = dict(store.problematic)
    combined.update(store.pending)
    measured = store.devices.identifiers()
    return {ident: entry for ident, entry in combined.items() if ident not in measured}


def group_pending(pending: Mapping[str, PendingEntry]) -> List[WorkGroup]:
    """
    One work group per display name.

    Connectivity variants of one model (e.g. iPad17,1 / iPad17,2) share a
    simulator and are measured once. Identifiers within a group are sorted
    lexicographically; groups are ordered by their first identifier's model
    number, then display name.
    """
    by_name: Dict[str, List[str]] = defaultdict(list)
    for identifier, entry in pending.items():
        by_name[entry.display_name].append(identifier)

    groups = [
        WorkGroup(identifiers=tuple(sorted(identifiers)), display_name=name)
        for name, identifiers in by_name.items()
    ]
    groups.sort(
        key=lambda group: (
            device_sort_key(group.identifiers[0]),
            group.identifiers[0],
            group.display_name,
        )
    )
    return groups


def resolve_work_groups(store: RecordStore) -> List[WorkGroup]:
    """Pending work for this run; an empty list means nothing to do."""
    return group_pending(extract_pending(store))


__all__ = ["extract_pending", "group_pending", "resolve_work_groups"]
