"""
Record-store package for bezelgen.

Loading/saving, deterministic rendering, pending resolution and
reconciliation of the device database. Pure data handling; no subprocesses.
"""

from bezelgen.database.reconciler import category_for, clean, merge_results, reconcile
from bezelgen.database.resolver import extract_pending, group_pending, resolve_work_groups
from bezelgen.database.serializer import device_sort_key, format_number, render, sort_identifiers
from bezelgen.database.store import load_record_store, save_record_store

__all__ = [
    "category_for",
    "clean",
    "device_sort_key",
    "extract_pending",
    "format_number",
    "group_pending",
    "load_record_store",
    "merge_results",
    "reconcile",
    "render",
    "resolve_work_groups",
    "save_record_store",
    "sort_identifiers",
]
