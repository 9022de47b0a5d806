"""
Supported device list generation.

Reads the minified distribution file and renders `SupportedDeviceList.md`:
one padded markdown table per non-empty category, then an author/project
footer. Tables are padded so the file passes markdownlint's table rules.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Sequence

from bezelgen.database.serializer import format_number, sort_identifiers
from bezelgen.database.store import load_record_store, write_text_atomic
from bezelgen.domain.models import DeviceRecord, RecordStore

DEVICE_HEADERS = ("Device", "Model Identifier", "Bezel Size")


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    widths = [len(header) for header in headers]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"

    return [line(headers), line(["-" * width for width in widths]), *(line(row) for row in rows)]


def _device_table(records: Mapping[str, DeviceRecord]) -> List[str]:
    rows = [
        (
            records[identifier].display_name,
            f"`{identifier}`",
            f"`{format_number(records[identifier].metric)}`",
        )
        for identifier in sort_identifiers(records)
    ]
    return _table(DEVICE_HEADERS, rows)


def build_markdown(store: RecordStore) -> str:
    lines = [
        "# Supported Device List",
        "",
        "Below is the current supported list of devices `BezelKit` can return data for.",
        "",
    ]
    for category, records in store.devices.items():
        if not records:
            continue
        lines.extend([f"## {category}", ""])
        lines.extend(_device_table(records))
        lines.append("")

    metadata = store.metadata
    lines.extend(["---", ""])
    lines.extend(
        _table(
            ("Author", "Project"),
            [(f"[{metadata.author}]({metadata.website})", metadata.project)],
        )
    )
    return "\n".join(lines).strip() + "\n"


def generate_docs(input_path: Path | str, output_path: Path | str) -> Path:
    """Render the markdown list from `input_path` and write it to `output_path`."""
    store = load_record_store(input_path)
    target = Path(output_path)
    write_text_atomic(target, build_markdown(store))
    return target


__all__ = ["build_markdown", "generate_docs"]
