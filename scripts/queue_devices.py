"""
Queue device identifiers for measurement.

Adds identifiers to `pending` in the full record file so the next
`bezelgen generate` run picks them up. Identifiers already measured are
skipped; ones sitting in `problematic` move to `pending`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Sequence, Tuple

import typer

from bezelgen.database.serializer import render
from bezelgen.database.store import load_record_store, write_text_atomic
from bezelgen.domain.models import PendingEntry, RecordStore

app = typer.Typer(help="Add device identifiers to the pending queue of the device database.")


def _queue(store: RecordStore, identifiers: Sequence[str], name: str) -> Tuple[RecordStore, List[str]]:
    measured = store.devices.identifiers()
    pending = dict(store.pending)
    problematic = dict(store.problematic)
    skipped: List[str] = []

    for identifier in identifiers:
        if identifier in measured:
            skipped.append(identifier)
            continue
        pending[identifier] = PendingEntry(display_name=name)
        problematic.pop(identifier, None)

    updated = store.model_copy(update={"pending": pending, "problematic": problematic})
    return updated, skipped


@app.command()
def main(
    identifier: List[str] = typer.Option(
        ...,
        "--identifier",
        "-i",
        help="Device identifier to queue (repeatable), e.g. iPhone18,1.",
    ),
    name: str = typer.Option(
        ...,
        "--name",
        "-n",
        help='Simulator display name shared by the identifiers, e.g. "iPhone 17 Pro".',
    ),
    database: Path = typer.Option(
        Path("./apple-device-database.json"),
        "--database",
        "-d",
        help="Path to the full device database file.",
    ),
) -> None:
    """
    Queue identifiers under one simulator display name.
    """
    store = load_record_store(database)
    updated, skipped = _queue(store, identifier, name)
    for ident in skipped:
        typer.echo(f"Skipping {ident}: already measured.", err=True)

    write_text_atomic(database, render(updated, minify=False))
    queued = len(identifier) - len(skipped)
    typer.echo(f"Queued {queued} identifier(s) as '{name}' in {database}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
