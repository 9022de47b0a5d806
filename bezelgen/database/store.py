"""
Loading and saving the record store.

Both output files are rendered in memory and staged as temp files beside
their targets before either target is replaced (`os.replace`), so a failure
never leaves a half-written record behind.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError

from bezelgen.database.serializer import render
from bezelgen.domain.models import RecordStore
from bezelgen.errors import RecordStoreLoadFailed, RecordStoreWriteFailed
from bezelgen.utils.console import StatusWriter


def load_record_store(path: Path | str) -> RecordStore:
    """
    Read and validate a record file (full or minified).

    Raises
    ------
    RecordStoreLoadFailed
        If the file cannot be read or does not match the expected shape.
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RecordStoreLoadFailed(f"Cannot read record file '{source}': {exc}") from exc
    try:
        return RecordStore.model_validate_json(text)
    except ValidationError as exc:
        raise RecordStoreLoadFailed(f"Invalid record file '{source}': {exc}") from exc


def _stage(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


def write_text_atomic(path: Path, text: str) -> None:
    """Replace `path` with `text` in one step; parent dirs are created."""
    staged = _stage(path, text)
    try:
        os.replace(staged, path)
    except BaseException:
        staged.unlink(missing_ok=True)
        raise


def save_record_store(
    store: RecordStore,
    cache_path: Path | str,
    minified_path: Path | str,
    writer: Optional[StatusWriter] = None,
) -> None:
    """
    Write the full cache file and the minified distribution file.

    Raises
    ------
    RecordStoreWriteFailed
        If either file cannot be written. Neither target is touched when
        staging fails.
    """
    try:
        targets = [
            (Path(cache_path), render(store, minify=False)),
            (Path(minified_path), render(store, minify=True)),
        ]
    except ValueError as exc:
        raise RecordStoreWriteFailed(f"Cannot render record files: {exc}") from exc

    staged: List[Tuple[Path, Path]] = []
    try:
        for target, text in targets:
            staged.append((target, _stage(target, text)))
        for target, tmp_path in staged:
            os.replace(tmp_path, target)
            if writer is not None:
                writer.detail(f"- {target}", indent=6)
    except OSError as exc:
        raise RecordStoreWriteFailed(f"Cannot write record files: {exc}") from exc
    finally:
        for _, tmp_path in staged:
            tmp_path.unlink(missing_ok=True)


__all__ = ["load_record_store", "save_record_store", "write_text_atomic"]
