"""Helpers for writing JSON files and creating directories."""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any


def ensure_dir(path: str | os.PathLike[str]) -> None:
    """Create a directory and any missing parents; existing ones are fine."""
    Path(path).mkdir(parents=True, exist_ok=True)


def write_json(path: str | os.PathLike[str], data: Any) -> None:
    """Write ``data`` as indented JSON, creating the parent directory first."""
    target = Path(path)
    ensure_dir(target.parent)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, ensure_ascii=False)
        handle.write("\n")


def batch_write_json(writes: Iterable[tuple[str | os.PathLike[str], Any]]) -> None:
    """Write several JSON files in parallel.

    ``writes`` holds ``(path, data)`` pairs. All target directories are
    created before any file is written; the first failure is raised.
    """
    pending = [(Path(path), data) for path, data in writes]
    if not pending:
        return

    for directory in {path.parent for path, _ in pending}:
        ensure_dir(directory)

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(write_json, path, data) for path, data in pending]
        errors = [future.exception() for future in futures]

    for error in errors:
        if error is not None:
            raise error