from __future__ import annotations

import hashlib
import logging
import os
import shutil
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import ResourceUnavailableError

logger = logging.getLogger(__name__)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def generate_run_id(prefix: str = "pdf") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def remove_tree(path: Path) -> bool:
    """Delete ``path`` recursively, logging instead of raising on failure."""

    def _log_error(function, failed_path, exc) -> None:  # type: ignore[no-untyped-def]
        logger.warning("Could not remove %s during cleanup: %s", failed_path, exc)

    try:
        shutil.rmtree(path, onexc=_log_error)
    except OSError as exc:
        logger.warning("Cleanup of %s failed: %s", path, exc)
        return False
    return not path.exists()


@contextmanager
def workspace(root: Path, prefix: str, run_id: str) -> Iterator[Path]:
    """Create ``root/<prefix><run_id>`` and always delete it on exit."""

    path = root / f"{prefix}{run_id}"
    try:
        root.mkdir(parents=True, exist_ok=True)
        path.mkdir(mode=0o700, exist_ok=False)
    except OSError as exc:
        raise ResourceUnavailableError("Failed to create temporary directory") from exc
    try:
        yield path
    finally:
        if not remove_tree(path):
            logger.error("Workspace %s was not fully removed", path)


def iter_stale_workspaces(root: Path, prefix: str, older_than_s: float) -> Iterator[Path]:
    if not root.exists():
        return
    threshold = time.time() - older_than_s
    for candidate in sorted(root.iterdir()):
        if not candidate.is_dir() or not candidate.name.startswith(prefix):
            continue
        if candidate.stat().st_mtime <= threshold:
            yield candidate
