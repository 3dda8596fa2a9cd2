from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterable

from .errors import ArchiveFailureError


def _write_entries(target: Path | BinaryIO, entries: list[tuple[str, bytes]]) -> None:
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, payload in entries:
            archive.writestr(name, payload)


def build_archive(entries: Iterable[tuple[str, bytes]], destination: Path | None = None) -> bytes:
    """Pack ``(name, payload)`` pairs into a ZIP, preserving their order.

    When ``destination`` is given the archive is written there and read back,
    otherwise it is assembled in memory.
    """

    ordered = list(entries)
    seen: set[str] = set()
    for name, _ in ordered:
        if name in seen:
            raise ArchiveFailureError(f"Duplicate archive entry: {name}")
        seen.add(name)

    try:
        if destination is None:
            buffer = io.BytesIO()
            _write_entries(buffer, ordered)
            return buffer.getvalue()
        _write_entries(destination, ordered)
        return destination.read_bytes()
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ArchiveFailureError("Failed to create ZIP archive") from exc


__all__ = ["build_archive"]
