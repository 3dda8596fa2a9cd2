from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable

import fitz
import pytest

from core.pdf2picture.config import AppConfig, LimitConfig, RuntimeConfig


def build_pdf(pages: int = 3, label: str = "Page", size: float = 200) -> bytes:
    document = fitz.open()
    for number in range(1, pages + 1):
        page = document.new_page(width=size, height=size)
        page.insert_text((30, size / 2), f"{label} {number}", fontsize=18)
    payload = document.tobytes()
    document.close()
    return payload


def build_config(tmp_path: Path, **runtime_overrides: object) -> AppConfig:
    runtime = RuntimeConfig(
        workspace_root=tmp_path / "work",
        log_dir=tmp_path / "logs",
        limits=LimitConfig(),
    )
    for name, value in runtime_overrides.items():
        setattr(runtime, name, value)
    return AppConfig(runtime=runtime)


def zip_names(payload: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(payload)) as archive:
        return archive.namelist()


def zip_entry(payload: bytes, name: str) -> bytes:
    with zipfile.ZipFile(io.BytesIO(payload)) as archive:
        return archive.read(name)


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return build_config(tmp_path)


@pytest.fixture
def workspace_root(config: AppConfig) -> Path:
    return config.runtime.workspace_root
