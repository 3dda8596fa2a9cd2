import json
from pathlib import Path

from core.pdf2picture.config import AppConfig, dump_config, load_config
from core.settings import _read_settings


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config.runtime.max_file_size_mb == 10
    assert config.runtime.limits.max_pages == 500
    assert config.cors.allow_methods == ("POST", "OPTIONS")


def test_load_config_reads_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[runtime]",
                f'workspace_root = "{(tmp_path / "work").as_posix()}"',
                'log_dir = ""',
                "max_file_size_mb = 5",
                "parallelism = 0",
                "[runtime.limits]",
                "max_pages = 20",
                "[render]",
                "background = [0, 0, 0]",
                "[cors]",
                'allow_origins = "http://localhost:5173"',
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.runtime.workspace_root == tmp_path / "work"
    assert config.runtime.log_dir is None
    assert config.runtime.max_file_size_mb == 5
    assert config.runtime.max_file_size_bytes == 5 * 1024 * 1024
    assert config.runtime.parallelism == 1
    assert config.runtime.limits.max_pages == 20
    assert config.render.background == (0, 0, 0)
    assert config.cors.allow_origins == ("http://localhost:5173",)


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["runtime"]["archive_name"] == "pdf-images.zip"
    assert payload["cors"]["allow_headers"] == ["Content-Type"]


def test_settings_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PDF2PIC_CONFIG_PATH", str(tmp_path / "custom.toml"))
    monkeypatch.setenv("PDF2PIC_MAX_FILE_SIZE_MB", "3")
    monkeypatch.setenv("PDF2PIC_ALLOWED_ORIGINS", "https://a.example, https://b.example")
    settings = _read_settings()
    assert settings.config_path == tmp_path / "custom.toml"
    assert settings.max_file_size_mb == 3
    assert settings.allowed_origins == ("https://a.example", "https://b.example")


def test_settings_ignore_invalid_values(monkeypatch) -> None:
    monkeypatch.delenv("PDF2PIC_CONFIG_PATH", raising=False)
    monkeypatch.setenv("PDF2PIC_MAX_FILE_SIZE_MB", "lots")
    monkeypatch.setenv("PDF2PIC_ALLOWED_ORIGINS", " , ")
    settings = _read_settings()
    assert settings.max_file_size_mb is None
    assert settings.allowed_origins is None
