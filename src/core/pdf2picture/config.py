from __future__ import annotations

import json
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from ..constraint import DEFAULT_CONFIG_PATH, WORKSPACE_PREFIX


DEFAULT_ORIGIN = "https://pdf2picture.netlify.app"


@dataclass(slots=True)
class LimitConfig:
    max_pages: int = 500


@dataclass(slots=True)
class RuntimeConfig:
    workspace_root: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    workspace_prefix: str = WORKSPACE_PREFIX
    log_dir: Path | None = Path("logs")
    log_file: str = "conversions.jsonl"
    max_file_size_mb: int = 10
    parallelism: int = 1
    archive_name: str = "pdf-images.zip"
    limits: LimitConfig = field(default_factory=LimitConfig)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass(slots=True)
class RenderConfig:
    annotations: bool = True
    background: tuple[int, int, int] = (255, 255, 255)


@dataclass(slots=True)
class CORSConfig:
    allow_origins: tuple[str, ...] = (DEFAULT_ORIGIN,)
    allow_methods: tuple[str, ...] = ("POST", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type",)


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else None


def _build_limits(data: Mapping[str, object] | None) -> LimitConfig:
    if not data:
        return LimitConfig()
    return LimitConfig(max_pages=int(data.get("max_pages", 500)))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    defaults = RuntimeConfig()
    workspace_root = data.get("workspace_root")
    log_dir = data.get("log_dir", str(defaults.log_dir))
    return RuntimeConfig(
        workspace_root=Path(str(workspace_root)) if workspace_root else defaults.workspace_root,
        workspace_prefix=str(data.get("workspace_prefix", WORKSPACE_PREFIX)),
        log_dir=Path(str(log_dir)) if log_dir else None,
        log_file=str(data.get("log_file", "conversions.jsonl")),
        max_file_size_mb=int(data.get("max_file_size_mb", 10)),
        parallelism=max(1, int(data.get("parallelism", 1))),
        archive_name=str(data.get("archive_name", "pdf-images.zip")),
        limits=_build_limits(_section(data, "limits")),
    )


def _build_render(data: Mapping[str, object] | None) -> RenderConfig:
    if not data:
        return RenderConfig()
    background = data.get("background", (255, 255, 255))
    if not isinstance(background, Iterable) or isinstance(background, str):
        raise TypeError(f"Unsupported background configuration: {background!r}")
    red, green, blue = (int(channel) for channel in background)
    return RenderConfig(
        annotations=bool(data.get("annotations", True)),
        background=(red, green, blue),
    )


def _tuple_of_strings(value: object | None, default: Iterable[str]) -> tuple[str, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    raise TypeError(f"Unsupported list configuration: {value!r}")


def _build_cors(data: Mapping[str, object] | None) -> CORSConfig:
    if not data:
        return CORSConfig()
    defaults = CORSConfig()
    return CORSConfig(
        allow_origins=_tuple_of_strings(data.get("allow_origins"), defaults.allow_origins),
        allow_methods=_tuple_of_strings(data.get("allow_methods"), defaults.allow_methods),
        allow_headers=_tuple_of_strings(data.get("allow_headers"), defaults.allow_headers),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    return AppConfig(
        runtime=_build_runtime(_section(raw, "runtime")),
        render=_build_render(_section(raw, "render")),
        cors=_build_cors(_section(raw, "cors")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    runtime = config.runtime
    payload = {
        "runtime": {
            "workspace_root": str(runtime.workspace_root),
            "workspace_prefix": runtime.workspace_prefix,
            "log_dir": str(runtime.log_dir) if runtime.log_dir else None,
            "log_file": runtime.log_file,
            "max_file_size_mb": runtime.max_file_size_mb,
            "parallelism": runtime.parallelism,
            "archive_name": runtime.archive_name,
            "limits": {
                "max_pages": runtime.limits.max_pages,
            },
        },
        "render": {
            "annotations": config.render.annotations,
            "background": list(config.render.background),
        },
        "cors": {
            "allow_origins": list(config.cors.allow_origins),
            "allow_methods": list(config.cors.allow_methods),
            "allow_headers": list(config.cors.allow_headers),
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "APIConfig",
    "AppConfig",
    "CORSConfig",
    "LimitConfig",
    "RenderConfig",
    "RuntimeConfig",
    "dump_config",
    "load_config",
]
