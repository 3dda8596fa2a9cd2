from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, dump_config, load_config
from ..core import ConversionService
from ..errors import ConversionError
from ..logging import configure_logging
from ..models import ConversionRequest
from ..utils import iter_stale_workspaces, remove_tree

console = Console()

app = typer.Typer(help="Convert PDF pages into a ZIP of images")


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    configure_logging(logging.DEBUG if verbose else logging.INFO)


@app.command()
def convert(
    file: Path,
    output: Path | None = typer.Option(None, "--output", "-o", help="Destination ZIP path"),
    scale: int = typer.Option(100, "--scale", help="Page scale in percent (10-200)"),
    output_format: str = typer.Option("jpg", "--format", help="jpg or png"),
    quality: int = typer.Option(90, "--quality", help="JPEG quality (10-100)"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    service = ConversionService(cfg)
    if not file.is_file():
        console.print(f"[red]Conversion failed[/red]: {file} does not exist")
        raise typer.Exit(1)
    request = ConversionRequest.create(
        file.read_bytes(),
        scale_percent=scale,
        output_format=output_format,
        jpeg_quality=quality,
        filename=file.name,
    )
    try:
        result = service.convert(request)
    except ConversionError as exc:
        console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    destination = output or file.with_suffix(".zip")
    destination.write_bytes(result.archive)

    table = Table(title=f"Run {result.run_id}")
    table.add_column("Pages")
    table.add_column("Skipped")
    table.add_column("DPI")
    table.add_column("Archive")
    table.add_row(
        f"{len(result.pages)}/{result.page_count}",
        ", ".join(str(index) for index in result.skipped_pages) or "-",
        str(result.density),
        f"{destination} ({result.size_bytes} bytes)",
    )
    console.print(table)


@app.command()
def clean(
    older_than_minutes: int = typer.Option(
        60,
        "--older-than-minutes",
        min=0,
        help="Only remove workspaces older than this many minutes",
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    runtime = cfg.runtime
    removed = 0
    for path in iter_stale_workspaces(runtime.workspace_root, runtime.workspace_prefix, older_than_minutes * 60):
        if remove_tree(path):
            removed += 1
    console.print(f"Removed {removed} leftover workspaces.")


@app.command("show-config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    console.print_json(dump_config(_load_config(config)))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    import uvicorn

    from api.app import create_app

    cfg = _load_config(config)
    uvicorn.run(create_app(cfg), host=host or cfg.api.host, port=port or cfg.api.port)


if __name__ == "__main__":
    app()
