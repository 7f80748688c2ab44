import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console

from clinic.config import AppConfig, StorageAdapter
from clinic.domain.exceptions import ClinicError, ConfigError
from clinic.logic.results import ResultView
from clinic.logic.service import ClinicService
from clinic.render import render_result
from clinic.storage.factory import build_storage

console = Console()
app = typer.Typer(add_completion=False, no_args_is_help=True)


def _load_config() -> AppConfig:
    try:
        return AppConfig()
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "settings"
        raise ConfigError(f"Invalid configuration for {field}: {error['msg']}") from exc


def _build_service(data_file: Optional[Path], in_memory: bool) -> ClinicService:
    config = _load_config()
    if data_file is not None:
        config = config.model_copy(update={"data_file": data_file})
    if in_memory:
        config = config.model_copy(update={"storage": StorageAdapter.MEMORY})

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    return ClinicService(build_storage(config))


@app.command("repl")
def repl(
    data_file: Optional[Path] = typer.Option(None, help="JSON file holding the roster."),
    in_memory: bool = typer.Option(False, help="Keep the roster in memory only."),
) -> None:
    """Read commands interactively until ``exit``."""
    try:
        service = _build_service(data_file, in_memory)
    except ClinicError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    console.print('Welcome! Type "help" to see the available commands.', style="bold")
    while True:
        try:
            line = console.input("[bold cyan]> [/bold cyan]")
        except EOFError:
            break
        if not line.strip():
            continue

        try:
            result = service.execute(line)
        except ClinicError as exc:
            console.print(str(exc), style="red", markup=False)
            continue

        render_result(console, result)
        if result.view is ResultView.EXIT:
            break


@app.command("run")
def run(
    command: str = typer.Argument(..., help='Command to execute, e.g. "filter sd/2024-08-30 ed/2024-11-30".'),
    data_file: Optional[Path] = typer.Option(None, help="JSON file holding the roster."),
    in_memory: bool = typer.Option(False, help="Keep the roster in memory only."),
) -> None:
    """Execute a single command and exit."""
    try:
        service = _build_service(data_file, in_memory)
        result = service.execute(command)
    except ClinicError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    render_result(console, result)


if __name__ == "__main__":
    app()
