"""Loading inventory snapshots from JSON files."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console

console = Console()


def load_model(file: Path, model: type[BaseModel]) -> BaseModel:
    """Read and validate a JSON file, exiting with code 1 on failure."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)

    try:
        return model.model_validate(json.loads(file.read_text()))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {file}: {e}[/red]")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid inventory in {file}:[/red]\n{e}")
        raise typer.Exit(1)
