"""CLI entry point."""

import logging

import typer

from segmap.cli.map_commands import app as map_app
from segmap.cli.segmentation_commands import app as segmentation_app
from segmap.config import settings

app = typer.Typer(
    name="segmap",
    help="Zone reachability and security topology for virtualization clusters.",
    no_args_is_help=True,
)

app.add_typer(map_app, name="map", help="Reachability matrix and topology graph")
app.add_typer(segmentation_app, name="segmentation", help="Micro-segmentation readiness")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
