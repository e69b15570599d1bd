import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from tracing_sync.cli.actions import check, err_console, fix, strip

app = typer.Typer(
    name="tracing-sync",
    help="Tracing Sync CLI: check, add and remove tracing instrumentation on Rust functions.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("check")(check)
app.command("fix")(fix)
app.command("strip")(strip)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log per-file progress to stderr.")] = False,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def main() -> None:
    app()
