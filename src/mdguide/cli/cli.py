"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdguide.cli.commands import build_cmd, strings_cmd


app = typer.Typer(name="mdguide", no_args_is_help=True, help="Localized documentation guide builder")

app.command(name="build")(build_cmd)
app.command(name="strings")(strings_cmd)
