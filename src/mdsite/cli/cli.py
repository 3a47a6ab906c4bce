"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdsite.cli.commands import build_cmd, check_cmd, init_cmd, list_cmd, watch_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown content collections to site views")

app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="list")(list_cmd)
app.command(name="init")(init_cmd)
app.command(name="watch")(watch_cmd)
