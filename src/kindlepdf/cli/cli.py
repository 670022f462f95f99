"""CLI entrypoint: Typer app definition and command registration"""

import typer

from kindlepdf.cli.commands import config_cmd, html_cmd, resolve_cmd, send_cmd


app = typer.Typer(name="kindlepdf", no_args_is_help=True, help="Send Obsidian notes to a Kindle as PDF")

app.command(name="send")(send_cmd)
app.command(name="resolve")(resolve_cmd)
app.command(name="html")(html_cmd)
app.command(name="config")(config_cmd)
