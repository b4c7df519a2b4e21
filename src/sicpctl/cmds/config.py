from __future__ import annotations

import typer

from ..common.config import (
    CONFIG_FILE,
    clear_defaults,
    get_default_port,
    get_default_speed,
    set_default_port,
    set_default_speed,
)
from ..common.errors import ConfigError
from ..transport.serial_rs232 import PortConfig

app = typer.Typer(help="Configure sicpctl defaults (saved in ~/.sicpctl/config.toml).")


@app.command("set-port")
def set_port(
    port: str = typer.Argument(..., help="Serial port path, e.g. /dev/ttyUSB0"),
):
    set_default_port(port)
    typer.secho(f"Saved default port: {port}\nConfig file: {CONFIG_FILE}", fg="green")


@app.command("set-speed")
def set_speed(
    speed: int = typer.Argument(..., help="Baud rate: 1200, 9600, 19200, 38400, 57600 or 115200"),
):
    try:
        PortConfig.for_baud(speed)
    except ConfigError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(code=2)
    set_default_speed(speed)
    typer.secho(f"Saved default speed: {speed}\nConfig file: {CONFIG_FILE}", fg="green")


@app.command("show")
def show():
    port = get_default_port()
    speed = get_default_speed()
    if port is None and speed is None:
        typer.secho("No defaults set.", fg="yellow")
        return
    typer.echo(f"default port: {port or '-'}\ndefault speed: {speed or '-'}\nconfig file: {CONFIG_FILE}")


@app.command("clear")
def clear():
    if not clear_defaults():
        typer.secho("No defaults to clear.", fg="yellow")
        raise typer.Exit(code=0)
    typer.secho("Cleared saved defaults.", fg="green")
