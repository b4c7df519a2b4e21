from __future__ import annotations

import logging
from typing import NoReturn, Optional

import typer

from .cmds import config as config_cmd
from .cmds.base import build_frame, send_and_receive
from .common import SICPCommand as SC
from .common.command_table import COMMANDS, RawPayload, RegisteredCommand, Selector, command_names
from .common.config import get_default_port, get_default_speed
from .common.errors import ConfigError, EncodingError, TransportError, UsageError
from .common.io_utils import hexdump, parse_payload
from .common.logging_setup import setup_logging
from .transport.serial_rs232 import DEFAULT_BAUD, DEFAULT_PORT

app = typer.Typer(help="Send one SICP command to a display over RS232 and print the reply.")
app.add_typer(config_cmd.app, name="config")


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log port setup and raw I/O"),
):
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


def _selector(cmd: Optional[str], raw: Optional[str]) -> Selector:
    if cmd is not None and raw is not None:
        raise UsageError("Use either --cmd or --raw, not both")
    if raw is not None:
        return RawPayload(parse_payload(raw))
    return RegisteredCommand(cmd or "")


def _mode(legacy: bool) -> SC.FramingMode:
    return SC.FramingMode.LEGACY_NO_PREFIX if legacy else SC.FramingMode.STANDARD


def _usage(ctx: typer.Context, err: UsageError) -> NoReturn:
    typer.secho(str(err), fg="yellow", err=True)
    typer.echo(ctx.get_help(), err=True)
    typer.echo("Commands:", err=True)
    for name in command_names():
        typer.echo(f"  {name}", err=True)
    raise typer.Exit(code=0)


def _fail(prefix: str, err: Exception) -> NoReturn:
    typer.secho(f"{prefix}: {err}", fg="red", err=True)
    raise typer.Exit(code=1)


def _print_parsed(frame: bytes, mode: SC.FramingMode) -> None:
    """Print the frame fields when the bytes parse as a SICP frame."""
    try:
        parsed = SC.SICPFrame.parse(frame, mode)
    except ValueError:
        return
    typer.echo("  Decoded:")
    if parsed.prefix:
        typer.echo(f"     Address: {hexdump(parsed.prefix)}")
    typer.echo(f"     Length: {parsed.length}")
    typer.echo(f"     Device ID: 0x{parsed.device_id:02X}")
    typer.echo(f"     Payload: {hexdump(parsed.payload) or '-'}")
    typer.echo(f"     Checksum: 0x{parsed.checksum:02X} ({'ok' if parsed.check.valid else 'bad'})")


@app.command("send")
def send(
    ctx: typer.Context,
    cmd: Optional[str] = typer.Option(None, "--cmd", "-c", help="Command name (see `sicpctl commands`)"),
    raw: Optional[str] = typer.Option(None, "--raw", help="Raw payload, e.g. 'hex:3D' or '\\x18\\x02'"),
    port: Optional[str] = typer.Option(None, help="RS232C port (default: saved port or /dev/ttyUSB0)"),
    speed: Optional[int] = typer.Option(None, help="ttyS speed (default: saved speed or 9600)"),
    timeout: Optional[float] = typer.Option(None, help="Read timeout in seconds (default: wait forever)"),
    legacy: bool = typer.Option(False, help="Use the prefix-less legacy framing"),
):
    """Send one command and print the response bytes."""
    # explicit values win even when falsy
    resolved_port = port if port is not None else (get_default_port() or DEFAULT_PORT)
    resolved_speed = speed if speed is not None else (get_default_speed() or DEFAULT_BAUD)
    mode = _mode(legacy)

    try:
        exchange = send_and_receive(
            port=resolved_port,
            selector=_selector(cmd, raw),
            baudrate=resolved_speed,
            mode=mode,
            read_timeout_s=timeout,
        )
    except UsageError as e:
        _usage(ctx, e)
    except EncodingError as e:
        _fail("Encoding error", e)
    except ConfigError as e:
        _fail("Config error", e)
    except TransportError as e:
        _fail("Serial error", e)

    typer.echo(f"Sent: {hexdump(exchange.request)}")
    typer.echo(f"CSUM: {exchange.request[-1]:02x}")
    typer.echo(f"OUT: {hexdump(exchange.response)}")
    if exchange.check is None:
        typer.secho("No response before timeout.", fg="yellow")
        return
    if not exchange.check.valid:
        typer.secho(
            f"Response checksum mismatch (expected {exchange.check.expected:02X}, got {exchange.check.actual:02X})",
            fg="yellow",
        )
    _print_parsed(exchange.response, mode)


@app.command("encode")
def encode(
    ctx: typer.Context,
    cmd: Optional[str] = typer.Option(None, "--cmd", "-c", help="Command name"),
    raw: Optional[str] = typer.Option(None, "--raw", help="Raw payload spec"),
    legacy: bool = typer.Option(False, help="Use the prefix-less legacy framing"),
):
    """Print the frame a command would send, without opening a port."""
    mode = _mode(legacy)
    try:
        frame = build_frame(_selector(cmd, raw), mode)
    except UsageError as e:
        _usage(ctx, e)
    except EncodingError as e:
        _fail("Encoding error", e)
    typer.echo(hexdump(frame))
    _print_parsed(frame, mode)


@app.command("commands")
def list_commands():
    """List the known command names and their payloads."""
    for name in command_names():
        typer.echo(f"{name:<10} {hexdump(COMMANDS[name])}")


def main():
    app()

if __name__ == "__main__":
    main()
