"""Tests for the full exchange: selector to response."""

import pytest

from sicpctl.cmds import base
from sicpctl.cmds.base import build_frame, send_and_receive
from sicpctl.common.SICPCommand import FramingMode, encode
from sicpctl.common.command_table import RawPayload, RegisteredCommand
from sicpctl.common.errors import ConfigError, EncodingError, UsageError

ON_FRAME = bytes.fromhex("A6 01 00 00 00 04 01 18 02 B8")


@pytest.fixture
def wired(monkeypatch, fake_port):
    """Patch port opening and configuration; returns the call log."""
    log = {"opened": [], "configured": [], "ports": []}

    def set_reply(reply=b"", **kwargs):
        def fake_open(port, baudrate, timeout_s):
            log["opened"].append((port, baudrate, timeout_s))
            p = fake_port(reply=reply, **kwargs)
            log["ports"].append(p)
            return p

        monkeypatch.setattr(base, "open_serial", fake_open)

    def fake_configure(port, baudrate):
        log["configured"].append(baudrate)

    monkeypatch.setattr(base, "configure_port", fake_configure)
    set_reply()
    log["reply"] = set_reply
    return log


def test_build_frame_registered():
    assert build_frame(RegisteredCommand("ON")) == ON_FRAME


def test_build_frame_raw_legacy():
    assert build_frame(RawPayload(b"\x3D"), FramingMode.LEGACY_NO_PREFIX) == encode(
        b"\x3D", FramingMode.LEGACY_NO_PREFIX
    )


def test_exchange_on(wired):
    reply = encode(b"\x00")
    wired["reply"](reply)
    exchange = send_and_receive("/dev/ttyUSB0", RegisteredCommand("ON"), 9600)
    assert exchange.request == ON_FRAME
    assert exchange.response == reply
    assert exchange.check.valid
    assert wired["opened"] == [("/dev/ttyUSB0", 9600, None)]
    assert wired["configured"] == [9600]
    assert bytes(wired["ports"][0].written) == ON_FRAME
    assert wired["ports"][0].closed


def test_bad_response_checksum_is_advisory(wired):
    wired["reply"](b"\x21\x01\x00\x00")
    exchange = send_and_receive("/dev/ttyUSB0", RegisteredCommand("PIPGET"), 9600, read_timeout_s=0.5)
    assert exchange.response == b"\x21\x01\x00\x00"
    assert not exchange.check.valid


def test_no_response(wired):
    exchange = send_and_receive("/dev/ttyUSB0", RegisteredCommand("OFF"), 9600, read_timeout_s=0.1)
    assert exchange.response == b""
    assert exchange.check is None


def test_unknown_command_opens_nothing(wired):
    with pytest.raises(UsageError):
        send_and_receive("/dev/ttyUSB0", RegisteredCommand("BOGUS"), 9600)
    assert wired["opened"] == []


def test_unsupported_baud_opens_nothing(wired):
    with pytest.raises(ConfigError):
        send_and_receive("/dev/ttyUSB0", RegisteredCommand("ON"), 4800)
    assert wired["opened"] == []


def test_oversized_raw_payload_opens_nothing(wired):
    with pytest.raises(EncodingError):
        send_and_receive("/dev/ttyUSB0", RawPayload(bytes(300)), 9600)
    assert wired["opened"] == []


def test_port_closed_when_configuration_fails(wired, monkeypatch):
    def failing_configure(port, baudrate):
        raise ConfigError("Line configuration failed: EIO")

    monkeypatch.setattr(base, "configure_port", failing_configure)
    with pytest.raises(ConfigError):
        send_and_receive("/dev/ttyUSB0", RegisteredCommand("ON"), 9600)
    port = wired["ports"][0]
    assert port.closed
    assert port.written == b""
