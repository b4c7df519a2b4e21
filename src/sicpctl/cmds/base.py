from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..common import SICPCommand as SC
from ..common.command_table import Selector, resolve_payload
from ..transport.serial_rs232 import (
    DEFAULT_READ_TIMEOUT_S,
    PortConfig,
    configure_port,
    open_serial,
    transact,
)

log = logging.getLogger(__name__)

__all__ = ["Exchange", "build_frame", "send_and_receive"]


@dataclass(frozen=True)
class Exchange:
    request: bytes
    response: bytes
    check: Optional[SC.FrameCheck]


def build_frame(selector: Selector, mode: SC.FramingMode = SC.FramingMode.STANDARD) -> bytes:
    """Resolve a selector and encode it. No I/O."""
    return SC.encode(resolve_payload(selector), mode)


def send_and_receive(
    port: str,
    selector: Selector,
    baudrate: int,
    mode: SC.FramingMode = SC.FramingMode.STANDARD,
    read_timeout_s: Optional[float] = DEFAULT_READ_TIMEOUT_S,
) -> Exchange:
    """Run one request/response exchange with the display on `port`.

    Usage, encoding and baud-rate problems are raised before the port is
    opened. The response checksum is checked but never enforced.
    """
    frame = build_frame(selector, mode)
    PortConfig.for_baud(baudrate)

    with open_serial(port, baudrate=baudrate, timeout_s=read_timeout_s) as ser:
        log.debug("Connected to %s @ %d", port, baudrate)
        configure_port(ser, baudrate)
        response = transact(ser, frame)

    check = SC.validate(response) if response else None
    if check is not None and not check.valid:
        log.info("Response checksum mismatch: expected 0x%02X, got 0x%02X", check.expected, check.actual)
    return Exchange(request=frame, response=response, check=check)
