from __future__ import annotations

import logging
import termios
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Union

import serial

from ..common.errors import ConfigError, TransportError

log = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"
DEFAULT_BAUD = 9600
DEFAULT_READ_TIMEOUT_S: Optional[float] = None  # block until the display answers
RESPONSE_SIZE = 32

__all__ = [
    "BaudRate",
    "PortConfig",
    "apply_port_config",
    "configure_port",
    "open_serial",
    "flush_serial",
    "transact",
    "DEFAULT_PORT",
    "DEFAULT_BAUD",
    "DEFAULT_READ_TIMEOUT_S",
    "RESPONSE_SIZE",
]

# attribute list layout returned by termios.tcgetattr
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)

# Not every platform defines these
CBAUD = getattr(termios, "CBAUD", 0)
CRTSCTS = getattr(termios, "CRTSCTS", 0)


class BaudRate(IntEnum):
    B1200 = 1200
    B9600 = 9600
    B19200 = 19200
    B38400 = 38400
    B57600 = 57600
    B115200 = 115200

    @property
    def speed(self) -> int:
        """termios speed constant for this rate."""
        return getattr(termios, self.name)


@dataclass(frozen=True)
class PortConfig:
    """Line settings for one exchange. Only the baud rate varies."""
    baud_rate: BaudRate
    data_bits: int = 8
    parity: str = serial.PARITY_NONE
    stop_bits: int = 1
    local_mode: bool = True
    receiver_enabled: bool = True
    raw_mode: bool = True
    hardware_flow_control: bool = False
    ignore_parity_errors: bool = True

    @classmethod
    def for_baud(cls, baudrate: int) -> "PortConfig":
        try:
            rate = BaudRate(baudrate)
        except ValueError:
            allowed = ", ".join(str(int(b)) for b in BaudRate)
            raise ConfigError(f"Unknown speed: {baudrate} (supported: {allowed})") from None
        return cls(baud_rate=rate)


def apply_port_config(attrs: List, config: PortConfig) -> List:
    """Return a copy of a tcgetattr() attribute list with config applied."""
    iflag, oflag, cflag, lflag, _ispeed, _ospeed, cc = attrs
    cc = list(cc)

    cflag &= ~(CBAUD | termios.PARENB | termios.CSTOPB | termios.CSIZE)
    if not config.hardware_flow_control:
        cflag &= ~CRTSCTS
    cflag |= termios.CS8
    if config.local_mode:
        cflag |= termios.CLOCAL
    if config.receiver_enabled:
        cflag |= termios.CREAD
    cflag |= config.baud_rate.speed

    if config.ignore_parity_errors:
        iflag |= termios.IGNPAR

    if config.raw_mode:
        iflag &= ~(termios.INLCR | termios.IGNCR | termios.ICRNL | termios.IGNBRK
                   | termios.INPCK | termios.ISTRIP | termios.IXON | termios.IXOFF)
        oflag &= ~(termios.OPOST | termios.ONLCR | termios.OCRNL)
        lflag &= ~(termios.ICANON | termios.ECHO | termios.ECHOE | termios.ECHOK
                   | termios.ECHONL | termios.ISIG | termios.IEXTEN)
        cc[termios.VMIN] = 1
        cc[termios.VTIME] = 0

    # tcsetattr() applies ispeed/ospeed after cflag, so both must agree
    speed = config.baud_rate.speed
    return [iflag, oflag, cflag, lflag, speed, speed, cc]


def _fileno(port: Union[int, serial.Serial]) -> int:
    if isinstance(port, int):
        return port
    try:
        return port.fileno()
    except (serial.SerialException, OSError, AttributeError) as e:
        raise ConfigError(f"Port has no usable file descriptor: {e}") from e


def configure_port(port: Union[int, serial.Serial], baudrate: int) -> PortConfig:
    """Flush the port, then switch it to raw 8-N-1 at baudrate.

    Runs on every exchange; applying the same settings twice is harmless.
    """
    config = PortConfig.for_baud(baudrate)
    fd = _fileno(port)
    try:
        termios.tcflush(fd, termios.TCIOFLUSH)
        attrs = termios.tcgetattr(fd)
        termios.tcsetattr(fd, termios.TCSANOW, apply_port_config(attrs, config))
    except (termios.error, OSError) as e:
        raise ConfigError(f"Line configuration failed: {e}") from e
    log.debug("fd %d configured: %d 8N1 raw, no flow control", fd, config.baud_rate)
    return config


# === Serial port management ===

def open_serial(port: str, baudrate: int = DEFAULT_BAUD, timeout_s: Optional[float] = DEFAULT_READ_TIMEOUT_S) -> serial.Serial:
    try:
        ser = serial.Serial(
            port,
            baudrate=baudrate,
            timeout=timeout_s,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            xonxoff=False,
            rtscts=False,
            dsrdtr=False,
            exclusive=True,
        )
    except (serial.SerialException, OSError, ValueError) as e:
        raise TransportError(f"Cannot open {port}: {e}") from e
    try:
        flush_serial(ser)
    except TransportError:
        ser.close()
        raise
    return ser


def flush_serial(ser: serial.Serial) -> None:
    """Flush input/output buffers."""
    try:
        ser.reset_input_buffer()
        ser.reset_output_buffer()
    except (serial.SerialException, OSError) as e:
        raise TransportError(f"Flush failed: {e}") from e


# === Single exchange ===

def transact(ser: serial.Serial, frame: bytes, response_size: int = RESPONSE_SIZE) -> bytes:
    """Write one frame, read one bounded response.

    The read waits for the first byte (forever when the port has no timeout)
    and then takes whatever else is already buffered, up to response_size.
    Together the two calls stand in for a single read(2) on a VMIN=1 tty.
    An empty result means the read timed out.
    """
    try:
        written = ser.write(frame)
        ser.flush()
    except (serial.SerialException, OSError) as e:
        raise TransportError(f"Write failed: {e}") from e
    if written != len(frame):
        raise TransportError(f"Short write: {written} of {len(frame)} bytes")
    log.debug("[TX] %s", frame.hex(" "))

    try:
        response = ser.read(1)
        if response:
            pending = min(ser.in_waiting, response_size - 1)
            if pending:
                response += ser.read(pending)
    except (serial.SerialException, OSError) as e:
        raise TransportError(f"Read failed: {e}") from e
    log.debug("[RX] %s", bytes(response).hex(" "))
    return bytes(response)
