from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import reduce
from operator import xor
from typing import Optional

from .errors import EncodingError

# Constants
ADDRESS_PREFIX = b"\xA6\x01\x00\x00\x00"
DEVICE_ID = 0x01
LEGACY_EXTRA = 0x00
MAX_LENGTH = 0xFF


class FramingMode(Enum):
    STANDARD = "standard"
    LEGACY_NO_PREFIX = "legacy"


# Bytes counted by the length field on top of the payload
_LENGTH_OFFSET = {
    FramingMode.STANDARD: 2,          # device id + checksum
    FramingMode.LEGACY_NO_PREFIX: 4,
}


def checksum(data: bytes) -> int:
    """XOR-fold of data; 0 for empty input."""
    return reduce(xor, data, 0)


def max_payload_len(mode: FramingMode = FramingMode.STANDARD) -> int:
    return MAX_LENGTH - _LENGTH_OFFSET[mode]


def encode(payload: bytes, mode: FramingMode = FramingMode.STANDARD) -> bytes:
    """Build a complete frame"""
    length = len(payload) + _LENGTH_OFFSET[mode]
    if length > MAX_LENGTH:
        raise EncodingError(
            f"Payload of {len(payload)} bytes exceeds {max_payload_len(mode)} bytes for {mode.value} framing"
        )

    if mode is FramingMode.STANDARD:
        body = ADDRESS_PREFIX + bytes((length, DEVICE_ID)) + payload
    else:
        body = bytes((length, DEVICE_ID, LEGACY_EXTRA)) + payload
    return body + bytes((checksum(body),))


@dataclass(frozen=True)
class FrameCheck:
    valid: bool
    expected: Optional[int] = None
    actual: Optional[int] = None

    def __bool__(self) -> bool:
        return self.valid


def validate(frame: bytes) -> FrameCheck:
    """Recompute the trailing checksum. A mismatch is reported, never raised."""
    if not frame:
        return FrameCheck(valid=False)
    expected = checksum(frame[:-1])
    actual = frame[-1]
    return FrameCheck(valid=expected == actual, expected=expected, actual=actual)


class SICPFrame:
    """Parsed view of a frame produced by encode()."""

    def __init__(self, buffer: bytes, mode: FramingMode = FramingMode.STANDARD):
        self.mode = mode
        if mode is FramingMode.STANDARD:
            header_len = len(ADDRESS_PREFIX) + 2  # prefix + length + device id
            if len(buffer) < header_len + 1:
                raise ValueError("Frame too short")
            self.prefix = bytes(buffer[:len(ADDRESS_PREFIX)])
            self.length = buffer[len(ADDRESS_PREFIX)]
            self.device_id = buffer[len(ADDRESS_PREFIX) + 1]
            self.extra = None
        else:
            header_len = 3  # length + device id + extra
            if len(buffer) < header_len + 1:
                raise ValueError("Frame too short")
            self.prefix = b""
            self.length = buffer[0]
            self.device_id = buffer[1]
            self.extra = buffer[2]

        self.payload = bytes(buffer[header_len:-1])
        self.checksum = buffer[-1]
        self.check = validate(bytes(buffer))

        if self.length != len(self.payload) + _LENGTH_OFFSET[mode]:
            raise ValueError("Length mismatch")

    @classmethod
    def parse(cls, buffer: bytes, mode: FramingMode = FramingMode.STANDARD) -> "SICPFrame":
        return cls(buffer, mode)

    def validate_header(self) -> bool:
        if self.mode is FramingMode.STANDARD:
            return self.prefix == ADDRESS_PREFIX and self.device_id == DEVICE_ID
        return self.device_id == DEVICE_ID and self.extra == LEGACY_EXTRA

    def __repr__(self) -> str:
        return (f"SICPFrame(mode={self.mode.value}, length={self.length}, "
                f"payload={self.payload.hex(' ')}, checksum=0x{self.checksum:02X})")
