from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple, Union

from .errors import UsageError

__all__ = [
    "COMMANDS",
    "RegisteredCommand",
    "RawPayload",
    "Selector",
    "lookup",
    "command_names",
    "resolve_payload",
]

# Bare payloads: operation code + operands. Prefix, length, device id and
# checksum are added by the frame codec.
_TABLE = {
    "ON":      b"\x18\x02",
    "OFF":     b"\x18\x01",
    "PIPOFF":  b"\x3C\x00\x00\x00\x00",
    "PIPBL":   b"\x3C\x01\x00\x00\x00",
    "PIPTL":   b"\x3C\x01\x01\x00\x00",
    "PIPTR":   b"\x3C\x01\x02\x00\x00",
    "PIPBR":   b"\x3C\x01\x03\x00\x00",
    "PIPGET":  b"\x3D",
    "PICNORM": b"\x3A\x00",
    "PICCUST": b"\x3A\x01",
    "PICREAL": b"\x3A\x02",
    "PICFULL": b"\x3A\x03",
    "PIC219":  b"\x3A\x04",
    "PICDYN":  b"\x3A\x05",
    "M-GAME":  b"\x32\x64\x64\x64\x5A\x64\x00\x03",
    "M-OFF":   b"\x32\x5F\x32\x32\x32\x32\x00\x03",
    "T-USER":  b"\x34\x00",
    "T-NATU":  b"\x34\x01",
    "T-3000":  b"\x34\x0D",
    "T-6500":  b"\x34\x06",
    "T-10000": b"\x34\x09",
}
_TABLE.update({f"VOL{level}": bytes((0x44, level)) for level in range(0, 101, 10)})

COMMANDS: Mapping[str, bytes] = MappingProxyType(_TABLE)
del _TABLE


@dataclass(frozen=True)
class RegisteredCommand:
    name: str


@dataclass(frozen=True)
class RawPayload:
    """Payload given by the caller, sent as-is without a table lookup."""
    data: bytes


Selector = Union[RegisteredCommand, RawPayload]


def lookup(name: str) -> Tuple[bytes, bool]:
    if not name:
        return b"", False
    payload = COMMANDS.get(name)
    if payload is None:
        return b"", False
    return payload, True


def command_names() -> List[str]:
    return sorted(COMMANDS)


def resolve_payload(selector: Selector) -> bytes:
    if isinstance(selector, RawPayload):
        return bytes(selector.data)
    if not selector.name:
        raise UsageError("No command given")
    payload, found = lookup(selector.name)
    if not found:
        raise UsageError(f"Unknown command: {selector.name!r}")
    return payload
