from __future__ import annotations

import base64
import binascii
import codecs
import re
from typing import Optional

from .errors import UsageError

__all__ = [
    "hexdump",
    "PayloadSpecError",
    "parse_payload",
]


def hexdump(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


_HEX_SPEC = re.compile(r"(?:0[xX])?(?:[0-9a-fA-F]{2}[\s_]*)+")


def _looks_like_hex(s: str) -> bool:
    return _HEX_SPEC.fullmatch(s.strip()) is not None


class PayloadSpecError(UsageError):
    pass


def _from_hex(text: str) -> bytes:
    cleaned = re.sub(r"[\s_]+", "", text).replace("0x", "").replace("0X", "")
    try:
        return bytes.fromhex(cleaned)
    except ValueError as e:
        raise PayloadSpecError(f"Invalid hex payload: {e}") from e


def _from_escaped(text: str) -> bytes:
    # latin-1 keeps \xNN escapes one byte each
    try:
        return codecs.decode(text, "unicode_escape").encode("latin-1")
    except (UnicodeDecodeError, UnicodeEncodeError) as e:
        raise PayloadSpecError(f"Invalid escaped payload: {e}") from e


def parse_payload(spec: Optional[str]) -> bytes:
    """Turn a user-supplied raw payload spec into bytes.

    Accepted forms:
      hex:3D / hex:18 02      explicit hex
      b64:GAI= / base64:...   base64
      esc:\\x18\\x02          escaped byte string
      18 02 / 0x1802          bare even-length hex
      \\x18\\x02              anything else is read as an escaped byte string
    """
    if spec is None or spec == "":
        raise PayloadSpecError("Empty payload spec")

    prefix, colon, rest = spec.partition(":")
    if colon:
        key = prefix.lower()
        if key == "hex":
            return _from_hex(rest)
        elif key in ("esc", "escaped"):
            return _from_escaped(rest)
        elif key in ("base64", "b64"):
            try:
                return base64.b64decode(rest, validate=True)
            except binascii.Error as e:
                raise PayloadSpecError(f"Invalid base64 payload: {e}") from e
        else:
            raise PayloadSpecError("Unknown payload prefix. Use hex:, esc:, or base64:.")

    if _looks_like_hex(spec):
        return _from_hex(spec)
    return _from_escaped(spec)
