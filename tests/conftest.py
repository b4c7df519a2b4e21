from __future__ import annotations

import pytest
import serial

from sicpctl.common import config as config_mod


class FakePort:
    """In-memory stand-in for serial.Serial."""

    def __init__(self, reply: bytes = b"", short_by: int = 0, fail_write: bool = False, fail_read: bool = False):
        self.rx = bytearray(reply)
        self.written = bytearray()
        self.short_by = short_by
        self.fail_write = fail_write
        self.fail_read = fail_read
        self.reads = 0
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.fail_write:
            raise serial.SerialException("write failed: device unplugged")
        n = len(data) - self.short_by
        self.written += data[:n]
        return n

    def flush(self) -> None:
        pass

    def read(self, size: int = 1) -> bytes:
        if self.fail_read:
            raise OSError(5, "Input/output error")
        self.reads += 1
        chunk = bytes(self.rx[:size])
        del self.rx[:size]
        return chunk

    @property
    def in_waiting(self) -> int:
        return len(self.rx)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def fake_port():
    return FakePort


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep saved defaults out of the real home directory."""
    path = tmp_path / "config.toml"
    monkeypatch.setattr(config_mod, "CONFIG_FILE", path)
    return path
