"""Reading and writing PostgreSQL wire-protocol message payloads."""

from __future__ import annotations

import struct

_MAX_UINT32 = 0xFFFFFFFF


class ProtocolError(Exception):
    """A message from or to the server is malformed."""


def _as_byte(c: int | str) -> int:
    if isinstance(c, str):
        return ord(c)
    return c


class ReadBuffer:
    """Consumes the fields of a message payload from front to back."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytes(data)
        self._pos = 0

    def __len__(self) -> int:
        return self.remaining()

    def _take(self, n: int) -> bytes:
        if n < 0 or self._pos + n > len(self._data):
            raise ProtocolError(
                f"invalid message format; need {n} bytes, have {self.remaining()}"
            )
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def int32(self) -> int:
        """Read a signed big-endian 32-bit integer."""
        return struct.unpack(">i", self._take(4))[0]

    def oid(self) -> int:
        """Read an unsigned big-endian 32-bit object identifier."""
        return struct.unpack(">I", self._take(4))[0]

    def int16(self) -> int:
        """Read an unsigned big-endian 16-bit integer."""
        return struct.unpack(">H", self._take(2))[0]

    def string(self) -> str:
        """Read a NUL-terminated string."""
        end = self._data.find(b"\0", self._pos)
        if end < 0:
            raise ProtocolError("invalid message format; expected string terminator")
        raw = self._data[self._pos : end]
        self._pos = end + 1
        return raw.decode("utf-8", errors="replace")

    def next(self, n: int) -> bytes:
        """Read the next ``n`` raw bytes."""
        return self._take(n)

    def byte(self) -> int:
        """Read a single byte."""
        return self._take(1)[0]

    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos


class WriteBuffer:
    """Builds one or more length-prefixed messages.

    The first message starts with ``message_type``; a type of 0 marks a
    startup-style packet whose leading type byte the caller drops.
    """

    __slots__ = ("_buf", "_pos")

    def __init__(self, message_type: int | str = 0) -> None:
        self._buf = bytearray((_as_byte(message_type), 0, 0, 0, 0))
        self._pos = 1

    def int32(self, n: int) -> None:
        self._buf += struct.pack(">I", n & 0xFFFFFFFF)

    def int16(self, n: int) -> None:
        self._buf += struct.pack(">H", n & 0xFFFF)

    def string(self, s: str | bytes) -> None:
        if isinstance(s, str):
            s = s.encode("utf-8")
        self._buf += s
        self._buf.append(0)

    def byte(self, c: int | str) -> None:
        self._buf.append(_as_byte(c))

    def bytes(self, v: bytes) -> None:
        self._buf += v

    def _patch_length(self) -> None:
        size = len(self._buf) - self._pos
        if size > _MAX_UINT32:
            raise ProtocolError(f"message too large ({size} > {_MAX_UINT32})")
        struct.pack_into(">I", self._buf, self._pos, size)

    def next(self, c: int | str) -> None:
        """Finish the current message and start a new one of type ``c``."""
        self._patch_length()
        self._pos = len(self._buf) + 1
        self._buf += bytearray((_as_byte(c), 0, 0, 0, 0))

    def wrap(self) -> bytes:
        """Finish the current message and return everything written."""
        self._patch_length()
        return bytes(self._buf)