"""One-dimensional PostgreSQL arrays of booleans, bytea, numbers and text."""

from __future__ import annotations

import math
import re
import struct
from decimal import Decimal
from typing import Callable

from pgwire.arraytext import (
    ArrayError,
    parse_bytea,
    quote_array_element,
    scan_linear_array,
)

_INT_RE = re.compile(rb"[+-]?[0-9]+")
_FLOAT_RE = re.compile(rb"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOAT_RE = re.compile(rb"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

_INT_LIMITS = {
    64: (-(1 << 63), (1 << 63) - 1),
    32: (-(1 << 31), (1 << 31) - 1),
}


def _quote(raw: bytes | None) -> str:
    text = (raw or b"").decode("utf-8", errors="replace")
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _to_float32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


def _fixed_notation(text: str) -> str:
    """Render a decimal number without an exponent and without trailing zeros."""
    s = format(Decimal(text), "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _format_special(x: float) -> str | None:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    return None


def _format_float64(x: float) -> str:
    x = float(x)
    special = _format_special(x)
    if special is not None:
        return special
    return _fixed_notation(repr(x))


def _format_float32(x: float) -> str:
    try:
        f32 = _to_float32(float(x))
    except OverflowError:
        f32 = math.copysign(math.inf, float(x))
    special = _format_special(f32)
    if special is not None:
        return special
    for precision in range(1, 10):
        text = format(f32, f".{precision}g")
        if _to_float32(float(text)) == f32:
            return _fixed_notation(text)
    return _fixed_notation(repr(f32))


def _parse_float(raw: bytes | None, bits: int) -> float:
    if raw is None:
        raise ValueError("invalid syntax for NULL")
    if _SPECIAL_FLOAT_RE.fullmatch(raw):
        return float(raw.decode("ascii"))
    if not _FLOAT_RE.fullmatch(raw):
        raise ValueError(f"invalid syntax {_quote(raw)}")
    value = float(raw.decode("ascii"))
    if math.isinf(value):
        raise ValueError(f"value out of range {_quote(raw)}")
    if bits == 32:
        try:
            value = _to_float32(value)
        except OverflowError:
            raise ValueError(f"value out of range {_quote(raw)}") from None
    return value


def _parse_int(raw: bytes | None, bits: int) -> int:
    if raw is None or not _INT_RE.fullmatch(raw):
        raise ValueError(f"invalid syntax {_quote(raw)}")
    value = int(raw)
    low, high = _INT_LIMITS[bits]
    if not low <= value <= high:
        raise ValueError(f"value out of range {_quote(raw)}")
    return value


def _numeric(parse: Callable[[bytes | None, int], object], bits: int):
    def convert(index: int, raw: bytes | None):
        try:
            return parse(raw, bits)
        except ValueError as exc:
            raise ArrayError(f"parsing array element index {index}: {exc}") from exc

    return convert


class _TypedArray(list):
    """A list that reads from and renders to the array text format."""

    @classmethod
    def _source_bytes(cls, src: object) -> bytes:
        if isinstance(src, (bytes, bytearray, memoryview)):
            return bytes(src)
        if isinstance(src, str):
            return src.encode("utf-8")
        raise TypeError(f"cannot convert {type(src).__name__} to {cls.__name__}")

    @classmethod
    def _parse(cls, src, convert: Callable[[int, bytes | None], object]):
        if src is None:
            return None
        elems = scan_linear_array(cls._source_bytes(src), b",", cls.__name__)
        return cls(convert(i, raw) for i, raw in enumerate(elems))

    def _render_all(self, render: Callable[[object], str]) -> str:
        return "{" + ",".join(render(item) for item in self) + "}"


def _convert_bool(index: int, raw: bytes | None) -> bool:
    if raw == b"t":
        return True
    if raw == b"f":
        return False
    raise ArrayError(
        f"could not parse boolean array index {index}: invalid boolean {_quote(raw)}"
    )


def _convert_bytea(index: int, raw: bytes | None) -> bytes | None:
    try:
        return parse_bytea(raw)
    except ArrayError as exc:
        raise ArrayError(f"could not parse bytea array index {index}: {exc}") from exc


def _convert_string(index: int, raw: bytes | None) -> str:
    if raw is None:
        raise ArrayError(
            f"parsing array element index {index}: cannot convert nil to string"
        )
    return raw.decode("utf-8")


class BoolArray(_TypedArray):
    """An array of the PostgreSQL boolean type."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _convert_bool)

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(lambda item: "t" if item else "f")


class ByteaArray(_TypedArray):
    """An array of the PostgreSQL bytea type, rendered in hex format."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _convert_bytea)

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(lambda item: '"\\\\x' + bytes(item or b"").hex() + '"')


class Float64Array(_TypedArray):
    """An array of the PostgreSQL double precision type."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _numeric(_parse_float, 64))

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(_format_float64)


class Float32Array(_TypedArray):
    """An array of single precision floats."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _numeric(_parse_float, 32))

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(_format_float32)


class Int64Array(_TypedArray):
    """An array of the PostgreSQL integer types, limited to 64 bits."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _numeric(_parse_int, 64))

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(lambda item: str(int(item)))


class Int32Array(_TypedArray):
    """An array of the PostgreSQL integer types, limited to 32 bits."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _numeric(_parse_int, 32))

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(lambda item: str(int(item)))


class StringArray(_TypedArray):
    """An array of the PostgreSQL character types."""

    @classmethod
    def scan(cls, src):
        """Parse ``src``; None gives None, other types raise TypeError."""
        return cls._parse(src, _convert_string)

    def value(self) -> str:
        """Render the array in PostgreSQL text format."""
        return self._render_all(lambda item: quote_array_element(str(item)))