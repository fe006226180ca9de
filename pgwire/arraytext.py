"""Parsing and quoting of the PostgreSQL array text representation."""

from __future__ import annotations

import binascii

_OPEN = ord("{")
_CLOSE = ord("}")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_OCTAL_DIGITS = frozenset(b"01234567")


class ArrayError(ValueError):
    """An array value could not be parsed or converted."""


def _as_bytes(value: bytes | bytearray | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _quote_char(b: int) -> str:
    c = chr(b)
    if c == "'":
        return "'\\''"
    if c == "\\":
        return "'\\\\'"
    named = {"\n": "\\n", "\t": "\\t", "\r": "\\r", "\0": "\\x00"}
    if c in named:
        return f"'{named[c]}'"
    if c.isprintable():
        return f"'{c}'"
    return f"'\\x{b:02x}'"


def _unexpected(src: bytes, i: int) -> ArrayError:
    return ArrayError(
        f"unable to parse array; unexpected {_quote_char(src[i])} at offset {i}"
    )


def _format_dims(dims: list[int]) -> str:
    return "[" + "][".join(str(d) for d in dims) + "]"


def parse_array(
    src: bytes | str, delimiter: bytes | str = b","
) -> tuple[list[int], list[bytes | None]]:
    """Split an array literal into its dimensions and flat element list.

    Only the form the server emits is accepted: whitespace is significant
    and NULL is case-sensitive. NULL elements come back as None.
    """
    src = _as_bytes(src)
    delim = _as_bytes(delimiter)
    n = len(src)

    if not src or src[0] != _OPEN:
        raise ArrayError("unable to parse array; expected '{' at offset 0")

    depth = 0
    i = 0
    elems: list[bytes | None] = []
    dims: list[int] = []
    empty = False

    while i < n:
        c = src[i]
        if c == _OPEN:
            depth += 1
            i += 1
        elif c == _CLOSE:
            empty = True
            break
        else:
            break

    if not empty:
        dims = [0] * i
        while True:
            # One element (possibly preceded by opening brackets).
            while i < n:
                c = src[i]
                if c == _OPEN:
                    if depth == len(dims):
                        break
                    depth += 1
                    dims[depth - 1] = 0
                    i += 1
                elif c == _QUOTE:
                    elem = bytearray()
                    escape = False
                    i += 1
                    finished = False
                    while i < n:
                        ch = src[i]
                        if escape:
                            elem.append(ch)
                            escape = False
                        elif ch == _BACKSLASH:
                            escape = True
                        elif ch == _QUOTE:
                            elems.append(bytes(elem))
                            i += 1
                            finished = True
                            break
                        else:
                            elem.append(ch)
                        i += 1
                    if finished:
                        break
                else:
                    start = i
                    finished = False
                    while i < n:
                        if src.startswith(delim, i) or src[i] == _CLOSE:
                            raw = src[start:i]
                            if not raw:
                                raise _unexpected(src, i)
                            elems.append(None if raw == b"NULL" else raw)
                            finished = True
                            break
                        i += 1
                    if finished:
                        break

            # Delimiters and closing brackets after the element.
            another = False
            while i < n:
                if src.startswith(delim, i) and depth > 0:
                    dims[depth - 1] += 1
                    i += len(delim)
                    another = True
                    break
                if src[i] == _CLOSE and depth > 0:
                    dims[depth - 1] += 1
                    depth -= 1
                    i += 1
                else:
                    raise _unexpected(src, i)
            if not another:
                break

    while i < n:
        if src[i] == _CLOSE and depth > 0:
            depth -= 1
            i += 1
        else:
            raise _unexpected(src, i)

    if depth > 0:
        raise ArrayError(f"unable to parse array; expected '}}' at offset {i}")

    if any(d == 0 or len(elems) % d for d in dims):
        raise ArrayError(
            "multidimensional arrays must have elements with matching dimensions"
        )
    return dims, elems


def scan_linear_array(
    src: bytes | str, delimiter: bytes | str, type_name: str
) -> list[bytes | None]:
    """Parse a one-dimensional array literal, rejecting deeper nesting."""
    dims, elems = parse_array(src, delimiter)
    if len(dims) > 1:
        raise ArrayError(f"cannot convert ARRAY{_format_dims(dims)} to {type_name}")
    return elems


def quote_array_element(value: str | bytes) -> str | bytes:
    """Double-quote an element, escaping quotes and backslashes.

    Returns the same type it was given.
    """
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    data = bytes(value)
    return b'"' + data.replace(b"\\", b"\\\\").replace(b'"', b'\\"') + b'"'


def parse_bytea(src: bytes | str | None) -> bytes | None:
    """Decode a bytea value in either hex or escape text format."""
    if src is None:
        return None
    data = _as_bytes(src)

    if data.startswith(b"\\x"):
        try:
            return binascii.unhexlify(data[2:])
        except (binascii.Error, ValueError) as exc:
            raise ArrayError(f"could not parse bytea value: {exc}") from exc

    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        if data[i] == _BACKSLASH:
            if data[i + 1 : i + 2] == b"\\":
                out.append(_BACKSLASH)
                i += 2
                continue
            if n < i + 4:
                raise ArrayError(f"invalid bytea sequence {data[i:]!r}")
            digits = data[i + 1 : i + 4]
            if not all(d in _OCTAL_DIGITS for d in digits) or int(digits, 8) > 0xFF:
                raise ArrayError(
                    f"could not parse bytea value: invalid octal escape {digits!r}"
                )
            out.append(int(digits, 8))
            i += 4
        else:
            j = data.find(b"\\", i)
            if j < 0:
                j = n
            out += data[i:j]
            i = j
    return bytes(out)