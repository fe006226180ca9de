"""Pure helpers for the PostgreSQL frontend/backend protocol."""

from __future__ import annotations

import enum
import hashlib
import re
import struct
from dataclasses import dataclass

from pgwire.buffers import ProtocolError

_MAX_UINT16 = 0xFFFF
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_VERSION_RE = re.compile(r"\s*([+-]?[0-9]+)\.\s*([+-]?[0-9]+)")

_T_BYTEA = 17
_T_INT8 = 20
_T_INT2 = 21
_T_INT4 = 23
_T_UUID = 2950
_BINARY_OIDS = frozenset({_T_BYTEA, _T_INT8, _T_INT4, _T_INT2, _T_UUID})

_ALL_BINARY = b"\x00\x01\x00\x01"
_ALL_TEXT = b"\x00\x00"

_ROW_COUNT_COMMANDS = ("SELECT ", "UPDATE ", "DELETE ", "FETCH ", "MOVE ", "COPY ")

_DRIVER_SETTINGS = frozenset(
    {
        "host",
        "port",
        "password",
        "sslmode",
        "sslcert",
        "sslkey",
        "sslrootcert",
        "sslinline",
        "sslsni",
        "fallback_application_name",
        "connect_timeout",
        "disable_prepared_binary_result",
        "binary_parameters",
        "krbsrvname",
        "krbspn",
    }
)


class TransactionStatus(enum.Enum):
    """Transaction state reported by ReadyForQuery."""

    IDLE = "I"
    IN_TRANSACTION = "T"
    IN_FAILED_TRANSACTION = "E"

    def __str__(self) -> str:
        return {
            "I": "idle",
            "T": "idle in transaction",
            "E": "in a failed transaction",
        }[self.value]

    @property
    def in_transaction(self) -> bool:
        return self is not TransactionStatus.IDLE


class Format(enum.IntEnum):
    """Wire format of a parameter or result column."""

    TEXT = 0
    BINARY = 1


@dataclass(frozen=True)
class FieldDesc:
    """Type information of one result column."""

    oid: int
    length: int = 0
    modifier: int = 0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a CommandComplete message."""

    rows_affected: int
    tag: str


def parse_command_complete(command_tag: str) -> CommandResult:
    """Split a command tag into the command name and the affected row count."""
    affected: str | None = None
    tag = command_tag
    for prefix in _ROW_COUNT_COMMANDS:
        if tag.startswith(prefix):
            affected = tag[len(prefix):]
            tag = prefix[:-1]
            break

    # INSERT carries the oid of the inserted row before the count; it is ignored.
    if affected is None and tag.startswith("INSERT "):
        parts = tag.split(" ")
        if len(parts) != 3:
            raise ProtocolError(f"unexpected INSERT command tag {tag}")
        affected = parts[-1]
        tag = "INSERT"

    if affected is None:
        return CommandResult(0, tag)

    if not _INT_RE.fullmatch(affected):
        raise ProtocolError(f"could not parse commandTag: invalid syntax {affected!r}")
    count = int(affected)
    if not _INT64_MIN <= count <= _INT64_MAX:
        raise ProtocolError(f"could not parse commandTag: value out of range {affected!r}")
    return CommandResult(count, tag)


def decide_column_formats(
    column_types: list[FieldDesc], force_text: bool
) -> tuple[list[Format], bytes]:
    """Choose result formats for a prepared statement's columns.

    Returns the per-column formats and the encoded format-code block for Bind.
    """
    if not column_types:
        return [], _ALL_TEXT
    if force_text:
        return [Format.TEXT] * len(column_types), _ALL_TEXT

    formats = [
        Format.BINARY if column.oid in _BINARY_OIDS else Format.TEXT
        for column in column_types
    ]
    if all(f is Format.BINARY for f in formats):
        return formats, _ALL_BINARY
    if all(f is Format.TEXT for f in formats):
        return formats, _ALL_TEXT
    if len(formats) > _MAX_UINT16:
        raise ProtocolError(f"too many columns ({len(formats)} > {_MAX_UINT16})")
    data = struct.pack(f">H{len(formats)}H", len(formats), *formats)
    return formats, data


def is_driver_setting(key: str) -> bool:
    """True if a connection option configures the client, not the server."""
    return key in _DRIVER_SETTINGS


def md5_password(password: str, user: str, salt: bytes | str) -> str:
    """Build the response to an MD5 password challenge."""
    if isinstance(salt, str):
        salt = salt.encode("utf-8")
    inner = hashlib.md5((password + user).encode("utf-8")).hexdigest()
    return "md5" + hashlib.md5(inner.encode("ascii") + bytes(salt)).hexdigest()


def parse_server_version(text: str) -> int | None:
    """Turn a server_version string into server_version_num form, or None."""
    match = _VERSION_RE.match(text)
    if match is None:
        return None
    major, minor = (int(g) for g in match.groups())
    return major * 10000 + minor * 100