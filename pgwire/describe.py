"""Decoding of the server's describe, key-data and ready-for-query messages."""

from __future__ import annotations

from dataclasses import dataclass, field

from pgwire.buffers import ProtocolError, ReadBuffer
from pgwire.protocol import FieldDesc, Format, TransactionStatus


@dataclass
class RowsHeader:
    """Column names, wire formats and types of a result set."""

    column_names: list[str] = field(default_factory=list)
    column_formats: list[Format] = field(default_factory=list)
    column_types: list[FieldDesc] = field(default_factory=list)


def _read_field(buf: ReadBuffer) -> tuple[str, FieldDesc]:
    name = buf.string()
    buf.next(6)  # table oid and attribute number
    type_oid = buf.oid()
    length = buf.int16()
    modifier = buf.int32()
    return name, FieldDesc(type_oid, length, modifier)


def parse_statement_row_describe(
    buf: ReadBuffer,
) -> tuple[list[str], list[FieldDesc]]:
    """Read a RowDescription sent in reply to describing a statement.

    The format codes are not known at that point and are skipped.
    """
    names: list[str] = []
    types: list[FieldDesc] = []
    for _ in range(buf.int16()):
        name, desc = _read_field(buf)
        buf.next(2)
        names.append(name)
        types.append(desc)
    return names, types


def parse_portal_row_describe(buf: ReadBuffer) -> RowsHeader:
    """Read a RowDescription sent in reply to describing a portal."""
    header = RowsHeader()
    for _ in range(buf.int16()):
        name, desc = _read_field(buf)
        code = buf.int16()
        try:
            fmt = Format(code)
        except ValueError:
            raise ProtocolError(f"unknown format code {code}") from None
        header.column_names.append(name)
        header.column_types.append(desc)
        header.column_formats.append(fmt)
    return header


def parse_parameter_description(buf: ReadBuffer) -> list[int]:
    """Read the parameter type oids of a ParameterDescription message."""
    return [buf.oid() for _ in range(buf.int16())]


def parse_backend_key_data(buf: ReadBuffer) -> tuple[int, int]:
    """Read the process id and secret key used for cancel requests."""
    process_id = buf.int32()
    secret_key = buf.int32()
    return process_id, secret_key


def parse_ready_for_query(buf: ReadBuffer) -> TransactionStatus:
    """Read the transaction status carried by ReadyForQuery."""
    code = buf.byte()
    try:
        return TransactionStatus(chr(code))
    except ValueError:
        raise ProtocolError(f"unknown transactionStatus {code}") from None