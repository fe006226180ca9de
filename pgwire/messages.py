"""Construction of frontend messages sent outside the extended query flow."""

from __future__ import annotations

import enum
from collections.abc import Mapping

from pgwire.buffers import WriteBuffer
from pgwire.protocol import is_driver_setting

_PROTOCOL_VERSION = 196608
_CANCEL_REQUEST_CODE = 80877102
_SSL_REQUEST_CODE = 80877103


class IsolationLevel(enum.IntEnum):
    """Transaction isolation levels a caller may ask for."""

    DEFAULT = 0
    READ_UNCOMMITTED = 1
    READ_COMMITTED = 2
    WRITE_COMMITTED = 3
    REPEATABLE_READ = 4
    SNAPSHOT = 5
    SERIALIZABLE = 6
    LINEARIZABLE = 7


_ISOLATION_CLAUSES = {
    IsolationLevel.DEFAULT: "",
    IsolationLevel.READ_UNCOMMITTED: " ISOLATION LEVEL READ UNCOMMITTED",
    IsolationLevel.READ_COMMITTED: " ISOLATION LEVEL READ COMMITTED",
    IsolationLevel.REPEATABLE_READ: " ISOLATION LEVEL REPEATABLE READ",
    IsolationLevel.SERIALIZABLE: " ISOLATION LEVEL SERIALIZABLE",
}


def transaction_mode(isolation: IsolationLevel | int, read_only: bool) -> str:
    """Return the text that follows BEGIN for the given transaction options.

    Raises ValueError for isolation levels the server does not offer.
    """
    try:
        level = IsolationLevel(isolation)
    except ValueError:
        level = None
    clause = _ISOLATION_CLAUSES.get(level) if level is not None else None
    if clause is None:
        raise ValueError(f"isolation level not supported: {int(isolation)}")
    return clause + (" READ ONLY" if read_only else " READ WRITE")


def _untyped(buf: WriteBuffer) -> bytes:
    # Startup-style packets carry no leading type byte.
    return buf.wrap()[1:]


def startup_message(options: Mapping[str, str]) -> bytes:
    """Build the StartupMessage carrying every server-side run-time option.

    Options that only configure the client are left out, and ``dbname`` is
    sent under the name the protocol expects, ``database``.
    """
    buf = WriteBuffer(0)
    buf.int32(_PROTOCOL_VERSION)
    for key, value in options.items():
        if is_driver_setting(key):
            continue
        buf.string("database" if key == "dbname" else key)
        buf.string(value)
    buf.string("")
    return _untyped(buf)


def cancel_request_message(process_id: int, secret_key: int) -> bytes:
    """Build a CancelRequest for the backend identified by its key data."""
    buf = WriteBuffer(0)
    buf.int32(_CANCEL_REQUEST_CODE)
    buf.int32(process_id)
    buf.int32(secret_key)
    return _untyped(buf)


def ssl_request_message() -> bytes:
    """Build the SSLRequest that asks the server to negotiate TLS."""
    buf = WriteBuffer(0)
    buf.int32(_SSL_REQUEST_CODE)
    return _untyped(buf)


def simple_query_message(query: str) -> bytes:
    """Build a Query message for the simple query protocol."""
    buf = WriteBuffer("Q")
    buf.string(query)
    return buf.wrap()


def password_message(password: str) -> bytes:
    """Build a PasswordMessage carrying ``password`` as given."""
    buf = WriteBuffer("p")
    buf.string(password)
    return buf.wrap()


def terminate_message() -> bytes:
    """Build the Terminate message that ends a session."""
    return WriteBuffer("X").wrap()