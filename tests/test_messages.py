import struct

import pytest

from pgwire.buffers import ReadBuffer
from pgwire.messages import (
    IsolationLevel,
    cancel_request_message,
    password_message,
    simple_query_message,
    ssl_request_message,
    startup_message,
    terminate_message,
    transaction_mode,
)


def _untyped_payload(message: bytes) -> ReadBuffer:
    buf = ReadBuffer(message)
    assert buf.int32() == len(message)
    return buf


def _typed_payload(message: bytes, code: str) -> ReadBuffer:
    assert message[:1] == code.encode()
    buf = ReadBuffer(message[1:])
    assert buf.int32() == len(message) - 1
    return buf


@pytest.mark.parametrize(
    "level, read_only, expected",
    [
        (IsolationLevel.DEFAULT, False, " READ WRITE"),
        (IsolationLevel.DEFAULT, True, " READ ONLY"),
        (
            IsolationLevel.READ_UNCOMMITTED,
            False,
            " ISOLATION LEVEL READ UNCOMMITTED READ WRITE",
        ),
        (
            IsolationLevel.READ_COMMITTED,
            True,
            " ISOLATION LEVEL READ COMMITTED READ ONLY",
        ),
        (
            IsolationLevel.REPEATABLE_READ,
            False,
            " ISOLATION LEVEL REPEATABLE READ READ WRITE",
        ),
        (IsolationLevel.SERIALIZABLE, True, " ISOLATION LEVEL SERIALIZABLE READ ONLY"),
    ],
)
def test_transaction_mode(level, read_only, expected):
    assert transaction_mode(level, read_only) == expected


def test_transaction_mode_accepts_plain_int():
    assert transaction_mode(int(IsolationLevel.SERIALIZABLE), False) == transaction_mode(
        IsolationLevel.SERIALIZABLE, False
    )


@pytest.mark.parametrize(
    "level",
    [
        IsolationLevel.WRITE_COMMITTED,
        IsolationLevel.SNAPSHOT,
        IsolationLevel.LINEARIZABLE,
        42,
    ],
)
def test_transaction_mode_unsupported(level):
    with pytest.raises(ValueError, match="isolation level not supported"):
        transaction_mode(level, False)


def test_startup_message_layout():
    password = "password"
    message = startup_message(
        {
            "user": "alice",
            "dbname": "shop",
            "host": "localhost",
            "password": password,
            "sslmode": "disable",
            "application_name": "app",
        }
    )
    buf = _untyped_payload(message)
    assert buf.int32() == 196608
    pairs = []
    while True:
        key = buf.string()
        if not key:
            break
        pairs.append((key, buf.string()))
    assert pairs == [("user", "alice"), ("database", "shop"), ("application_name", "app")]
    assert buf.remaining() == 0


def test_startup_message_empty_options():
    buf = _untyped_payload(startup_message({}))
    assert buf.int32() == 196608
    assert buf.string() == ""
    assert buf.remaining() == 0


def test_cancel_request_message():
    message = cancel_request_message(1234, -5)
    buf = _untyped_payload(message)
    assert buf.int32() == 80877102
    assert buf.int32() == 1234
    assert buf.int32() == -5
    assert buf.remaining() == 0


def test_ssl_request_message_bytes():
    assert ssl_request_message() == struct.pack(">II", 8, 80877103)


def test_simple_query_message():
    message = simple_query_message("SELECT 1")
    buf = _typed_payload(message, "Q")
    assert buf.string() == "SELECT 1"
    assert buf.remaining() == 0


def test_simple_query_message_empty():
    buf = _typed_payload(simple_query_message(";"), "Q")
    assert buf.string() == ";"
    assert buf.remaining() == 0


def test_password_message():
    password = "password"
    buf = _typed_payload(password_message(password), "p")
    assert buf.string() == password
    assert buf.remaining() == 0


def test_terminate_message_bytes():
    assert terminate_message() == b"X\x00\x00\x00\x04"