import pytest

from pgwire.buffers import ProtocolError, ReadBuffer
from pgwire.protocol import (
    CommandResult,
    FieldDesc,
    Format,
    TransactionStatus,
    decide_column_formats,
    is_driver_setting,
    md5_password,
    parse_command_complete,
    parse_server_version,
)


@pytest.mark.parametrize(
    "tag, rows, name",
    [
        ("SELECT 5", 5, "SELECT"),
        ("UPDATE 10", 10, "UPDATE"),
        ("DELETE 0", 0, "DELETE"),
        ("FETCH 2", 2, "FETCH"),
        ("MOVE 1", 1, "MOVE"),
        ("COPY 7", 7, "COPY"),
        ("INSERT 0 3", 3, "INSERT"),
    ],
)
def test_command_complete_with_rows(tag, rows, name):
    assert parse_command_complete(tag) == CommandResult(rows, name)


def test_command_complete_without_rows():
    assert parse_command_complete("CREATE TABLE") == CommandResult(0, "CREATE TABLE")


def test_command_complete_bad_insert():
    with pytest.raises(ProtocolError, match="unexpected INSERT command tag"):
        parse_command_complete("INSERT 1")


@pytest.mark.parametrize("tag", ["SELECT abc", "UPDATE ", "SELECT 99999999999999999999"])
def test_command_complete_bad_count(tag):
    with pytest.raises(ProtocolError, match="could not parse commandTag"):
        parse_command_complete(tag)


def test_column_formats_empty():
    assert decide_column_formats([], False) == ([], b"\x00\x00")


def test_column_formats_all_binary():
    columns = [FieldDesc(17), FieldDesc(20), FieldDesc(21), FieldDesc(23), FieldDesc(2950)]
    formats, data = decide_column_formats(columns, False)
    assert formats == [Format.BINARY] * 5
    assert data == bytes([0, 1, 0, 1])


def test_column_formats_all_text():
    formats, data = decide_column_formats([FieldDesc(25), FieldDesc(1043)], False)
    assert formats == [Format.TEXT, Format.TEXT]
    assert data == bytes([0, 0])


def test_column_formats_forced_text():
    formats, data = decide_column_formats([FieldDesc(23), FieldDesc(17)], True)
    assert formats == [Format.TEXT, Format.TEXT]
    assert data == bytes([0, 0])


def test_column_formats_mixed():
    formats, data = decide_column_formats([FieldDesc(23), FieldDesc(25)], False)
    assert formats == [Format.BINARY, Format.TEXT]
    assert data == b"\x00\x02\x00\x01\x00\x00"


def test_column_formats_mixed_block_layout():
    columns = [FieldDesc(25), FieldDesc(20), FieldDesc(25), FieldDesc(17), FieldDesc(700)]
    formats, data = decide_column_formats(columns, False)
    buf = ReadBuffer(data)
    assert buf.int16() == len(columns)
    assert [buf.int16() for _ in columns] == [int(f) for f in formats]
    assert buf.remaining() == 0


def test_column_formats_too_many():
    columns = [FieldDesc(23)] + [FieldDesc(25)] * 65535
    with pytest.raises(ProtocolError, match="too many columns"):
        decide_column_formats(columns, False)


@pytest.mark.parametrize(
    "key",
    [
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
    ],
)
def test_driver_settings(key):
    assert is_driver_setting(key) is True


@pytest.mark.parametrize("key", ["user", "dbname", "application_name", "search_path"])
def test_server_settings(key):
    assert is_driver_setting(key) is False


def test_md5_password_shape():
    password = "password"
    result = md5_password(password, "alice", b"salt")
    assert result.startswith("md5")
    assert len(result) == 35
    assert all(c in "0123456789abcdef" for c in result[3:])


def test_md5_password_depends_on_salt_and_user():
    password = "password"
    base = md5_password(password, "alice", b"abcd")
    assert base == md5_password(password, "alice", b"abcd")
    assert base != md5_password(password, "alice", b"abce")
    assert base != md5_password(password, "bob", b"abcd")


def test_md5_password_accepts_str_salt():
    password = "password"
    assert md5_password(password, "alice", "abcd") == md5_password(password, "alice", b"abcd")


def test_server_version_pinned():
    assert parse_server_version("9.6.1") == 90600


def test_server_version_ordering():
    assert parse_server_version("9.6") < parse_server_version("10.0")
    assert parse_server_version("10.0") < parse_server_version("10.4 (Debian)")


@pytest.mark.parametrize("text", ["16beta1", "abc", ""])
def test_server_version_unparseable(text):
    assert parse_server_version(text) is None


@pytest.mark.parametrize(
    "code, text, in_txn",
    [
        ("I", "idle", False),
        ("T", "idle in transaction", True),
        ("E", "in a failed transaction", True),
    ],
)
def test_transaction_status(code, text, in_txn):
    status = TransactionStatus(code)
    assert str(status) == text
    assert status.in_transaction is in_txn


def test_transaction_status_unknown():
    with pytest.raises(ValueError):
        TransactionStatus("X")