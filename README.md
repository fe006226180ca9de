# pgwire

Building blocks for talking to a PostgreSQL server at the wire-protocol level,
using only the standard library.

## What it provides

- `pgwire.buffers`: `ReadBuffer` reads big-endian integers (`int32`, `int16`,
  `oid`), NUL-terminated strings, single bytes and raw byte runs from a message
  payload, and reports what is left with `remaining()`. `WriteBuffer` builds one
  or more length-prefixed messages (`int32`, `int16`, `string`, `byte`,
  `bytes`, `next` to start another message, `wrap` to finish). Malformed or
  truncated input raises `ProtocolError`.
- `pgwire.arraytext`: `parse_array` splits an array literal into its
  dimensions and a flat list of elements (NULL becomes `None`);
  `scan_linear_array` does the same but rejects more than one dimension;
  `quote_array_element` double-quotes a `str` or `bytes` element; `parse_bytea`
  decodes bytea in hex or escape format. Errors raise `ArrayError`, a
  `ValueError`.
- `pgwire.arrays`: list types `BoolArray`, `ByteaArray`, `Float64Array`,
  `Float32Array`, `Int64Array`, `Int32Array` and `StringArray`. Each has a
  `scan` class method that parses the server's text form (returning `None` for
  `None`, raising `TypeError` for a source that is not `str` or `bytes`, and
  `ArrayError` for a bad literal or element), and a `value()` method that
  renders the text form to send.
- `pgwire.generic`: `GenericArray` renders nested lists and tuples of any
  depth, using an element's `value()` method and `array_delimiter()` method
  when it has them; it scans one-dimensional literals into a target list using
  an element type's `scan` class method. `array(a)` picks `BoolArray`,
  `Int64Array`, `Float64Array`, `StringArray` or `ByteaArray` for a non-empty
  list whose items are all of one such kind, and `GenericArray` otherwise.
- `pgwire.protocol`: `parse_command_complete` (returns a `CommandResult` with
  `rows_affected` and `tag`), `decide_column_formats` for prepared-statement
  result columns (`FieldDesc`, `Format`), `is_driver_setting`,
  `md5_password`, `parse_server_version`, and the `TransactionStatus` enum.
- `pgwire.describe`: decoders for RowDescription
  (`parse_statement_row_describe`, `parse_portal_row_describe` returning a
  `RowsHeader`), ParameterDescription (`parse_parameter_description`),
  BackendKeyData (`parse_backend_key_data`) and ReadyForQuery
  (`parse_ready_for_query`).
- `pgwire.messages`: builders for the startup packet (`startup_message`),
  `ssl_request_message`, `cancel_request_message`, `simple_query_message`,
  `password_message` and `terminate_message`, plus `transaction_mode`, which
  turns an `IsolationLevel` and a read-only flag into the text that follows
  `BEGIN`.

## Install

    pip install .

## Examples

Typed arrays:

    from pgwire.arrays import Int64Array, StringArray

    Int64Array([1, 2, 3]).value()              # '{1,2,3}'
    StringArray.scan('{"a\\\\b","c d",","}')   # ['a\\b', 'c d', ',']

Nested arrays:

    from pgwire.generic import GenericArray

    GenericArray([[1, 2], [3, 4]]).value()     # '{{1,2},{3,4}}'
    GenericArray([None, "x"]).value()          # '{NULL,"x"}'

Raw array text:

    from pgwire.arraytext import parse_array

    dims, elems = parse_array(b"{{a,b},{c,d}}", b",")
    # dims == [2, 2], elems == [b"a", b"b", b"c", b"d"]

Messages and command tags:

    from pgwire.messages import simple_query_message, transaction_mode, IsolationLevel
    from pgwire.protocol import parse_command_complete

    simple_query_message("SELECT 1")           # b'Q\x00\x00\x00\rSELECT 1\x00'
    transaction_mode(IsolationLevel.SERIALIZABLE, True)
    # ' ISOLATION LEVEL SERIALIZABLE READ ONLY'
    parse_command_complete("INSERT 0 5")       # CommandResult(rows_affected=5, tag='INSERT')

## What it does not do

This package builds and decodes messages; it does not open connections. There
is no socket handling, TLS negotiation, connection-string parsing, password
file lookup, SCRAM or Kerberos authentication, query execution, result-row
decoding, cancellation watcher or LISTEN/NOTIFY listener, and no command-line
program. Those have to be supplied by the code that uses these pieces.

## Tests

    pip install .[test]
    pytest