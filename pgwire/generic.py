"""Arrays of arbitrary element type and nesting depth."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from pgwire.arraytext import ArrayError, parse_array, quote_array_element
from pgwire.arrays import (
    BoolArray,
    ByteaArray,
    Float32Array,
    Float64Array,
    Int32Array,
    Int64Array,
    StringArray,
)

_TYPED_ARRAYS = (
    BoolArray,
    ByteaArray,
    Float64Array,
    Float32Array,
    Int64Array,
    Int32Array,
    StringArray,
)

_DISPATCH: tuple[tuple[type, Callable[[Any], bool]], ...] = (
    (BoolArray, lambda x: isinstance(x, bool)),
    (Int64Array, lambda x: isinstance(x, int) and not isinstance(x, bool)),
    (Float64Array, lambda x: isinstance(x, float)),
    (StringArray, lambda x: isinstance(x, str)),
    (ByteaArray, lambda x: isinstance(x, (bytes, bytearray))),
)


def _is_valuer(obj: object) -> bool:
    return callable(getattr(obj, "value", None))


def _delimiter_of(obj: object) -> str:
    method = getattr(obj, "array_delimiter", None)
    if callable(method):
        return method()
    return ","


def _format_dims(dims: list[int]) -> str:
    return "[" + "][".join(str(d) for d in dims) + "]"


def _convert(item: object) -> object:
    """Reduce an element to None, bool, int, float, str or bytes."""
    converted = item.value() if _is_valuer(item) else item
    if converted is None or isinstance(converted, (bool, int, float, str, bytes)):
        return converted
    if isinstance(converted, (bytearray, memoryview)):
        return bytes(converted)
    raise TypeError(f"unsupported type {type(converted).__name__}")


def _render_scalar(value: object) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        quoted = quote_array_element(value)
        return quoted.decode("utf-8", errors="surrogateescape")
    if isinstance(value, str):
        return quote_array_element(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return Float64Array([value]).value()[1:-1]
    return str(value)


def _render_element(item: object) -> tuple[str, str]:
    """Render one element; also return the delimiter that must follow it."""
    if not _is_valuer(item) and isinstance(item, (list, tuple)):
        if item:
            return _render_array(item)
        return "", ""
    delimiter = _delimiter_of(item)
    return _render_scalar(_convert(item)), delimiter


def _render_array(items: list | tuple) -> tuple[str, str]:
    parts: list[str] = []
    delimiter = ","
    for index, item in enumerate(items):
        text, following = _render_element(item)
        if index:
            parts.append(delimiter)
        parts.append(text)
        delimiter = following
    return "{" + "".join(parts) + "}", delimiter


@dataclass
class GenericArray:
    """An array of any element type.

    For rendering, ``a`` is a (possibly nested) list or tuple. For scanning,
    ``a`` is the list that receives the elements; ``element_type`` must offer
    a ``scan(raw)`` class method and may offer ``array_delimiter()``. When
    ``size`` is set the target behaves as a fixed-length array.
    """

    a: Any
    element_type: type | None = None
    size: int | None = None

    def _describe(self) -> str:
        name = self.element_type.__name__ if self.element_type else "object"
        if self.size is None:
            return f"list of {name}"
        return f"{self.size}-element list of {name}"

    def _assigner(self) -> Callable[[bytes | None], Any]:
        element_type = self.element_type
        scanner = getattr(element_type, "scan", None)
        if callable(scanner):
            return scanner
        name = element_type.__name__ if element_type else "object"

        def unsupported(_raw: bytes | None) -> Any:
            raise ArrayError(
                f"scanning to {name} is not implemented; only types with a scan method"
            )

        return unsupported

    def scan(self, src: bytes | str | None) -> list | None:
        """Fill the target list from an array literal and return it.

        A NULL source empties a variable-length target and returns None.
        """
        target = self.a
        if not isinstance(target, list):
            raise TypeError(f"destination {type(target).__name__} is not a list")

        if isinstance(src, (bytes, bytearray, memoryview)):
            data = bytes(src)
        elif isinstance(src, str):
            data = src.encode("utf-8")
        elif src is None and self.size is None:
            target.clear()
            return None
        else:
            raise TypeError(f"cannot convert {type(src).__name__} to {self._describe()}")

        assign = self._assigner()
        delimiter = _delimiter_of(self.element_type) if self.element_type else ","
        dims, elems = parse_array(data, delimiter)

        if len(dims) > 1:
            raise ArrayError(
                f"scanning from multidimensional ARRAY{_format_dims(dims)} is not implemented"
            )
        if not dims:
            dims = [0]
        if self.size is not None and self.size != dims[0]:
            raise ArrayError(
                f"cannot convert ARRAY{_format_dims(dims)} to {self._describe()}"
            )

        values = []
        for index, raw in enumerate(elems):
            try:
                values.append(assign(raw))
            except (ValueError, TypeError) as exc:
                raise ArrayError(f"parsing array element index {index}: {exc}") from exc

        target[:] = values
        return target

    def value(self) -> str | None:
        """Render the array in PostgreSQL text format."""
        if self.a is None:
            return None
        if not isinstance(self.a, (list, tuple)):
            raise TypeError(f"Unable to convert {type(self.a).__name__} to array")
        if not self.a:
            return "{}"
        return _render_array(self.a)[0]


def array(a: Any):
    """Pick the most specific array wrapper for ``a``."""
    if isinstance(a, (GenericArray,) + _TYPED_ARRAYS):
        return a
    if isinstance(a, list) and a:
        for cls, matches in _DISPATCH:
            if all(matches(item) for item in a):
                return cls(a)
    return GenericArray(a)