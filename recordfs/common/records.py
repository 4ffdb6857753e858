"""Fixed-size binary record layouts.

A layout is anything exposing ``size``, ``encode``, ``decode`` and
``default``.  :class:`StructRecord` covers the common case of a
``struct`` format string, optionally mapped onto a namedtuple or
dataclass.
"""

import dataclasses
import struct
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from recordfs.common.errors import UnalignedFileError


@runtime_checkable
class RecordLayout(Protocol):
    """Encode/decode capability for a fixed-size record type."""

    size: int

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...

    def default(self) -> Any: ...


class StructRecord:
    """Record layout backed by :class:`struct.Struct`.

    Single-field formats (``"<q"``) encode and decode plain scalars.
    Multi-field formats encode tuples; when *factory* is given, decoded
    fields are passed to it positionally (e.g. a namedtuple class or a
    dataclass) and instances of it are accepted by :meth:`encode`.
    """

    def __init__(self, fmt: str, factory: Optional[Callable[..., Any]] = None) -> None:
        self._struct = struct.Struct(fmt)
        self.format = fmt
        self.factory = factory
        self.size = self._struct.size
        if self.size == 0:
            raise ValueError(f"Record format {fmt!r} has zero size")
        # Number of values the format packs ("4s" is one value, "4b" is four).
        self._field_count = len(self._struct.unpack(bytes(self.size)))

    def __repr__(self) -> str:
        return f"StructRecord({self.format!r})"

    def encode(self, value: Any) -> bytes:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            fields = dataclasses.astuple(value)
        elif self._field_count == 1 and self.factory is None:
            fields = (value,)
        else:
            fields = tuple(value)
        return self._struct.pack(*fields)

    def decode(self, data: bytes) -> Any:
        if len(data) != self.size:
            raise ValueError(f"Expected {self.size} bytes for {self!r}, got {len(data)}")
        fields = self._struct.unpack(data)
        if self.factory is not None:
            return self.factory(*fields)
        if self._field_count == 1:
            return fields[0]
        return fields

    def default(self) -> Any:
        """Zero value: the record decoded from ``size`` zero bytes."""
        return self.decode(bytes(self.size))


def decode_many(layout: RecordLayout, data: bytes) -> list:
    """Split *data* into consecutive records.

    Raises:
        UnalignedFileError: If *data* ends with a partial record
    """
    size = layout.size
    if len(data) % size != 0:
        raise UnalignedFileError(size, file_size=len(data))
    return [layout.decode(data[offset : offset + size]) for offset in range(0, len(data), size)]


def encode_many(layout: RecordLayout, values: Any) -> bytes:
    """Concatenate the encodings of *values*."""
    return b"".join(layout.encode(value) for value in values)


INT32 = StructRecord("<i")
UINT32 = StructRecord("<I")
INT64 = StructRecord("<q")
UINT64 = StructRecord("<Q")
FLOAT64 = StructRecord("<d")

STOCK_LAYOUTS = {
    "int32": INT32,
    "uint32": UINT32,
    "int64": INT64,
    "uint64": UINT64,
    "float64": FLOAT64,
}


def layout_from_format(fmt: str) -> StructRecord:
    """Resolve a stock layout name or a raw struct format string."""
    stock = STOCK_LAYOUTS.get(fmt.strip().lower())
    if stock is not None:
        return stock
    try:
        return StructRecord(fmt)
    except struct.error as e:
        raise ValueError(f"Invalid record format {fmt!r}: {e}") from e
