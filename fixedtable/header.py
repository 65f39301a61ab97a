"""The header block stored at the start of every table file."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field

_INT = struct.Struct("<i")
HEADER_TERMINATOR = b"~"


class TableError(Exception):
    """Raised when a table file, its indexes or a request on them is invalid."""


@dataclass
class Header:
    """Schema and bookkeeping of a table: fields, keys, avail list and record count."""

    field_names: list[str] = field(default_factory=list)
    field_types: list[str] = field(default_factory=list)
    field_sizes: list[int] = field(default_factory=list)
    secondary_keys: list[str] = field(default_factory=list)
    primary_key: str = ""
    avail_list: int = -1
    record_count: int = 0

    def record_size(self) -> int:
        """Width in bytes of one fixed-size record."""
        return sum(self.field_sizes)

    def field_position(self, name: str) -> int:
        """Position of the named field in the record layout."""
        try:
            return self.field_names.index(name)
        except ValueError:
            raise TableError(f"unknown field: {name}") from None

    def field_size(self, name: str) -> int:
        """Declared length of the named field."""
        return self.field_sizes[self.field_position(name)]

    def primary_key_size(self) -> int:
        """Declared length of the primary key field."""
        return self.field_size(self.primary_key)


def base_path(path: str | os.PathLike) -> str:
    """The path with everything from its last dot removed."""
    text = os.fspath(path)
    dot = text.rfind(".")
    return text if dot == -1 else text[:dot]


def _bin_path(path: str | os.PathLike) -> str:
    return base_path(path) + ".bin"


def _encode_text(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _INT.pack(len(raw)) + raw


def _encode(header: Header) -> bytes:
    parts = [
        _INT.pack(len(header.field_names)),
        _INT.pack(len(header.secondary_keys)),
    ]
    for name, kind, size in zip(header.field_names, header.field_types, header.field_sizes):
        parts.append(_encode_text(name))
        parts.append(_encode_text(kind))
        parts.append(_INT.pack(size))
    parts.extend(_encode_text(key) for key in header.secondary_keys)
    parts.append(_encode_text(header.primary_key))
    parts.append(_INT.pack(header.avail_list))
    parts.append(_INT.pack(header.record_count))
    parts.append(HEADER_TERMINATOR)
    return b"".join(parts)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        if size < 0 or self.pos + size > len(self.data):
            raise TableError("Binary file header is corrupt")
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def integer(self) -> int:
        return _INT.unpack(self.take(_INT.size))[0]

    def text(self) -> str:
        raw = self.take(self.integer())
        return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _parse(data: bytes) -> tuple[Header, int]:
    cursor = _Cursor(data)
    field_count = cursor.integer()
    secondary_count = cursor.integer()
    if field_count < 0 or secondary_count < 0:
        raise TableError("Binary file header is corrupt")
    header = Header()
    for _ in range(field_count):
        header.field_names.append(cursor.text())
        header.field_types.append(cursor.text())
        header.field_sizes.append(cursor.integer())
    header.secondary_keys = [cursor.text() for _ in range(secondary_count)]
    header.primary_key = cursor.text()
    header.avail_list = cursor.integer()
    header.record_count = cursor.integer()
    return header, cursor.pos


def _read_bin(path: str | os.PathLike) -> bytes:
    try:
        with open(_bin_path(path), "rb") as handle:
            return handle.read()
    except OSError:
        raise TableError("Binary file not found") from None


def read_header(path: str | os.PathLike) -> Header:
    """Read the header of the table whose file shares the base name of path."""
    header, _ = _parse(_read_bin(path))
    return header


def write_header(path: str | os.PathLike, header: Header) -> None:
    """Overwrite the header at the start of an existing table file."""
    try:
        with open(_bin_path(path), "r+b") as handle:
            handle.seek(0)
            handle.write(_encode(header))
    except FileNotFoundError:
        raise TableError("Binary file not found") from None


def header_end(path: str | os.PathLike) -> int:
    """Offset of the first record byte, just past the header terminator."""
    data = _read_bin(path)
    _, pos = _parse(data)
    if data[pos:pos + 1] != HEADER_TERMINATOR:
        raise TableError("Binary file header is corrupt")
    return pos + 1