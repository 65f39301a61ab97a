"""Primary (.idx) and secondary (.sdx) index files of a table."""

from __future__ import annotations

import os
import re
import struct
from bisect import bisect_left
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import islice

from fixedtable.header import TableError, base_path

_OFFSET = struct.Struct("<i")
_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


@dataclass
class IndexEntry:
    """A primary key and the byte offset of its record in the table file."""

    key: str
    offset: int


@dataclass
class SecondaryEntry:
    """A secondary key value and the primary key of the record holding it."""

    primary_key: str
    value: str


def index_path(bin_path: str | os.PathLike) -> str:
    """Path of the primary index that belongs to a table file."""
    return base_path(bin_path) + ".idx"


def secondary_path(bin_path: str | os.PathLike, field: str) -> str:
    """Path of the secondary index on the given field of a table file."""
    return f"{base_path(bin_path)}-{field}.sdx"


def is_number(text: str) -> bool:
    """Whether text is an unsigned integer or an unsigned decimal number."""
    return _NUMBER.fullmatch(text) is not None


def is_unique(keys: Iterable[str], key: str) -> bool:
    """False if keys already hold a duplicate or hold key, True otherwise."""
    seen: set[str] = set()
    for existing in keys:
        if existing in seen:
            return False
        seen.add(existing)
    return key not in seen


def _fixed(text: str, size: int) -> bytes:
    return text.encode("utf-8")[:size].ljust(size, b"\0")


def _unfixed(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _read(path: str | os.PathLike, missing: str) -> bytes:
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError:
        raise TableError(missing) from None


def _chunks(data: bytes, width: int, count: int) -> Iterator[bytes]:
    if width <= 0:
        return iter(())
    starts = range(0, len(data) - width + 1, width)
    return (data[start:start + width] for start in islice(starts, max(count, 0)))


def _append(path: str | os.PathLike, payload: bytes, missing: str) -> None:
    try:
        with open(path, "r+b") as handle:
            handle.seek(0, os.SEEK_END)
            handle.write(payload)
    except FileNotFoundError:
        raise TableError(missing) from None


def read_index(path: str | os.PathLike, count: int, key_size: int) -> list[IndexEntry]:
    """Read up to count entries of a primary index."""
    data = _read(path, "Index file not found")
    return [
        IndexEntry(_unfixed(chunk[:key_size]), _OFFSET.unpack(chunk[key_size:])[0])
        for chunk in _chunks(data, key_size + _OFFSET.size, count)
    ]


def write_index(path: str | os.PathLike, entries: Iterable[IndexEntry], key_size: int) -> None:
    """Replace a primary index with the given entries."""
    payload = b"".join(_fixed(entry.key, key_size) + _OFFSET.pack(entry.offset) for entry in entries)
    try:
        with open(path, "wb") as handle:
            handle.write(payload)
    except OSError:
        raise TableError("Index file could not be written") from None


def append_index_entry(path: str | os.PathLike, key: str, offset: int, key_size: int) -> None:
    """Add one entry at the end of an existing primary index."""
    _append(path, _fixed(key, key_size) + _OFFSET.pack(offset), "Index file not found")


def read_secondary_index(
    path: str | os.PathLike, count: int, key_size: int, value_size: int
) -> list[SecondaryEntry]:
    """Read up to count entries of a secondary index."""
    data = _read(path, "Secondary index file not found")
    return [
        SecondaryEntry(_unfixed(chunk[:key_size]), _unfixed(chunk[key_size:]))
        for chunk in _chunks(data, key_size + value_size, count)
    ]


def write_secondary_index(
    path: str | os.PathLike, entries: Iterable[SecondaryEntry], key_size: int, value_size: int
) -> None:
    """Replace a secondary index with the given entries."""
    payload = b"".join(
        _fixed(entry.primary_key, key_size) + _fixed(entry.value, value_size) for entry in entries
    )
    try:
        with open(path, "wb") as handle:
            handle.write(payload)
    except OSError:
        raise TableError("Secondary index file could not be written") from None


def append_secondary_entry(
    path: str | os.PathLike, primary_key: str, value: str, key_size: int, value_size: int
) -> None:
    """Add one entry at the end of an existing secondary index."""
    _append(
        path,
        _fixed(primary_key, key_size) + _fixed(value, value_size),
        "Secondary index file not found",
    )


def _int_key(key: str) -> int:
    match = _LEADING_INT.match(key)
    if match is None:
        raise TableError(f"invalid numeric key: {key}")
    return int(match.group(1))


def sort_entries(entries: Iterable[IndexEntry], numeric: bool) -> list[IndexEntry]:
    """Entries ordered by key, as integers when numeric, else as text."""
    if numeric:
        return sorted(entries, key=lambda entry: _int_key(entry.key))
    return sorted(entries, key=lambda entry: entry.key)


def find_entry(entries: list[IndexEntry], key: str, numeric: bool) -> IndexEntry | None:
    """The entry whose key is exactly key, or None when there is none."""
    if not entries:
        return None
    if numeric:
        if not is_number(entries[0].key):
            return None
    elif is_number(entries[min(1, len(entries) - 1)].key):
        return None
    ordered = sort_entries(entries, numeric)
    if numeric:
        pos = bisect_left(ordered, _int_key(key), key=lambda entry: _int_key(entry.key))
    else:
        pos = bisect_left(ordered, key, key=lambda entry: entry.key)
    if pos < len(ordered) and ordered[pos].key == key:
        return ordered[pos]
    return None